"""
Device directory: the solar units eligible for analysis and their rated capacity.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from config import DEVICE_STATUS_ACTIVE, settings
from database import get_db_session
from db_models import SolarUnit
from engine.exceptions import NotFound, UpstreamUnavailable
from store.retry import retry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Device:
    id: str
    capacity_watts: float
    serial_number: str = ""


def _to_device(row: SolarUnit) -> Device:
    return Device(id=row.id, capacity_watts=float(row.capacity_watts), serial_number=row.serial_number)


class DeviceDirectory:
    def list_active_devices(self) -> List[Device]:
        try:
            return self._list_active()
        except SQLAlchemyError as exc:
            log.error("Device directory unavailable: %s", exc)
            raise UpstreamUnavailable(f"Device directory unavailable: {exc}") from exc

    def get_device(self, device_id: str) -> Device:
        try:
            device = self._get(device_id)
        except SQLAlchemyError as exc:
            raise UpstreamUnavailable(f"Device directory unavailable: {exc}") from exc
        if device is None:
            raise NotFound(f"Solar unit {device_id} not found")
        return device

    @retry(
        attempts=settings.store_retry_attempts,
        delay=settings.store_retry_delay_seconds,
        backoff=settings.store_retry_backoff,
        exceptions=(OperationalError,),
    )
    def _list_active(self) -> List[Device]:
        with get_db_session() as db:
            rows = db.scalars(
                select(SolarUnit).where(SolarUnit.status == DEVICE_STATUS_ACTIVE).order_by(SolarUnit.id)
            ).all()
            return [_to_device(row) for row in rows]

    @retry(
        attempts=settings.store_retry_attempts,
        delay=settings.store_retry_delay_seconds,
        backoff=settings.store_retry_backoff,
        exceptions=(OperationalError,),
    )
    def _get(self, device_id: str) -> Device | None:
        with get_db_session() as db:
            row = db.get(SolarUnit, device_id)
            return _to_device(row) if row is not None else None
