"""
Reading store: energy generation records written by the external sync, summed per calendar day.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from config import settings
from database import get_db_session
from db_models import EnergyGenerationRecord
from engine.aggregate import DailyAggregate, aggregate_daily, restrict_to_window, window_instants
from engine.exceptions import UpstreamUnavailable
from store.retry import retry

log = logging.getLogger(__name__)


class ReadingStore:
    def sum_daily_energy(self, device_id: str, start: date, end: date) -> List[DailyAggregate]:
        lower, upper = window_instants(start, end)
        try:
            readings = self._fetch(device_id, lower, upper)
        except SQLAlchemyError as exc:
            log.error("Reading store unavailable for device %s: %s", device_id, exc)
            raise UpstreamUnavailable(f"Reading store unavailable: {exc}") from exc
        return restrict_to_window(aggregate_daily(readings), start, end)

    @retry(
        attempts=settings.store_retry_attempts,
        delay=settings.store_retry_delay_seconds,
        backoff=settings.store_retry_backoff,
        exceptions=(OperationalError,),
    )
    def _fetch(self, device_id: str, lower: datetime, upper: datetime) -> List[Tuple[datetime, float]]:
        with get_db_session() as db:
            rows = db.execute(
                select(EnergyGenerationRecord.timestamp, EnergyGenerationRecord.energy_generated)
                .where(
                    and_(
                        EnergyGenerationRecord.device_id == device_id,
                        EnergyGenerationRecord.timestamp >= lower,
                        EnergyGenerationRecord.timestamp < upper,
                    )
                )
                .order_by(EnergyGenerationRecord.timestamp)
            ).all()
            return [(stamp, energy) for stamp, energy in rows]
