"""
Anomaly service: operator resolution actions, filtered listings and statistics over stored anomalies.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from config import settings
from engine.enums import ResolutionAction
from engine.stats import StatsReport, bucket_trend, counts_from_rows, trend_cutoff
from store import AnomalyFilters, AnomalyRecord, AnomalyStore, DeviceDirectory

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clamp_limit(filters: AnomalyFilters) -> AnomalyFilters:
    limit = max(1, min(int(settings.list_max_limit), int(filters.limit)))
    return replace(filters, limit=limit, offset=max(0, int(filters.offset)))


class AnomalyService:
    def __init__(
        self,
        store: Optional[AnomalyStore] = None,
        devices: Optional[DeviceDirectory] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store or AnomalyStore()
        self._devices = devices or DeviceDirectory()
        self._clock = clock or _utcnow

    async def _transition(
        self,
        anomaly_id: str,
        action: ResolutionAction,
        actor_id: str,
        notes: Optional[str] = None,
    ) -> AnomalyRecord:
        record = await asyncio.to_thread(
            self._store.transition, anomaly_id, action, actor_id, self._clock(), notes
        )
        log.info("Anomaly %s moved to %s by %s", anomaly_id, record.status.value, actor_id)
        return record

    async def acknowledge(self, anomaly_id: str, actor_id: str) -> AnomalyRecord:
        return await self._transition(anomaly_id, ResolutionAction.acknowledge, actor_id)

    async def resolve(self, anomaly_id: str, actor_id: str, notes: Optional[str] = None) -> AnomalyRecord:
        return await self._transition(anomaly_id, ResolutionAction.resolve, actor_id, notes)

    async def mark_false_positive(
        self, anomaly_id: str, actor_id: str, notes: Optional[str] = None
    ) -> AnomalyRecord:
        return await self._transition(anomaly_id, ResolutionAction.false_positive, actor_id, notes)

    async def get(self, anomaly_id: str) -> AnomalyRecord:
        return await asyncio.to_thread(self._store.get, anomaly_id)

    async def list_for_device(self, device_id: str, filters: AnomalyFilters) -> List[AnomalyRecord]:
        def _list() -> List[AnomalyRecord]:
            self._devices.get_device(device_id)
            return self._store.query(_clamp_limit(replace(filters, device_id=device_id, offset=0)))

        return await asyncio.to_thread(_list)

    async def list_all(self, filters: AnomalyFilters) -> Tuple[List[AnomalyRecord], int]:
        def _list() -> Tuple[List[AnomalyRecord], int]:
            page = _clamp_limit(filters)
            return self._store.query(page), self._store.count(page)

        return await asyncio.to_thread(_list)

    async def stats(self, device_id: Optional[str] = None) -> StatsReport:
        def _stats() -> StatsReport:
            since = trend_cutoff(self._clock(), settings.stats_trend_days)
            return StatsReport(
                by_type=counts_from_rows(self._store.aggregate("anomaly_type", device_id)),
                by_severity=counts_from_rows(self._store.aggregate("severity", device_id)),
                by_status=counts_from_rows(self._store.aggregate("status", device_id)),
                recent_trend=bucket_trend(self._store.trend_rows(since, device_id)),
            )

        return await asyncio.to_thread(_stats)


anomaly_service = AnomalyService()
