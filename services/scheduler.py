"""
Periodic trigger for the anomaly detection job.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from config import settings
from services.detection_service import DetectionService, RunSummary

log = logging.getLogger(__name__)


class DetectionScheduler:
    def __init__(
        self,
        service: DetectionService,
        interval_seconds: Optional[float] = None,
        run_on_startup: Optional[bool] = None,
    ) -> None:
        self._service = service
        self._interval = interval_seconds
        self._run_on_startup = run_on_startup
        self._task: Optional[asyncio.Task] = None

    @property
    def interval_seconds(self) -> float:
        if self._interval is not None:
            return max(1.0, float(self._interval))
        return max(1.0, float(settings.detection_interval_seconds))

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        log.info("Anomaly detection scheduled every %.0fs", self.interval_seconds)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        run_first = settings.detection_run_on_startup if self._run_on_startup is None else self._run_on_startup
        if run_first:
            await self.tick()
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.tick()

    async def tick(self) -> Optional[RunSummary]:
        log.info("Starting scheduled anomaly detection")
        try:
            summary = await self._service.run_detection_job()
        except Exception:
            log.exception("Scheduled anomaly detection failed")
            return None
        log.info(
            "Scheduled anomaly detection completed: processed=%d found=%d new=%d failed=%d",
            summary.processed,
            summary.anomalies_found,
            summary.new_anomalies,
            summary.failed,
        )
        return summary
