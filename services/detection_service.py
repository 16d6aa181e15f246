from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import settings
from engine.aggregate import window_bounds
from engine.detectors import DetectorParams, Finding, run_detectors
from engine.exceptions import PartialRunFailure, UpstreamUnavailable
from store import AnomalyStore, Device, DeviceDirectory, ReadingStore

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DeviceOutcome:
    device_id: str
    anomalies_found: int = 0
    new_anomalies: int = 0
    error: Optional[str] = None


@dataclass
class RunSummary:
    processed: int = 0
    anomalies_found: int = 0
    new_anomalies: int = 0
    failed: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    failures: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DetectionService:
    def __init__(
        self,
        devices: Optional[DeviceDirectory] = None,
        readings: Optional[ReadingStore] = None,
        anomalies: Optional[AnomalyStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        params: Optional[DetectorParams] = None,
    ) -> None:
        self._devices = devices or DeviceDirectory()
        self._readings = readings or ReadingStore()
        self._anomalies = anomalies or AnomalyStore()
        self._clock = clock or _utcnow
        self._params = params

    def _detector_params(self) -> DetectorParams:
        return self._params or DetectorParams.from_settings(settings)

    def _analyze_sync(self, device: Device, window_days: Optional[int] = None) -> List[Finding]:
        start, end = window_bounds(self._clock().date(), window_days)
        series = self._readings.sum_daily_energy(device.id, start, end)
        if not series:
            return []
        return run_detectors(series, device.capacity_watts, self._detector_params())

    def _persist_sync(self, device_id: str, findings: List[Finding]) -> int:
        detected_at = self._clock()
        created = 0
        for finding in findings:
            if self._anomalies.find_equivalent(device_id, *finding.dedup_key) is not None:
                continue
            if self._anomalies.insert(device_id, finding, detected_at) is not None:
                created += 1
        return created

    def _process_device_sync(self, device: Device) -> Tuple[int, int]:
        findings = self._analyze_sync(device)
        created = self._persist_sync(device.id, findings)
        return len(findings), created

    async def _run_device(self, device: Device, semaphore: asyncio.Semaphore) -> DeviceOutcome:
        async with semaphore:
            try:
                found, created = await asyncio.to_thread(self._process_device_sync, device)
            except UpstreamUnavailable:
                raise
            except Exception as exc:
                failure = PartialRunFailure(device.id, exc)
                log.exception("%s", failure)
                return DeviceOutcome(device_id=device.id, error=str(failure))
        return DeviceOutcome(device_id=device.id, anomalies_found=found, new_anomalies=created)

    async def detect_for_device(self, device_id: str, window_days: Optional[int] = None) -> List[Finding]:
        def _detect() -> List[Finding]:
            device = self._devices.get_device(device_id)
            return self._analyze_sync(device, window_days)

        return await asyncio.to_thread(_detect)

    async def run_detection_job(self) -> RunSummary:
        started_at = self._clock()
        log.info("Starting anomaly detection job")

        # a failure here means nothing was analyzed; let it reach the caller
        devices = await asyncio.to_thread(self._devices.list_active_devices)

        semaphore = asyncio.Semaphore(max(1, int(settings.detection_max_concurrency)))
        results = await asyncio.gather(
            *(self._run_device(device, semaphore) for device in devices),
            return_exceptions=True,
        )
        # an unreachable store aborts the whole run
        errors = [item for item in results if isinstance(item, BaseException)]
        if errors:
            log.error("Anomaly detection aborted: %s", errors[0])
            raise errors[0]
        outcomes: List[DeviceOutcome] = list(results)

        finished_at = self._clock()
        summary = RunSummary(
            processed=len(outcomes),
            anomalies_found=sum(item.anomalies_found for item in outcomes),
            new_anomalies=sum(item.new_anomalies for item in outcomes),
            failed=sum(1 for item in outcomes if item.error),
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=int((finished_at - started_at).total_seconds() * 1000),
            failures=[item.error for item in outcomes if item.error],
        )
        log.info(
            "Anomaly detection complete. Processed: %d, Found: %d, New: %d, Failed: %d",
            summary.processed,
            summary.anomalies_found,
            summary.new_anomalies,
            summary.failed,
        )
        return summary

    async def trigger_detection(self) -> RunSummary:
        log.info("Manually triggering anomaly detection")
        try:
            summary = await self.run_detection_job()
        except Exception:
            log.exception("Manual anomaly detection failed")
            raise
        log.info("Manual anomaly detection completed: new=%d", summary.new_anomalies)
        return summary


detection_service = DetectionService()
