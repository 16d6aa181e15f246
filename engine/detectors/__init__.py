"""
Detector registry for daily energy series. Each detector is a pure function of (series, capacity, params) returning zero or more findings; the registry is the single list the job runner iterates, so adding a detector never touches orchestration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from engine.aggregate import DailyAggregate
from engine.detectors.degradation import detect_gradual_degradation
from engine.detectors.findings import AffectedPeriod, DetectionDetails, DetectorParams, Finding
from engine.detectors.intermittent import detect_intermittent_failure
from engine.detectors.production import (
    detect_below_threshold,
    detect_significant_drop,
    detect_zero_production,
)
from engine.detectors.spike import detect_sensor_spike
from engine.enums import AnomalyType

Detector = Callable[[Sequence[DailyAggregate], float, DetectorParams], List[Finding]]

DETECTORS: Dict[AnomalyType, Detector] = {
    AnomalyType.ZERO_PRODUCTION: detect_zero_production,
    AnomalyType.SIGNIFICANT_DROP: detect_significant_drop,
    AnomalyType.GRADUAL_DEGRADATION: detect_gradual_degradation,
    AnomalyType.SENSOR_SPIKE: detect_sensor_spike,
    AnomalyType.INTERMITTENT_FAILURE: detect_intermittent_failure,
    AnomalyType.BELOW_THRESHOLD: detect_below_threshold,
}


def run_detectors(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams | None = None,
) -> List[Finding]:
    if not series:
        return []
    if params is None:
        params = DetectorParams.from_settings()
    findings: List[Finding] = []
    for detector in DETECTORS.values():
        findings.extend(detector(series, capacity, params))
    return findings


__all__ = [
    "AffectedPeriod",
    "DETECTORS",
    "DetectionDetails",
    "Detector",
    "DetectorParams",
    "Finding",
    "run_detectors",
]
