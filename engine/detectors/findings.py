"""
Finding, evidence and parameter types shared by the detectors.

A finding is an in-memory anomaly candidate. Severity and recommended action are
derived from the anomaly type, never stored separately, so the static mapping
cannot drift per finding.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from config import Settings, settings as default_settings
from engine.constants import DETECTION_METHODS, RECOMMENDED_ACTIONS
from engine.enums import AnomalyType, Severity


@dataclass(frozen=True)
class AffectedPeriod:
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(f"affected period starts after it ends: {self.start_date} > {self.end_date}")

    @classmethod
    def single_day(cls, day: date) -> "AffectedPeriod":
        return cls(start_date=day, end_date=day)


@dataclass(frozen=True)
class DetectionDetails:
    method: str
    expected_value: Optional[float] = None
    actual_value: Optional[float] = None
    deviation_percent: Optional[float] = None
    threshold: Optional[float] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"method": self.method}
        for key in ("expected_value", "actual_value", "deviation_percent", "threshold"):
            value = getattr(self, key)
            if value is not None:
                out[key] = float(value)
        if self.context:
            out["context"] = dict(self.context)
        return out


@dataclass(frozen=True)
class Finding:
    anomaly_type: AnomalyType
    period: AffectedPeriod
    description: str
    details: DetectionDetails
    estimated_energy_loss: Optional[float] = None

    @property
    def severity(self) -> Severity:
        return self.anomaly_type.severity

    @property
    def recommended_action(self) -> str:
        return RECOMMENDED_ACTIONS[self.anomaly_type]

    @property
    def dedup_key(self) -> tuple[AnomalyType, date, date]:
        return (self.anomaly_type, self.period.start_date, self.period.end_date)


def details_for(anomaly_type: AnomalyType, **kwargs: Any) -> DetectionDetails:
    return DetectionDetails(method=DETECTION_METHODS[anomaly_type], **kwargs)


@dataclass(frozen=True)
class DetectorParams:
    zero_production_ratio: float = 0.01
    expected_output_ratio: float = 0.5
    drop_threshold_percent: float = 50.0
    drop_min_days: int = 3
    degradation_threshold_percent: float = 15.0
    degradation_min_days: int = 7
    spike_peak_sun_hours: float = 8.0
    spike_multiplier: float = 1.5
    intermittent_failure_ratio: float = 0.05
    intermittent_min_failure_days: int = 2
    intermittent_min_recovery_days: int = 2
    intermittent_min_days: int = 5
    below_threshold_sun_hours: float = 4.0
    below_threshold_percent: float = 20.0
    below_threshold_day_fraction: float = 0.5
    below_threshold_min_days: int = 3

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "DetectorParams":
        source = source or default_settings
        return cls(**{name: getattr(source, name) for name in cls.__dataclass_fields__})
