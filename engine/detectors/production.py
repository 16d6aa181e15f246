"""
Production-level detectors: zero output days, significant drops against the window mean, and persistent output below a capacity-derived baseline.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from engine.aggregate import DailyAggregate
from engine.detectors.findings import AffectedPeriod, DetectorParams, Finding, details_for
from engine.enums import AnomalyType


def _totals(series: Sequence[DailyAggregate]) -> np.ndarray:
    return np.array([item.total_energy for item in series], dtype=float)


def detect_zero_production(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    threshold = capacity * params.zero_production_ratio
    expected = capacity * params.expected_output_ratio

    findings: List[Finding] = []
    for day in series:
        if day.total_energy > threshold:
            continue
        deviation = ((expected - day.total_energy) / expected) * 100 if expected > 0 else 100.0
        findings.append(Finding(
            anomaly_type=AnomalyType.ZERO_PRODUCTION,
            period=AffectedPeriod.single_day(day.date),
            description=(
                f"Zero energy production detected on {day.date.isoformat()}. "
                f"Total output: {day.total_energy:.2f} kWh."
            ),
            details=details_for(
                AnomalyType.ZERO_PRODUCTION,
                expected_value=expected,
                actual_value=day.total_energy,
                deviation_percent=deviation,
                threshold=threshold,
            ),
            estimated_energy_loss=max(0.0, expected - day.total_energy),
        ))
    return findings


def detect_significant_drop(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    if len(series) < params.drop_min_days:
        return []

    mean = float(_totals(series).mean())
    if mean <= 0:
        return []

    findings: List[Finding] = []
    for day in series:
        # zero days belong to the zero-production detector
        if day.total_energy == 0:
            continue
        deviation = ((mean - day.total_energy) / mean) * 100
        if deviation <= params.drop_threshold_percent:
            continue
        findings.append(Finding(
            anomaly_type=AnomalyType.SIGNIFICANT_DROP,
            period=AffectedPeriod.single_day(day.date),
            description=(
                f"Production dropped {deviation:.1f}% below the {len(series)}-day average on "
                f"{day.date.isoformat()}. Expected ~{mean:.1f} kWh, got {day.total_energy:.1f} kWh."
            ),
            details=details_for(
                AnomalyType.SIGNIFICANT_DROP,
                expected_value=mean,
                actual_value=day.total_energy,
                deviation_percent=deviation,
                threshold=params.drop_threshold_percent,
                context={"window_size": len(series), "window_average": mean},
            ),
            estimated_energy_loss=mean - day.total_energy,
        ))
    return findings


def detect_below_threshold(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    if len(series) < params.below_threshold_min_days:
        return []

    baseline = capacity * params.below_threshold_sun_hours
    threshold = baseline * (params.below_threshold_percent / 100)
    below = [day for day in series if 0 < day.total_energy < threshold]
    producing = sum(1 for day in series if day.total_energy > 0)
    required = max(1, math.ceil(producing * params.below_threshold_day_fraction))
    if len(below) < required:
        return []

    average = float(_totals(series).mean())
    return [Finding(
        anomaly_type=AnomalyType.BELOW_THRESHOLD,
        period=AffectedPeriod(start_date=series[0].date, end_date=series[-1].date),
        description=(
            f"System consistently underperforming: {len(below)} out of {producing} producing days delivered "
            f"less than {params.below_threshold_percent:g}% of expected capacity."
        ),
        details=details_for(
            AnomalyType.BELOW_THRESHOLD,
            expected_value=baseline,
            threshold=threshold,
            context={
                "system_capacity": capacity,
                "expected_daily_output": baseline,
                "below_threshold_days": len(below),
                "average_production": average,
            },
        ),
    )]
