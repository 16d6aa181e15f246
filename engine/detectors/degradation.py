"""
Gradual degradation detection using an ordinary least-squares trend over the daily window, flagging a sustained decline that is large relative to the window mean, to catch panel ageing, soiling or slow equipment wear.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from engine.aggregate import DailyAggregate
from engine.detectors.findings import AffectedPeriod, DetectorParams, Finding, details_for
from engine.enums import AnomalyType


@dataclass(frozen=True)
class DegradationTrend:
    slope: float
    total_decline: float
    decline_percent: float
    average_energy: float
    span_days: int


def _day_offsets(series: Sequence[DailyAggregate]) -> np.ndarray:
    # calendar offsets keep the slope in energy per day when the window has gaps
    origin = series[0].date
    return np.array([(item.date - origin).days for item in series], dtype=float)


def least_squares_slope(x: np.ndarray, y: np.ndarray) -> float:
    n = len(x)
    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_xy = float((x * y).sum())
    sum_x2 = float((x * x).sum())
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def trend(series: Sequence[DailyAggregate]) -> Optional[DegradationTrend]:
    if len(series) < 2:
        return None
    x = _day_offsets(series)
    y = np.array([item.total_energy for item in series], dtype=float)
    average = float(y.mean())
    if average <= 0:
        return None

    slope = least_squares_slope(x, y)
    span = int(x[-1])
    total_decline = slope * span
    return DegradationTrend(
        slope=slope,
        total_decline=total_decline,
        decline_percent=abs(total_decline) / average * 100,
        average_energy=average,
        span_days=span,
    )


def detect_gradual_degradation(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    if len(series) < params.degradation_min_days:
        return []

    fit = trend(series)
    if fit is None or fit.slope >= 0 or fit.decline_percent <= params.degradation_threshold_percent:
        return []

    first, last = series[0], series[-1]
    return [Finding(
        anomaly_type=AnomalyType.GRADUAL_DEGRADATION,
        period=AffectedPeriod(start_date=first.date, end_date=last.date),
        description=(
            f"Gradual degradation detected: Production declined {fit.decline_percent:.1f}% over "
            f"{len(series)} days. Average daily decline: {abs(fit.slope):.2f} kWh."
        ),
        details=details_for(
            AnomalyType.GRADUAL_DEGRADATION,
            expected_value=first.total_energy,
            actual_value=last.total_energy,
            deviation_percent=fit.decline_percent,
            threshold=params.degradation_threshold_percent,
            context={
                "slope": fit.slope,
                "total_decline": fit.total_decline,
                "window_size": len(series),
                "average_energy": fit.average_energy,
            },
        ),
    )]
