"""
Intermittent failure detection: sporadic near-zero days separated by recovery, typical of loose connections or a flapping inverter.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date
from typing import List, Sequence

from engine.aggregate import DailyAggregate
from engine.detectors.findings import AffectedPeriod, DetectorParams, Finding, details_for
from engine.enums import AnomalyType


def _has_gap(failure_days: Sequence[date]) -> bool:
    return any((later - earlier).days > 1 for earlier, later in zip(failure_days, failure_days[1:]))


def detect_intermittent_failure(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    if len(series) < params.intermittent_min_days:
        return []

    threshold = capacity * params.intermittent_failure_ratio
    failure_days = [day.date for day in series if day.total_energy <= threshold]
    recovery_days = len(series) - len(failure_days)

    if len(failure_days) < params.intermittent_min_failure_days:
        return []
    if recovery_days < params.intermittent_min_recovery_days:
        return []
    if not _has_gap(failure_days):
        return []

    return [Finding(
        anomaly_type=AnomalyType.INTERMITTENT_FAILURE,
        period=AffectedPeriod(start_date=series[0].date, end_date=series[-1].date),
        description=(
            f"Intermittent failure pattern detected: {len(failure_days)} failure days out of "
            f"{len(series)} days, with recovery periods in between."
        ),
        details=details_for(
            AnomalyType.INTERMITTENT_FAILURE,
            threshold=threshold,
            context={
                "failure_days": [day.isoformat() for day in failure_days],
                "recovery_days": recovery_days,
                "total_days": len(series),
            },
        ),
        estimated_energy_loss=len(failure_days) * capacity * params.expected_output_ratio,
    )]
