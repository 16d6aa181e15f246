from __future__ import annotations

from typing import List, Sequence

from engine.aggregate import DailyAggregate
from engine.detectors.findings import AffectedPeriod, DetectorParams, Finding, details_for
from engine.enums import AnomalyType


def detect_sensor_spike(
    series: Sequence[DailyAggregate],
    capacity: float,
    params: DetectorParams,
) -> List[Finding]:
    max_daily_output = capacity * params.spike_peak_sun_hours
    spike_threshold = max_daily_output * params.spike_multiplier

    findings: List[Finding] = []
    for day in series:
        if day.total_energy <= spike_threshold:
            continue
        deviation = ((day.total_energy - max_daily_output) / max_daily_output) * 100 if max_daily_output > 0 else 0.0
        findings.append(Finding(
            anomaly_type=AnomalyType.SENSOR_SPIKE,
            period=AffectedPeriod.single_day(day.date),
            description=(
                f"Unrealistic energy reading detected: {day.total_energy:.1f} kWh on {day.date.isoformat()}. "
                f"Maximum expected: {max_daily_output:.1f} kWh."
            ),
            details=details_for(
                AnomalyType.SENSOR_SPIKE,
                expected_value=max_daily_output,
                actual_value=day.total_energy,
                deviation_percent=deviation,
                threshold=spike_threshold,
                context={
                    "system_capacity": capacity,
                    "peak_sun_hours": params.spike_peak_sun_hours,
                },
            ),
        ))
    return findings
