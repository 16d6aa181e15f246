from __future__ import annotations

from engine.enums import AnomalyType

RECOMMENDED_ACTIONS: dict[AnomalyType, str] = {
    AnomalyType.ZERO_PRODUCTION: (
        "Immediately inspect the solar unit, check electrical connections, and verify inverter status."
    ),
    AnomalyType.SIGNIFICANT_DROP: (
        "Check for new shading sources, dirt accumulation on panels, or partial equipment failure."
    ),
    AnomalyType.GRADUAL_DEGRADATION: (
        "Schedule maintenance to inspect panel condition. Consider cleaning panels and checking for equipment wear."
    ),
    AnomalyType.SENSOR_SPIKE: (
        "Check sensor calibration and data transmission. This reading likely indicates a sensor malfunction."
    ),
    AnomalyType.INTERMITTENT_FAILURE: (
        "Check electrical connections, inverter, and wiring for loose connections or intermittent faults."
    ),
    AnomalyType.BELOW_THRESHOLD: (
        "Review system installation, check for persistent shading, or consider system inspection for underlying issues."
    ),
}

DETECTION_METHODS: dict[AnomalyType, str] = {
    AnomalyType.ZERO_PRODUCTION: "absolute_threshold",
    AnomalyType.SIGNIFICANT_DROP: "window_average_comparison",
    AnomalyType.GRADUAL_DEGRADATION: "linear_regression",
    AnomalyType.SENSOR_SPIKE: "capacity_threshold",
    AnomalyType.INTERMITTENT_FAILURE: "pattern_analysis",
    AnomalyType.BELOW_THRESHOLD: "capacity_percentage_threshold",
}
