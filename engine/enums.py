"""
Enumerations for Anomaly Types, Severity Levels, Resolution Statuses and Operator Actions

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


class AnomalyType(str, Enum):
    ZERO_PRODUCTION = "ZERO_PRODUCTION"
    SIGNIFICANT_DROP = "SIGNIFICANT_DROP"
    GRADUAL_DEGRADATION = "GRADUAL_DEGRADATION"
    SENSOR_SPIKE = "SENSOR_SPIKE"
    INTERMITTENT_FAILURE = "INTERMITTENT_FAILURE"
    BELOW_THRESHOLD = "BELOW_THRESHOLD"

    @property
    def severity(self) -> Severity:
        return SEVERITY_BY_TYPE[self]


class AnomalyStatus(str, Enum):
    OPEN = "OPEN"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    RESOLVED = "RESOLVED"
    FALSE_POSITIVE = "FALSE_POSITIVE"

    @property
    def is_terminal(self) -> bool:
        return self in (AnomalyStatus.RESOLVED, AnomalyStatus.FALSE_POSITIVE)

    @property
    def is_active(self) -> bool:
        return self in (AnomalyStatus.OPEN, AnomalyStatus.ACKNOWLEDGED)


class ResolutionAction(str, Enum):
    acknowledge = "acknowledge"
    resolve = "resolve"
    false_positive = "false_positive"


SEVERITY_BY_TYPE: dict[AnomalyType, Severity] = {
    AnomalyType.ZERO_PRODUCTION: Severity.CRITICAL,
    AnomalyType.SIGNIFICANT_DROP: Severity.WARNING,
    AnomalyType.GRADUAL_DEGRADATION: Severity.WARNING,
    AnomalyType.SENSOR_SPIKE: Severity.INFO,
    AnomalyType.INTERMITTENT_FAILURE: Severity.WARNING,
    AnomalyType.BELOW_THRESHOLD: Severity.INFO,
}
