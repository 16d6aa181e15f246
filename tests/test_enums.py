"""
Test cases for enums used in the anomaly engine: Severity, AnomalyType, AnomalyStatus and ResolutionAction, validating their properties and relationships.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.constants import DETECTION_METHODS, RECOMMENDED_ACTIONS
from engine.enums import AnomalyStatus, AnomalyType, ResolutionAction, Severity


def test_severity_is_fixed_per_type():
    assert AnomalyType.ZERO_PRODUCTION.severity is Severity.CRITICAL
    assert AnomalyType.SIGNIFICANT_DROP.severity is Severity.WARNING
    assert AnomalyType.GRADUAL_DEGRADATION.severity is Severity.WARNING
    assert AnomalyType.INTERMITTENT_FAILURE.severity is Severity.WARNING
    assert AnomalyType.SENSOR_SPIKE.severity is Severity.INFO
    assert AnomalyType.BELOW_THRESHOLD.severity is Severity.INFO


def test_every_type_has_method_and_action():
    for anomaly_type in AnomalyType:
        assert DETECTION_METHODS[anomaly_type]
        assert RECOMMENDED_ACTIONS[anomaly_type]


def test_status_activity():
    assert AnomalyStatus.OPEN.is_active
    assert AnomalyStatus.ACKNOWLEDGED.is_active
    assert AnomalyStatus.RESOLVED.is_terminal
    assert AnomalyStatus.FALSE_POSITIVE.is_terminal
    assert not AnomalyStatus.RESOLVED.is_active


def test_resolution_actions():
    assert [action.value for action in ResolutionAction] == ["acknowledge", "resolve", "false_positive"]
