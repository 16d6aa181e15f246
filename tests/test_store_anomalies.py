"""
Test Suite for the Anomaly Store

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from dataclasses import replace
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from engine.detectors import AffectedPeriod, Finding
from engine.detectors.findings import details_for
from engine.enums import AnomalyStatus, AnomalyType, ResolutionAction, Severity
from engine.exceptions import InvalidStateTransition, NotFound
from store import AnomalyFilters, AnomalyStore

from conftest import NOW

DAY = date(2026, 6, 25)


def _finding(anomaly_type=AnomalyType.ZERO_PRODUCTION, start=DAY, end=None):
    return Finding(
        anomaly_type=anomaly_type,
        period=AffectedPeriod(start_date=start, end_date=end or start),
        description=f"{anomaly_type.value} on {start.isoformat()}",
        details=details_for(anomaly_type, expected_value=2500.0, actual_value=20.0, context={"window_size": 1}),
        estimated_energy_loss=2480.0,
    )


@pytest.fixture
def store(add_device):
    add_device("unit-1")
    add_device("unit-2")
    return AnomalyStore()


def test_insert_creates_open_anomaly(store):
    record = store.insert("unit-1", _finding(), NOW)
    assert record is not None
    assert record.status is AnomalyStatus.OPEN
    assert record.severity is Severity.CRITICAL
    assert record.detection_details["method"] == "absolute_threshold"
    assert record.detection_details["context"] == {"window_size": 1}
    assert record.recommended_action
    assert record.is_active

    found = store.find_equivalent("unit-1", AnomalyType.ZERO_PRODUCTION, DAY, DAY)
    assert found is not None and found.id == record.id


def test_duplicate_key_is_a_benign_no_op(store):
    assert store.insert("unit-1", _finding(), NOW) is not None
    assert store.insert("unit-1", _finding(), NOW + timedelta(hours=6)) is None
    assert store.count(AnomalyFilters(device_id="unit-1")) == 1


def test_dedup_key_includes_period_type_and_device(store):
    store.insert("unit-1", _finding(), NOW)
    assert store.insert("unit-1", _finding(start=DAY + timedelta(days=1)), NOW) is not None
    assert store.insert("unit-1", _finding(AnomalyType.SENSOR_SPIKE), NOW) is not None
    assert store.insert("unit-2", _finding(), NOW) is not None
    assert store.count(AnomalyFilters()) == 4


def test_duplicate_is_logged_at_info(store, caplog):
    store.insert("unit-1", _finding(), NOW)
    with caplog.at_level(logging.INFO, logger="store.anomalies"):
        assert store.insert("unit-1", _finding(), NOW) is None
    assert any(r.levelno == logging.INFO and "Duplicate" in r.getMessage() for r in caplog.records)


def test_integrity_error_without_equivalent_row_propagates(store):
    broken = replace(_finding(), description=None)
    with pytest.raises(IntegrityError):
        store.insert("unit-1", broken, NOW)
    assert store.count(AnomalyFilters()) == 0


def test_finding_dedup_key_is_type_and_period():
    finding = _finding(AnomalyType.SIGNIFICANT_DROP, start=DAY, end=DAY + timedelta(days=3))
    assert finding.dedup_key == (AnomalyType.SIGNIFICANT_DROP, DAY, DAY + timedelta(days=3))


def test_find_equivalent_misses_other_periods(store):
    store.insert("unit-1", _finding(), NOW)
    assert store.find_equivalent("unit-1", AnomalyType.ZERO_PRODUCTION, DAY, DAY + timedelta(days=1)) is None


def test_get_unknown_raises_not_found(store):
    with pytest.raises(NotFound):
        store.get("missing")


def test_transition_updates_single_record(store):
    first = store.insert("unit-1", _finding(), NOW)
    second = store.insert("unit-1", _finding(start=DAY - timedelta(days=1)), NOW)

    later = NOW + timedelta(hours=1)
    acked = store.transition(first.id, ResolutionAction.acknowledge, "op-1", later)
    assert acked.status is AnomalyStatus.ACKNOWLEDGED
    assert acked.acknowledged_by == "op-1"
    assert store.get(second.id).status is AnomalyStatus.OPEN


def test_rejected_transition_leaves_stored_status(store):
    record = store.insert("unit-1", _finding(), NOW)
    store.transition(record.id, ResolutionAction.resolve, "op-1", NOW, "fixed")
    with pytest.raises(InvalidStateTransition):
        store.transition(record.id, ResolutionAction.acknowledge, "op-2", NOW)
    stored = store.get(record.id)
    assert stored.status is AnomalyStatus.RESOLVED
    assert stored.resolved_by == "op-1"
    assert stored.resolution_notes == "fixed"
    assert stored.acknowledged_by is None


def test_transition_unknown_raises_not_found(store):
    with pytest.raises(NotFound):
        store.transition("missing", ResolutionAction.acknowledge, "op-1", NOW)


def test_query_orders_newest_first_and_filters(store):
    old = store.insert("unit-1", _finding(start=DAY - timedelta(days=2)), NOW - timedelta(days=2))
    new = store.insert("unit-1", _finding(AnomalyType.SENSOR_SPIKE), NOW)
    store.insert("unit-2", _finding(), NOW - timedelta(days=1))

    records = store.query(AnomalyFilters(device_id="unit-1"))
    assert [r.id for r in records] == [new.id, old.id]

    spikes = store.query(AnomalyFilters(anomaly_type=AnomalyType.SENSOR_SPIKE))
    assert [r.id for r in spikes] == [new.id]

    critical = store.query(AnomalyFilters(severity=Severity.CRITICAL))
    assert len(critical) == 2

    page = store.query(AnomalyFilters(limit=1, offset=1))
    assert len(page) == 1
    assert store.count(AnomalyFilters(limit=1, offset=1)) == 3


def test_aggregate_groups(store):
    store.insert("unit-1", _finding(), NOW)
    store.insert("unit-1", _finding(start=DAY - timedelta(days=1)), NOW)
    store.insert("unit-2", _finding(AnomalyType.SENSOR_SPIKE), NOW)

    assert dict(store.aggregate("anomaly_type")) == {"ZERO_PRODUCTION": 2, "SENSOR_SPIKE": 1}
    assert dict(store.aggregate("severity", device_id="unit-2")) == {"INFO": 1}
    assert dict(store.aggregate("status")) == {"OPEN": 3}
    with pytest.raises(ValueError):
        store.aggregate("device_id")


def test_trend_rows_since(store):
    store.insert("unit-1", _finding(), NOW)
    store.insert("unit-1", _finding(start=DAY - timedelta(days=1)), NOW - timedelta(days=40))
    rows = store.trend_rows(NOW - timedelta(days=30))
    assert len(rows) == 1
    assert rows[0][1] == "CRITICAL"
