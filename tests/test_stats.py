"""
Test Suite for Anomaly Statistics Rollups

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime, timezone

from engine.enums import AnomalyType
from engine.stats import StatsReport, TrendBucket, bucket_trend, counts_from_rows, trend_cutoff


def test_counts_from_rows_accepts_enums_and_strings():
    counts = counts_from_rows([(AnomalyType.SENSOR_SPIKE, 2), ("SIGNIFICANT_DROP", 3), (None, 9)])
    assert counts == {"SENSOR_SPIKE": 2, "SIGNIFICANT_DROP": 3}


def test_bucket_trend_ascending_and_split_by_severity():
    rows = [
        (datetime(2026, 6, 29, 9), "CRITICAL"),
        (datetime(2026, 6, 27, 9), "INFO"),
        (datetime(2026, 6, 29, 15), "WARNING"),
        (datetime(2026, 6, 29, 16), "WARNING"),
    ]
    assert bucket_trend(rows) == [
        TrendBucket(date="2026-06-27", total=1, info=1),
        TrendBucket(date="2026-06-29", total=3, critical=1, warning=2),
    ]


def test_trend_cutoff():
    now = datetime(2026, 6, 30, tzinfo=timezone.utc)
    assert trend_cutoff(now, 30) == datetime(2026, 5, 31, tzinfo=timezone.utc)


def test_report_to_dict():
    report = StatsReport(by_type={"SENSOR_SPIKE": 1}, recent_trend=[TrendBucket(date="2026-06-29", total=1, info=1)])
    payload = report.to_dict()
    assert payload["by_type"] == {"SENSOR_SPIKE": 1}
    assert payload["recent_trend"][0]["info"] == 1
    assert payload["by_status"] == {}
