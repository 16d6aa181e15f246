"""
Read-side rollups over stored anomalies: counts by type, severity and status, plus a daily trend split by severity.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Tuple

from engine.enums import Severity


@dataclass
class TrendBucket:
    date: str
    total: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0


@dataclass
class StatsReport:
    by_type: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)
    recent_trend: List[TrendBucket] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def trend_cutoff(now: datetime, days: int) -> datetime:
    return now - timedelta(days=max(0, int(days)))


def counts_from_rows(rows: Iterable[Tuple[Any, int]]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for key, count in rows:
        if key is None:
            continue
        out[str(getattr(key, "value", key))] = int(count)
    return out


def bucket_trend(rows: Iterable[Tuple[datetime, str]]) -> List[TrendBucket]:
    buckets: Dict[date, TrendBucket] = defaultdict(lambda: TrendBucket(date=""))
    for detected_at, severity in rows:
        day = detected_at.date() if isinstance(detected_at, datetime) else detected_at
        bucket = buckets[day]
        bucket.date = day.isoformat()
        bucket.total += 1
        if severity == Severity.CRITICAL.value:
            bucket.critical += 1
        elif severity == Severity.WARNING.value:
            bucket.warning += 1
        elif severity == Severity.INFO.value:
            bucket.info += 1
    return [buckets[day] for day in sorted(buckets)]
