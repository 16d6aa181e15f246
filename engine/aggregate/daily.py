"""
Daily aggregation of raw energy readings into one total per calendar day over a trailing window, so the detectors can work on a compact, ordered series where days without readings are simply absent.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Tuple

from config import settings


@dataclass(frozen=True)
class DailyAggregate:
    date: date
    total_energy: float


def window_bounds(today: date, window_days: int | None = None) -> Tuple[date, date]:
    if window_days is None:
        window_days = settings.detection_window_days
    return today - timedelta(days=max(0, int(window_days))), today


def window_instants(start: date, end: date) -> Tuple[datetime, datetime]:
    # half-open [start 00:00, end+1 00:00)
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def _calendar_date(stamp: datetime | date) -> date:
    if isinstance(stamp, datetime):
        return stamp.date()
    return stamp


def aggregate_daily(readings: Iterable[Tuple[datetime, float]]) -> List[DailyAggregate]:
    totals: Dict[date, float] = defaultdict(float)
    for stamp, energy in readings:
        try:
            value = float(energy)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(value):
            continue
        totals[_calendar_date(stamp)] += value
    return [DailyAggregate(date=day, total_energy=totals[day]) for day in sorted(totals)]


def restrict_to_window(series: Iterable[DailyAggregate], start: date, end: date) -> List[DailyAggregate]:
    return [item for item in series if start <= item.date <= end]
