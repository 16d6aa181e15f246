"""
Daily aggregation of raw energy readings into calendar-day totals over a trailing detection window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.aggregate.daily import (
    DailyAggregate,
    aggregate_daily,
    restrict_to_window,
    window_bounds,
    window_instants,
)

__all__ = ["DailyAggregate", "aggregate_daily", "restrict_to_window", "window_bounds", "window_instants"]
