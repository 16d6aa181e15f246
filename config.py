"""
Constants and configuration for SolarWatch.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os

from pydantic_settings import BaseSettings

SOLARWATCH_DATABASE_URL = os.getenv("SOLARWATCH_DATABASE_URL", "sqlite:///./solarwatch.db")

# detection job cadence, every six hours by default
SOLARWATCH_DETECTION_INTERVAL_SECONDS = float(os.getenv("SOLARWATCH_DETECTION_INTERVAL_SECONDS", "21600"))
SOLARWATCH_DETECTION_WINDOW_DAYS = int(os.getenv("SOLARWATCH_DETECTION_WINDOW_DAYS", "14"))

HEALTH_PATH = "/ready"

DEVICE_STATUS_ACTIVE = "ACTIVE"


class Settings(BaseSettings):
    database_url: str = SOLARWATCH_DATABASE_URL

    # scheduler
    detection_enabled: bool = True
    detection_interval_seconds: float = SOLARWATCH_DETECTION_INTERVAL_SECONDS
    detection_run_on_startup: bool = False
    detection_max_concurrency: int = 4
    detection_window_days: int = SOLARWATCH_DETECTION_WINDOW_DAYS

    # zero production: a day at or below this share of capacity counts as no output
    zero_production_ratio: float = 0.01
    # expected daily output used as evidence and for loss estimates
    expected_output_ratio: float = 0.5

    # significant drop against the window mean
    drop_threshold_percent: float = 50.0
    drop_min_days: int = 3

    # gradual degradation (least-squares trend over the window)
    degradation_threshold_percent: float = 15.0
    degradation_min_days: int = 7

    # sensor spike against the physically plausible maximum
    spike_peak_sun_hours: float = 8.0
    spike_multiplier: float = 1.5

    # intermittent failure pattern
    intermittent_failure_ratio: float = 0.05
    intermittent_min_failure_days: int = 2
    intermittent_min_recovery_days: int = 2
    intermittent_min_days: int = 5

    # persistent underperformance against a sun-hours baseline
    below_threshold_sun_hours: float = 4.0
    below_threshold_percent: float = 20.0
    below_threshold_day_fraction: float = 0.5
    below_threshold_min_days: int = 3

    # read side
    stats_trend_days: int = 30
    list_default_limit: int = 100
    list_max_limit: int = 500

    # storage retries for directory and reading lookups
    store_retry_attempts: int = 3
    store_retry_delay_seconds: float = 0.5
    store_retry_backoff: float = 2.0

    db_pool_size: int = int(os.getenv("SOLARWATCH_DB_POOL_SIZE", "10"))
    db_max_overflow: int = int(os.getenv("SOLARWATCH_DB_MAX_OVERFLOW", "20"))
    db_pool_timeout: int = int(os.getenv("SOLARWATCH_DB_POOL_TIMEOUT", "30"))
    db_pool_recycle: int = int(os.getenv("SOLARWATCH_DB_POOL_RECYCLE", "1800"))

    host: str = "0.0.0.0"
    port: int = 4330
    ssl_enabled: bool = False
    ssl_certfile: str = ""
    ssl_keyfile: str = ""

    model_config = {
        "env_prefix": "SOLARWATCH_",
        "extra": "ignore",
    }

settings = Settings()
