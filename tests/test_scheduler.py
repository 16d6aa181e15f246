"""
Test Suite for the Detection Scheduler

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio

import pytest

from services.detection_service import RunSummary
from services.scheduler import DetectionScheduler


class CountingService:
    def __init__(self, fail=False):
        self.calls = 0
        self.fail = fail

    async def run_detection_job(self):
        self.calls += 1
        if self.fail:
            raise RuntimeError("database down")
        return RunSummary(processed=2, anomalies_found=1, new_anomalies=1)


@pytest.mark.asyncio
async def test_tick_returns_summary():
    scheduler = DetectionScheduler(CountingService(), interval_seconds=60)
    summary = await scheduler.tick()
    assert summary.new_anomalies == 1


@pytest.mark.asyncio
async def test_tick_swallows_failures():
    service = CountingService(fail=True)
    scheduler = DetectionScheduler(service, interval_seconds=60)
    assert await scheduler.tick() is None
    assert service.calls == 1


@pytest.mark.asyncio
async def test_run_on_startup_then_stop():
    service = CountingService()
    scheduler = DetectionScheduler(service, interval_seconds=3600, run_on_startup=True)
    scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.05)
    await scheduler.stop()
    assert not scheduler.running
    assert service.calls == 1


@pytest.mark.asyncio
async def test_no_startup_run_waits_for_interval():
    service = CountingService()
    scheduler = DetectionScheduler(service, interval_seconds=3600, run_on_startup=False)
    scheduler.start()
    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()
    assert service.calls == 0


@pytest.mark.asyncio
async def test_stop_without_start_is_noop():
    scheduler = DetectionScheduler(CountingService())
    await scheduler.stop()
    assert not scheduler.running


def test_interval_has_a_floor():
    assert DetectionScheduler(CountingService(), interval_seconds=0).interval_seconds == 1.0
