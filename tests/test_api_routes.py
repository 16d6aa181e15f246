"""
Test Suite for API Routes - Detection and Anomalies

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import date, timedelta

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

import main as app_main
from api.requests import AcknowledgeRequest, TransitionRequest
from api.routes import anomalies as anomalies_route
from api.routes import detection as detection_route
from api.routes import health as health_route
from api.routes.exception import handle_exceptions
from engine.exceptions import InvalidStateTransition, NotFound, UpstreamUnavailable
from services.anomaly_service import AnomalyService
from services.detection_service import DetectionService


@pytest.fixture
def seeded_unit(add_device, add_readings, clock, monkeypatch):
    add_device("unit-1", 5000)
    totals = {date(2026, 6, 20) + timedelta(days=i): 2000.0 for i in range(10)}
    totals[date(2026, 6, 25)] = 20.0
    add_readings("unit-1", totals)
    monkeypatch.setattr(detection_route, "detection_service", DetectionService(clock=clock))
    monkeypatch.setattr(anomalies_route, "anomaly_service", AnomalyService(clock=clock))
    return "unit-1"


@pytest.mark.asyncio
async def test_handle_exceptions_maps_engine_errors():
    cases = [
        (NotFound("gone"), 404),
        (InvalidStateTransition("a", "RESOLVED", "acknowledge"), 409),
        (UpstreamUnavailable("down"), 503),
        (RuntimeError("boom"), 500),
    ]
    for error, code in cases:
        @handle_exceptions
        async def failing():
            raise error

        with pytest.raises(HTTPException) as excinfo:
            await failing()
        assert excinfo.value.status_code == code


def test_handle_exceptions_passes_http_exception_through():
    @handle_exceptions
    def teapot():
        raise HTTPException(status_code=418, detail="teapot")

    with pytest.raises(HTTPException) as excinfo:
        teapot()
    assert excinfo.value.status_code == 418


@pytest.mark.asyncio
async def test_run_detection_route(seeded_unit):
    summary = await detection_route.run_detection()
    assert summary.processed == 1
    assert summary.new_anomalies == 3

    again = await detection_route.run_detection()
    assert again.new_anomalies == 0


@pytest.mark.asyncio
async def test_run_detection_route_directory_down(sqlite_db, monkeypatch):
    class DownDirectory:
        def list_active_devices(self):
            raise UpstreamUnavailable("device directory unavailable")

    monkeypatch.setattr(detection_route, "detection_service", DetectionService(devices=DownDirectory()))
    with pytest.raises(HTTPException) as excinfo:
        await detection_route.run_detection()
    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_detect_device_route_unknown(seeded_unit):
    with pytest.raises(HTTPException) as excinfo:
        await detection_route.detect_device("ghost", 14)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_acknowledge_route_conflict_after_resolve(seeded_unit):
    await detection_route.run_detection()
    listing = await anomalies_route.list_anomalies(
        device_id=seeded_unit, anomaly_type=None, severity=None, status=None, limit=100, offset=0
    )
    anomaly_id = listing.anomalies[0].id

    resolved = await anomalies_route.resolve_anomaly(anomaly_id, TransitionRequest(actor_id="op-1", notes="done"))
    assert resolved.status.value == "RESOLVED"
    assert resolved.is_active is False

    with pytest.raises(HTTPException) as excinfo:
        await anomalies_route.acknowledge_anomaly(anomaly_id, AcknowledgeRequest(actor_id="op-2"))
    assert excinfo.value.status_code == 409


@pytest.mark.asyncio
async def test_acknowledge_route_unknown(seeded_unit):
    with pytest.raises(HTTPException) as excinfo:
        await anomalies_route.acknowledge_anomaly("missing", AcknowledgeRequest(actor_id="op-1"))
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_types_route():
    payload = await anomalies_route.anomaly_types()
    assert len(payload.anomaly_types) == 6
    assert [s.value for s in payload.severity_levels] == ["CRITICAL", "WARNING", "INFO"]
    assert len(payload.statuses) == 4


@pytest.mark.asyncio
async def test_health_route_reports_database(sqlite_db):
    payload = await health_route.health()
    assert payload == {"status": "ok", "database": "ok"}


@pytest.mark.asyncio
async def test_ready_endpoint_returns_503_when_database_not_ready(monkeypatch):
    monkeypatch.setattr(app_main, "_database_ready", False)
    monkeypatch.setattr(app_main, "_component_status", {"database": "unavailable"})
    response = await app_main.ready()
    assert response.status_code == 503


def test_http_smoke(seeded_unit):
    client = TestClient(app_main.app)

    preview = client.post(f"/api/v1/devices/{seeded_unit}/detect", params={"window_days": 14})
    assert preview.status_code == 200
    types = {f["anomaly_type"] for f in preview.json()["findings"]}
    assert "ZERO_PRODUCTION" in types
    assert client.get("/api/v1/anomalies").json()["total"] == 0

    run = client.post("/api/v1/detection/run")
    assert run.status_code == 200
    assert run.json()["new_anomalies"] == 3

    device_list = client.get(f"/api/v1/devices/{seeded_unit}/anomalies", params={"type": "ZERO_PRODUCTION"})
    assert device_list.status_code == 200
    zero = device_list.json()
    assert len(zero) == 1
    assert zero[0]["severity"] == "CRITICAL"
    assert zero[0]["detection_details"]["actual_value"] == 20.0

    ack = client.post(f"/api/v1/anomalies/{zero[0]['id']}/acknowledge", json={"actor_id": "op-1"})
    assert ack.status_code == 200
    assert ack.json()["status"] == "ACKNOWLEDGED"

    again = client.post(f"/api/v1/anomalies/{zero[0]['id']}/acknowledge", json={"actor_id": "op-1"})
    assert again.status_code == 409

    fp = client.post(f"/api/v1/anomalies/{zero[0]['id']}/false-positive", json={"actor_id": "op-1", "notes": "meter reset"})
    assert fp.json()["status"] == "FALSE_POSITIVE"

    stats = client.get("/api/v1/anomalies/stats").json()
    assert stats["by_status"] == {"FALSE_POSITIVE": 1, "OPEN": 2}
    assert stats["recent_trend"][0]["total"] == 3

    assert client.get("/api/v1/anomalies/types").status_code == 200
    assert client.get("/api/v1/anomalies/missing").status_code == 404
    assert client.get("/api/v1/devices/ghost/anomalies").status_code == 404
    assert client.post(f"/api/v1/anomalies/{zero[0]['id']}/resolve", json={}).status_code == 422
