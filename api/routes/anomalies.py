"""
Anomaly routes: listings, statistics, enumerations and operator resolution actions.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Query

from api.requests import AcknowledgeRequest, TransitionRequest
from api.responses import AnomalyListResponse, AnomalyModel, StatsResponse, TypesResponse
from api.routes.exception import handle_exceptions
from config import settings
from engine.enums import AnomalyStatus, AnomalyType, Severity
from services.anomaly_service import anomaly_service
from store import AnomalyFilters, AnomalyRecord

router = APIRouter(tags=["Anomalies"])


def _anomaly_model(record: AnomalyRecord) -> AnomalyModel:
    return AnomalyModel(**asdict(record), is_active=record.is_active)


@router.get("/devices/{device_id}/anomalies", response_model=List[AnomalyModel])
@handle_exceptions
async def list_device_anomalies(
    device_id: str,
    anomaly_type: Optional[AnomalyType] = Query(default=None, alias="type"),
    severity: Optional[Severity] = Query(default=None),
    status: Optional[AnomalyStatus] = Query(default=None),
    limit: int = Query(default=settings.list_default_limit, ge=1, le=settings.list_max_limit),
) -> List[AnomalyModel]:
    filters = AnomalyFilters(anomaly_type=anomaly_type, severity=severity, status=status, limit=limit)
    records = await anomaly_service.list_for_device(device_id, filters)
    return [_anomaly_model(record) for record in records]


@router.get("/anomalies", response_model=AnomalyListResponse)
@handle_exceptions
async def list_anomalies(
    device_id: Optional[str] = Query(default=None),
    anomaly_type: Optional[AnomalyType] = Query(default=None, alias="type"),
    severity: Optional[Severity] = Query(default=None),
    status: Optional[AnomalyStatus] = Query(default=None),
    limit: int = Query(default=settings.list_default_limit, ge=1, le=settings.list_max_limit),
    offset: int = Query(default=0, ge=0),
) -> AnomalyListResponse:
    filters = AnomalyFilters(
        device_id=device_id,
        anomaly_type=anomaly_type,
        severity=severity,
        status=status,
        limit=limit,
        offset=offset,
    )
    records, total = await anomaly_service.list_all(filters)
    return AnomalyListResponse(anomalies=[_anomaly_model(record) for record in records], total=total)


@router.get("/anomalies/stats", response_model=StatsResponse)
@handle_exceptions
async def anomaly_stats(device_id: Optional[str] = Query(default=None)) -> StatsResponse:
    report = await anomaly_service.stats(device_id)
    return StatsResponse(**report.to_dict())


@router.get("/anomalies/types", response_model=TypesResponse)
async def anomaly_types() -> TypesResponse:
    return TypesResponse(
        anomaly_types=list(AnomalyType),
        severity_levels=list(Severity),
        statuses=list(AnomalyStatus),
    )


@router.get("/anomalies/{anomaly_id}", response_model=AnomalyModel)
@handle_exceptions
async def get_anomaly(anomaly_id: str) -> AnomalyModel:
    return _anomaly_model(await anomaly_service.get(anomaly_id))


@router.post("/anomalies/{anomaly_id}/acknowledge", response_model=AnomalyModel)
@handle_exceptions
async def acknowledge_anomaly(anomaly_id: str, payload: AcknowledgeRequest) -> AnomalyModel:
    return _anomaly_model(await anomaly_service.acknowledge(anomaly_id, payload.actor_id))


@router.post("/anomalies/{anomaly_id}/resolve", response_model=AnomalyModel)
@handle_exceptions
async def resolve_anomaly(anomaly_id: str, payload: TransitionRequest) -> AnomalyModel:
    record = await anomaly_service.resolve(anomaly_id, payload.actor_id, payload.notes)
    return _anomaly_model(record)


@router.post("/anomalies/{anomaly_id}/false-positive", response_model=AnomalyModel)
@handle_exceptions
async def mark_false_positive(anomaly_id: str, payload: TransitionRequest) -> AnomalyModel:
    record = await anomaly_service.mark_false_positive(anomaly_id, payload.actor_id, payload.notes)
    return _anomaly_model(record)
