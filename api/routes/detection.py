"""
Detection routes: manual job trigger and per-device dry-run analysis.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from fastapi import APIRouter, Query

from api.responses import DetectionDetailsModel, DetectPreviewResponse, FindingModel, RunSummaryResponse
from api.routes.exception import handle_exceptions
from config import settings
from engine.detectors import Finding
from services.detection_service import detection_service

router = APIRouter(tags=["Detection"])


def _finding_model(finding: Finding) -> FindingModel:
    return FindingModel(
        anomaly_type=finding.anomaly_type,
        severity=finding.severity,
        start_date=finding.period.start_date,
        end_date=finding.period.end_date,
        description=finding.description,
        detection_details=DetectionDetailsModel(**finding.details.to_dict()),
        recommended_action=finding.recommended_action,
        estimated_energy_loss=finding.estimated_energy_loss,
    )


@router.post("/detection/run", response_model=RunSummaryResponse)
@handle_exceptions
async def run_detection() -> RunSummaryResponse:
    summary = await detection_service.trigger_detection()
    return RunSummaryResponse(**summary.to_dict())


@router.post("/devices/{device_id}/detect", response_model=DetectPreviewResponse)
@handle_exceptions
async def detect_device(
    device_id: str,
    window_days: int = Query(default=settings.detection_window_days, ge=1, le=365),
) -> DetectPreviewResponse:
    findings = await detection_service.detect_for_device(device_id, window_days)
    return DetectPreviewResponse(
        device_id=device_id,
        window_days=window_days,
        findings=[_finding_model(finding) for finding in findings],
    )
