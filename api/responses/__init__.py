"""
Response models for API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, Field, model_serializer

from engine.enums import AnomalyStatus, AnomalyType, Severity


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class DetectionDetailsModel(NpModel):
    method: str
    expected_value: Optional[float] = None
    actual_value: Optional[float] = None
    deviation_percent: Optional[float] = None
    threshold: Optional[float] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class FindingModel(NpModel):
    anomaly_type: AnomalyType
    severity: Severity
    start_date: date
    end_date: date
    description: str
    detection_details: DetectionDetailsModel
    recommended_action: str
    estimated_energy_loss: Optional[float] = None


class DetectPreviewResponse(NpModel):
    device_id: str
    window_days: int
    findings: List[FindingModel] = Field(default_factory=list)


class AnomalyModel(NpModel):
    id: str
    device_id: str
    anomaly_type: AnomalyType
    severity: Severity
    start_date: date
    end_date: date
    description: str
    detection_details: Dict[str, Any] = Field(default_factory=dict)
    status: AnomalyStatus
    recommended_action: Optional[str] = None
    estimated_energy_loss: Optional[float] = None
    detected_at: datetime
    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_active: bool = True


class AnomalyListResponse(BaseModel):
    anomalies: List[AnomalyModel] = Field(default_factory=list)
    total: int = 0


class TrendBucketModel(BaseModel):
    date: str
    total: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0


class StatsResponse(BaseModel):
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_severity: Dict[str, int] = Field(default_factory=dict)
    by_status: Dict[str, int] = Field(default_factory=dict)
    recent_trend: List[TrendBucketModel] = Field(default_factory=list)


class TypesResponse(BaseModel):
    anomaly_types: List[AnomalyType]
    severity_levels: List[Severity]
    statuses: List[AnomalyStatus]


class RunSummaryResponse(BaseModel):
    processed: int = 0
    anomalies_found: int = 0
    new_anomalies: int = 0
    failed: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    failures: List[str] = Field(default_factory=list)
