"""
Anomaly store: dedup lookups, idempotent inserts, single-record status updates and read-side queries over the ``anomalies`` table.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError

from database import get_db_session
from db_models import Anomaly
from engine.detectors import Finding
from engine.enums import AnomalyStatus, AnomalyType, ResolutionAction, Severity
from engine.exceptions import NotFound
from engine.lifecycle import apply_action

log = logging.getLogger(__name__)

_GROUPABLE = {
    "anomaly_type": Anomaly.anomaly_type,
    "severity": Anomaly.severity,
    "status": Anomaly.status,
}


@dataclass
class AnomalyRecord:
    id: str
    device_id: str
    anomaly_type: AnomalyType
    severity: Severity
    start_date: date
    end_date: date
    description: str
    detection_details: Dict[str, Any]
    status: AnomalyStatus
    detected_at: datetime
    created_at: datetime
    updated_at: datetime
    recommended_action: Optional[str] = None
    estimated_energy_loss: Optional[float] = None
    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution_notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status.is_active


@dataclass(frozen=True)
class AnomalyFilters:
    device_id: Optional[str] = None
    anomaly_type: Optional[AnomalyType] = None
    severity: Optional[Severity] = None
    status: Optional[AnomalyStatus] = None
    limit: int = 100
    offset: int = 0


def _to_record(row: Anomaly) -> AnomalyRecord:
    return AnomalyRecord(
        id=row.id,
        device_id=row.device_id,
        anomaly_type=AnomalyType(row.anomaly_type),
        severity=Severity(row.severity),
        start_date=row.start_date,
        end_date=row.end_date,
        description=row.description,
        detection_details=dict(row.detection_details or {}),
        status=AnomalyStatus(row.status),
        detected_at=row.detected_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        recommended_action=row.recommended_action,
        estimated_energy_loss=row.estimated_energy_loss,
        acknowledged_at=row.acknowledged_at,
        acknowledged_by=row.acknowledged_by,
        resolved_at=row.resolved_at,
        resolved_by=row.resolved_by,
        resolution_notes=row.resolution_notes,
    )


def _where(filters: AnomalyFilters) -> list:
    clauses = []
    if filters.device_id is not None:
        clauses.append(Anomaly.device_id == filters.device_id)
    if filters.anomaly_type is not None:
        clauses.append(Anomaly.anomaly_type == filters.anomaly_type.value)
    if filters.severity is not None:
        clauses.append(Anomaly.severity == filters.severity.value)
    if filters.status is not None:
        clauses.append(Anomaly.status == filters.status.value)
    return clauses


class AnomalyStore:
    def find_equivalent(
        self,
        device_id: str,
        anomaly_type: AnomalyType,
        start_date: date,
        end_date: date,
    ) -> Optional[AnomalyRecord]:
        with get_db_session() as db:
            row = db.scalars(
                select(Anomaly).where(
                    and_(
                        Anomaly.device_id == device_id,
                        Anomaly.anomaly_type == anomaly_type.value,
                        Anomaly.start_date == start_date,
                        Anomaly.end_date == end_date,
                    )
                ).limit(1)
            ).first()
            return _to_record(row) if row is not None else None

    def insert(self, device_id: str, finding: Finding, detected_at: datetime) -> Optional[AnomalyRecord]:
        """Store ``finding`` as a new OPEN anomaly.

        Returns ``None`` when the dedup key already exists, which covers a
        concurrent run that won the unique-constraint race.
        """
        try:
            with get_db_session() as db:
                row = Anomaly(
                    device_id=device_id,
                    anomaly_type=finding.anomaly_type.value,
                    severity=finding.severity.value,
                    start_date=finding.period.start_date,
                    end_date=finding.period.end_date,
                    description=finding.description,
                    detection_details=finding.details.to_dict(),
                    status=AnomalyStatus.OPEN.value,
                    recommended_action=finding.recommended_action,
                    estimated_energy_loss=finding.estimated_energy_loss,
                    detected_at=detected_at,
                    created_at=detected_at,
                    updated_at=detected_at,
                )
                db.add(row)
                db.flush()
                return _to_record(row)
        except IntegrityError:
            if self.find_equivalent(device_id, *finding.dedup_key) is None:
                raise
            log.info(
                "Duplicate %s anomaly for device %s (%s..%s) ignored",
                finding.anomaly_type.value,
                device_id,
                finding.period.start_date,
                finding.period.end_date,
            )
            return None

    def get(self, anomaly_id: str) -> AnomalyRecord:
        with get_db_session() as db:
            row = db.get(Anomaly, anomaly_id)
            if row is None:
                raise NotFound(f"Anomaly {anomaly_id} not found")
            return _to_record(row)

    def transition(
        self,
        anomaly_id: str,
        action: ResolutionAction,
        actor_id: str,
        now: datetime,
        notes: Optional[str] = None,
    ) -> AnomalyRecord:
        with get_db_session() as db:
            row = db.scalars(select(Anomaly).where(Anomaly.id == anomaly_id).with_for_update()).first()
            if row is None:
                raise NotFound(f"Anomaly {anomaly_id} not found")
            apply_action(row, action, actor_id, now, notes)
            row.updated_at = now
            db.flush()
            return _to_record(row)

    def query(self, filters: AnomalyFilters) -> List[AnomalyRecord]:
        with get_db_session() as db:
            stmt = select(Anomaly)
            clauses = _where(filters)
            if clauses:
                stmt = stmt.where(and_(*clauses))
            stmt = (
                stmt.order_by(Anomaly.detected_at.desc(), Anomaly.id.desc())
                .offset(max(0, int(filters.offset)))
                .limit(max(1, int(filters.limit)))
            )
            return [_to_record(row) for row in db.scalars(stmt).all()]

    def count(self, filters: AnomalyFilters) -> int:
        with get_db_session() as db:
            stmt = select(func.count()).select_from(Anomaly)
            clauses = _where(filters)
            if clauses:
                stmt = stmt.where(and_(*clauses))
            return int(db.scalar(stmt) or 0)

    def aggregate(self, group_by: str, device_id: Optional[str] = None) -> List[Tuple[str, int]]:
        column = _GROUPABLE.get(group_by)
        if column is None:
            raise ValueError(f"Cannot group anomalies by {group_by!r}")
        with get_db_session() as db:
            stmt = select(column, func.count()).group_by(column)
            if device_id is not None:
                stmt = stmt.where(Anomaly.device_id == device_id)
            return [(key, int(count)) for key, count in db.execute(stmt).all()]

    def trend_rows(self, since: datetime, device_id: Optional[str] = None) -> List[Tuple[datetime, str]]:
        with get_db_session() as db:
            stmt = select(Anomaly.detected_at, Anomaly.severity).where(Anomaly.detected_at >= since)
            if device_id is not None:
                stmt = stmt.where(Anomaly.device_id == device_id)
            return [(detected_at, severity) for detected_at, severity in db.execute(stmt).all()]
