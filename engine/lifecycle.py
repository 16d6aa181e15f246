"""
Resolution state machine for stored anomalies.

OPEN -> ACKNOWLEDGED -> RESOLVED, and OPEN/ACKNOWLEDGED -> FALSE_POSITIVE.
RESOLVED and FALSE_POSITIVE are terminal; any action attempted from a status
that does not allow it raises :class:`InvalidStateTransition` and leaves the
record untouched.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, FrozenSet, Optional, Tuple

from engine.enums import AnomalyStatus, ResolutionAction
from engine.exceptions import InvalidStateTransition

_ACTIVE: FrozenSet[AnomalyStatus] = frozenset({AnomalyStatus.OPEN, AnomalyStatus.ACKNOWLEDGED})

TRANSITIONS: dict[ResolutionAction, Tuple[FrozenSet[AnomalyStatus], AnomalyStatus]] = {
    ResolutionAction.acknowledge: (frozenset({AnomalyStatus.OPEN}), AnomalyStatus.ACKNOWLEDGED),
    ResolutionAction.resolve: (_ACTIVE, AnomalyStatus.RESOLVED),
    ResolutionAction.false_positive: (_ACTIVE, AnomalyStatus.FALSE_POSITIVE),
}


def next_status(current: AnomalyStatus, action: ResolutionAction, anomaly_id: str = "") -> AnomalyStatus:
    allowed_from, target = TRANSITIONS[action]
    if current not in allowed_from:
        raise InvalidStateTransition(anomaly_id, current.value, action.value)
    return target


def apply_action(
    record: Any,
    action: ResolutionAction,
    actor_id: str,
    now: datetime,
    notes: Optional[str] = None,
) -> AnomalyStatus:
    """Move ``record`` to the status reached by ``action`` and stamp the audit fields.

    ``record`` is anything exposing the anomaly audit attributes (an ORM row in
    practice). Validation happens before any attribute is written.
    """
    current = AnomalyStatus(record.status)
    target = next_status(current, action, str(getattr(record, "id", "") or ""))

    record.status = target.value
    if action is ResolutionAction.acknowledge:
        record.acknowledged_at = now
        record.acknowledged_by = actor_id
    else:
        record.resolved_at = now
        record.resolved_by = actor_id
        if notes:
            record.resolution_notes = notes
    return target
