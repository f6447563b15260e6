# backend/rentals/domain/events.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable, Literal, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..auth import Principal
from ..middleware.request_id import get_request_id
from ..models import WorkflowEvent

PropertyScope = Union[Literal["all"], Iterable[str]]


def emit_workflow_event(
    db: Session,
    *,
    event_type: str,
    principal: Optional[Principal] = None,
    actor: Optional[str] = None,
    property_id: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
) -> WorkflowEvent:
    """
    Queue a workflow event on the caller's session (flush, no commit).

    Open pipeline and lead boards poll GET /api/events and refetch a property
    when one of its events shows up. Background jobs pass ``actor="system"``
    instead of a principal.
    """
    ev = WorkflowEvent(
        property_id=str(property_id) if property_id is not None else None,
        actor=principal.email if principal is not None else actor,
        event_type=event_type,
        payload_json=json.dumps(payload or {}, ensure_ascii=False, default=str),
        request_id=get_request_id(),
        created_at=datetime.utcnow(),
    )
    db.add(ev)
    db.flush()
    return ev


def event_payload(ev: WorkflowEvent) -> dict[str, Any]:
    if not ev.payload_json:
        return {}
    try:
        data = json.loads(ev.payload_json)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"value": data}


def recent_events(
    db: Session,
    *,
    scope: PropertyScope,
    property_id: Optional[str] = None,
    event_type: Optional[str] = None,
    limit: int = 200,
) -> list[WorkflowEvent]:
    """Newest first. A partner scope only sees events of its own properties."""
    q = select(WorkflowEvent).order_by(desc(WorkflowEvent.id))
    if property_id is not None:
        q = q.where(WorkflowEvent.property_id == property_id)
    if event_type:
        q = q.where(WorkflowEvent.event_type == event_type)
    if scope != "all":
        ids = list(scope)
        if not ids:
            return []
        q = q.where(WorkflowEvent.property_id.in_(ids))
    return list(db.scalars(q.limit(limit)).all())
