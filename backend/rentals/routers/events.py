# backend/rentals/routers/events.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..domain import permissions as perms
from ..domain.events import event_payload, recent_events
from ..schemas import WorkflowEventOut

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[WorkflowEventOut])
def list_events(
    property_id: Optional[str] = Query(default=None),
    event_type: Optional[str] = Query(default=None),
    limit: int = Query(default=200, ge=1, le=500),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    rows = recent_events(
        db,
        scope=perms.accessible_property_ids(p.grants),
        property_id=property_id,
        event_type=event_type,
        limit=limit,
    )
    return [
        WorkflowEventOut(
            id=ev.id,
            property_id=ev.property_id,
            actor=ev.actor,
            event_type=ev.event_type,
            payload=event_payload(ev),
            request_id=ev.request_id,
            created_at=ev.created_at,
        )
        for ev in rows
    ]
