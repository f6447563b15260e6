# backend/rentals/routers/audit.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, require_admin
from ..db import get_db
from ..domain.audit import decode, list_audit_events
from ..schemas import AuditEventOut

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditEventOut])
def list_audit(
    entity_type: Optional[str] = Query(default=None, description="Property, Lead, PropertyTenant, ..."),
    entity_id: Optional[str] = Query(default=None),
    actor: Optional[str] = Query(default=None, description="actor email"),
    limit: int = Query(default=200, ge=1, le=500),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_admin),
):
    """Admin trail of who changed which row. Updates carry only the changed keys."""
    rows = list_audit_events(db, entity_type=entity_type, entity_id=entity_id, actor=actor, limit=limit)
    return [
        AuditEventOut(
            id=r.id,
            actor=r.actor,
            action=r.action,
            entity_type=r.entity_type,
            entity_id=r.entity_id,
            before=decode(r.before_json),
            after=decode(r.after_json),
            request_id=r.request_id,
            created_at=r.created_at,
        )
        for r in rows
    ]
