# backend/rentals/domain/audit.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..middleware.request_id import get_request_id
from ..models import AuditEvent

_SKIP_KEYS = frozenset({"updated_at"})


def changed_fields(before: dict[str, Any], after: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Narrow an update to the keys whose value actually moved.

    PATCH bodies from the pipeline UI resend whole sections, so most keys in
    ``after`` usually match ``before``. ``updated_at`` is bookkeeping and
    never counts.
    """
    old: dict[str, Any] = {}
    new: dict[str, Any] = {}
    for key, value in after.items():
        if key in _SKIP_KEYS:
            continue
        if before.get(key) != value:
            old[key] = before.get(key)
            new[key] = value
    return old, new


def _dumps(v: Optional[dict[str, Any]]) -> Optional[str]:
    return None if v is None else json.dumps(v, sort_keys=True, ensure_ascii=False, default=str)


def decode(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        out = json.loads(raw)
    except ValueError:
        return {"raw": raw}
    return out if isinstance(out, dict) else {"value": out}


def emit_audit(
    db: Session,
    *,
    actor: Optional[str],
    action: str,
    entity_type: str,
    entity_id: str,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
) -> Optional[AuditEvent]:
    """
    Add an audit row to the caller's transaction (no commit).

    With both ``before`` and ``after`` only the changed keys are stored, and
    an update that changed nothing writes no row at all (returns None).
    """
    if before is not None and after is not None:
        before, after = changed_fields(before, after)
        if not after:
            return None

    row = AuditEvent(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=_dumps(before),
        after_json=_dumps(after),
        request_id=get_request_id(),
        created_at=datetime.utcnow(),
    )
    db.add(row)
    return row


def list_audit_events(
    db: Session,
    *,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    actor: Optional[str] = None,
    limit: int = 200,
) -> list[AuditEvent]:
    q = select(AuditEvent).order_by(desc(AuditEvent.id))
    if entity_type:
        q = q.where(AuditEvent.entity_type == entity_type)
    if entity_id:
        q = q.where(AuditEvent.entity_id == entity_id)
    if actor:
        q = q.where(AuditEvent.actor == actor)
    return list(db.scalars(q.limit(limit)).all())
