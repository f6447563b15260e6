# backend/rentals/routers/leads.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal, require_staff
from ..clients.supabase_storage import SupabaseStorage, get_storage
from ..db import get_db
from ..domain import laboral_docs as ld
from ..domain.audit import emit_audit
from ..models import Lead
from ..schemas import LeadCreate, LeadOut, LeadUpdate
from ..services.lead_documents import clear_obligatory_docs
from ..services.ownership import must_get_lead

log = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("")
def list_leads(
    phase: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    limit: int = Query(default=500, ge=1, le=2000),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_staff),
):
    q = select(Lead)
    if phase:
        q = q.where(Lead.current_phase == phase)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.where(or_(Lead.name.ilike(like), Lead.email.ilike(like), Lead.phone.ilike(like), Lead.leads_unique_id.ilike(like)))
    rows = db.scalars(q.order_by(Lead.days_in_phase.asc(), Lead.id.asc()).limit(limit)).all()
    return {"leads": [LeadOut.model_validate(r) for r in rows]}


@router.post("")
def create_lead(payload: LeadCreate, db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    now = datetime.utcnow()
    row = Lead(
        **payload.model_dump(),
        laboral_financial_docs={"obligatory": {}, "complementary": []},
        created_at=now,
        updated_at=now,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Lead {payload.leads_unique_id} already exists")

    emit_audit(db, actor=p.email, action="lead.create", entity_type="Lead", entity_id=row.leads_unique_id, after=payload.model_dump())
    db.commit()
    db.refresh(row)
    return {"lead": LeadOut.model_validate(row)}


@router.get("/{leads_unique_id}")
def get_lead(leads_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    row = must_get_lead(db, leads_unique_id=leads_unique_id)
    return {
        "lead": LeadOut.model_validate(row),
        "obligatoryFieldKeys": ld.obligatory_field_keys(row.employment_status, row.employment_contract_type),
    }


@router.patch("/{leads_unique_id}")
def update_lead(
    leads_unique_id: str,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(require_staff),
):
    row = must_get_lead(db, leads_unique_id=leads_unique_id)
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")

    before = row.model_dump()

    # obligatory set is keyed by employment status/contract type
    if ld.employment_changed(before, data):
        clear_obligatory_docs(db, row, storage)

    for k, v in data.items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()

    emit_audit(
        db,
        actor=p.email,
        action="lead.update",
        entity_type="Lead",
        entity_id=leads_unique_id,
        before={k: before.get(k) for k in data},
        after=data,
    )
    db.commit()
    db.refresh(row)
    return {"lead": LeadOut.model_validate(row)}


@router.delete("/{leads_unique_id}")
def delete_lead(leads_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    row = must_get_lead(db, leads_unique_id=leads_unique_id)
    emit_audit(db, actor=p.email, action="lead.delete", entity_type="Lead", entity_id=leads_unique_id, before=row.model_dump())
    db.delete(row)
    db.commit()
    log.info("lead deleted", extra={"lead_id": leads_unique_id, "user_id": p.user_id})
    return {"success": True}
