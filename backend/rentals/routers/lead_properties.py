# backend/rentals/routers/lead_properties.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal, require_staff
from ..db import get_db
from ..domain.events import emit_workflow_event
from ..models import LeadsProperty, Property
from ..schemas import LeadPropertyAssign, LeadPropertyPatch, LeadsPropertyOut
from ..services.ownership import must_get_lead, must_get_leads_property, must_get_property

router = APIRouter(tags=["lead-properties"])


@router.get("/leads/{leads_unique_id}/properties")
def list_lead_properties(leads_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    must_get_lead(db, leads_unique_id=leads_unique_id)

    rows = db.execute(
        select(LeadsProperty, Property)
        .join(Property, Property.property_unique_id == LeadsProperty.properties_unique_id)
        .where(LeadsProperty.leads_unique_id == leads_unique_id)
        .order_by(LeadsProperty.created_at.asc(), LeadsProperty.id.asc())
    ).all()
    return {
        "items": [
            {"leadsProperty": LeadsPropertyOut.model_validate(lp), "property": prop.model_dump()}
            for lp, prop in rows
        ]
    }


@router.post("/leads/{leads_unique_id}/properties")
def assign_property(
    leads_unique_id: str,
    payload: LeadPropertyAssign,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_staff),
):
    must_get_lead(db, leads_unique_id=leads_unique_id)
    must_get_property(db, property_unique_id=payload.properties_unique_id)

    now = datetime.utcnow()
    row = LeadsProperty(
        leads_unique_id=leads_unique_id,
        properties_unique_id=payload.properties_unique_id,
        current_status=payload.current_status,
        created_at=now,
        updated_at=now,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Property already assigned to this lead")

    emit_workflow_event(
        db,
        principal=p,
        event_type="lead_property.assigned",
        property_id=payload.properties_unique_id,
        payload={"leads_unique_id": leads_unique_id},
    )
    db.commit()
    db.refresh(row)
    return {"leadsProperty": LeadsPropertyOut.model_validate(row)}


@router.delete("/leads/{leads_unique_id}/properties/{property_unique_id}")
def unassign_property(
    leads_unique_id: str,
    property_unique_id: str,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_staff),
):
    res = db.execute(
        delete(LeadsProperty).where(
            LeadsProperty.leads_unique_id == leads_unique_id,
            LeadsProperty.properties_unique_id == property_unique_id,
        )
    )
    if not res.rowcount:
        db.rollback()
        raise HTTPException(status_code=404, detail="Lead-property assignment not found")

    emit_workflow_event(
        db,
        principal=p,
        event_type="lead_property.unassigned",
        property_id=property_unique_id,
        payload={"leads_unique_id": leads_unique_id},
    )
    db.commit()
    return {"success": True}


@router.patch("/leads-properties/{leads_property_id}")
def patch_leads_property(
    leads_property_id: int,
    payload: LeadPropertyPatch,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_staff),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    row = must_get_leads_property(db, leads_property_id=leads_property_id)
    for k, v in data.items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return {"success": True, "data": LeadsPropertyOut.model_validate(row)}
