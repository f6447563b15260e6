# backend/rentals/routers/visits.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_view_property
from ..db import get_db
from ..domain.events import emit_workflow_event
from ..models import PropertyVisit
from ..schemas import VisitCreate, VisitOut, VisitType, VisitUpdate
from ..services.ownership import must_get_property, must_get_visit

router = APIRouter(tags=["visits"])


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


@router.get("/properties/{property_unique_id}/visits")
def list_visits(
    property_unique_id: str,
    visit_type: Optional[VisitType] = Query(default=None),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_view_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    q = select(PropertyVisit).where(PropertyVisit.property_id == property_unique_id)
    if visit_type:
        q = q.where(PropertyVisit.visit_type == visit_type)
    if start_date:
        q = q.where(PropertyVisit.visit_date >= _day_start(start_date))
    if end_date:
        # inclusive of the whole end day
        q = q.where(PropertyVisit.visit_date < _day_start(end_date + timedelta(days=1)))

    rows = db.scalars(q.order_by(PropertyVisit.visit_date.asc(), PropertyVisit.id.asc())).all()
    return {"visits": [VisitOut.model_validate(r) for r in rows]}


@router.post("/properties/{property_unique_id}/visits")
def create_visit(
    property_unique_id: str,
    payload: VisitCreate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_edit_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    now = datetime.utcnow()
    row = PropertyVisit(
        property_id=property_unique_id,
        visit_date=payload.visit_date,
        visit_type=payload.visit_type,
        notes=payload.notes,
        created_by=payload.created_by or p.email,
        created_at=now,
        updated_at=now,
    )
    db.add(row)
    db.flush()
    emit_workflow_event(
        db,
        principal=p,
        event_type="visit.created",
        property_id=property_unique_id,
        payload={"visit_id": row.id, "visit_type": row.visit_type},
    )
    db.commit()
    db.refresh(row)
    return {"visit": VisitOut.model_validate(row)}


@router.put("/visits/{visit_id}")
def update_visit(
    visit_id: int,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    row = must_get_visit(db, visit_id=visit_id)
    require_edit_property(p, row.property_id, not_found="Visit not found")

    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "visit_date" in data and data["visit_date"] is None:
        raise HTTPException(status_code=400, detail="visit_date cannot be null")
    if "visit_type" in data and data["visit_type"] is None:
        raise HTTPException(status_code=400, detail="visit_type cannot be null")

    for k, v in data.items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return {"visit": VisitOut.model_validate(row)}


@router.delete("/visits/{visit_id}")
def delete_visit(visit_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    row = must_get_visit(db, visit_id=visit_id)
    require_edit_property(p, row.property_id, not_found="Visit not found")

    db.delete(row)
    db.commit()
    return {"success": True}
