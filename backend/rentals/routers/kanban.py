# backend/rentals/routers/kanban.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_staff
from ..db import get_db
from ..domain import kanban
from ..domain import permissions as perms
from ..models import Lead, Property
from ..schemas import LeadOut

router = APIRouter(prefix="/kanban", tags=["kanban"])


@router.get("/properties")
def property_board(
    kanbanType: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    """One column per stage, in pipeline order; cards sorted by days in stage."""
    try:
        stages = kanban.stages_for(kanbanType)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    q = select(Property).where(Property.current_stage.in_(stages))
    ids = perms.accessible_property_ids(p.grants)
    if ids != "all":
        q = q.where(Property.property_unique_id.in_(ids or [""]))

    rows = db.scalars(q.order_by(Property.days_in_stage.asc(), Property.id.asc())).all()
    columns = kanban.group_property_cards(rows, stages, stage_of=lambda r: r.current_stage)
    for col in columns:
        col["items"] = [r.model_dump() for r in col["items"]]
    return {"kanbanType": kanbanType, "columns": columns}


@router.get("/leads")
def lead_board(db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    rows = db.scalars(select(Lead).order_by(Lead.days_in_phase.asc(), Lead.id.asc())).all()
    columns = kanban.group_lead_cards(rows, phase_of=lambda r: r.current_phase)
    for col in columns:
        col["items"] = [LeadOut.model_validate(r) for r in col["items"]]
    return {"columns": columns}
