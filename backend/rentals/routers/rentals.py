# backend/rentals/routers/rentals.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_view_property
from ..db import get_db
from ..domain.audit import emit_audit
from ..domain.events import emit_workflow_event
from ..models import PropertyRental
from ..schemas import RentalOut, RentalUpsert
from ..services.ownership import must_get_property
from ..services.upserts import upsert_row

router = APIRouter(prefix="/properties", tags=["rentals"])


@router.get("/{property_unique_id}/rental")
def get_rental(property_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    require_view_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    row = db.scalar(select(PropertyRental).where(PropertyRental.property_id == property_unique_id))
    return {"rental": RentalOut.model_validate(row) if row else None}


@router.put("/{property_unique_id}/rental")
def put_rental(
    property_unique_id: str,
    payload: RentalUpsert,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_edit_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    now = datetime.utcnow()
    data = payload.model_dump()
    row = upsert_row(
        db,
        PropertyRental,
        key={"property_id": property_unique_id},
        values={**data, "created_at": now, "updated_at": now},
        update_set={**data, "updated_at": now},
    )
    emit_audit(
        db,
        actor=p.email,
        action="rental.upsert",
        entity_type="PropertyRental",
        entity_id=property_unique_id,
        after=data,
    )
    emit_workflow_event(db, principal=p, event_type="rental.updated", property_id=property_unique_id)
    db.commit()
    db.refresh(row)
    return {"rental": RentalOut.model_validate(row)}
