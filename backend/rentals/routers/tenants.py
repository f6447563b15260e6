# backend/rentals/routers/tenants.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_view_property
from ..db import get_db
from ..domain.audit import emit_audit
from ..domain.events import emit_workflow_event
from ..models import PropertyTenant
from ..schemas import TenantOut, TenantUpsert
from ..services.ownership import must_get_property
from ..services.upserts import upsert_row

router = APIRouter(prefix="/properties", tags=["tenants"])


@router.get("/{property_unique_id}/tenant")
def get_tenant(property_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    require_view_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    row = db.scalar(select(PropertyTenant).where(PropertyTenant.property_id == property_unique_id))
    return {"tenant": TenantOut.model_validate(row) if row else None}


@router.put("/{property_unique_id}/tenant")
def put_tenant(
    property_unique_id: str,
    payload: TenantUpsert,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_edit_property(p, property_unique_id)
    prop = must_get_property(db, property_unique_id=property_unique_id)

    now = datetime.utcnow()
    data = payload.model_dump()
    row = upsert_row(
        db,
        PropertyTenant,
        key={"property_id": property_unique_id},
        values={**data, "created_at": now, "updated_at": now},
        update_set={**data, "updated_at": now},
    )

    # quick-access copy on the property row
    prop.tenant_full_name = data["full_name"]
    prop.tenant_email = data["email"]
    prop.tenant_phone = data["phone"]
    prop.tenant_nif = data["nif"]
    prop.updated_at = now

    emit_audit(
        db,
        actor=p.email,
        action="tenant.upsert",
        entity_type="PropertyTenant",
        entity_id=property_unique_id,
        after=data,
    )
    emit_workflow_event(db, principal=p, event_type="tenant.updated", property_id=property_unique_id)
    db.commit()
    db.refresh(row)
    return {"tenant": TenantOut.model_validate(row)}
