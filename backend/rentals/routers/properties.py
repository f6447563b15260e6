# backend/rentals/routers/properties.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_staff, require_view_property
from ..db import get_db
from ..domain import kanban
from ..domain import permissions as perms
from ..domain.audit import emit_audit
from ..domain.events import emit_workflow_event
from ..models import Property
from ..schemas import READ_ONLY_PROPERTY_COLUMNS, PropertyCreate, PropertyUpdate
from ..services.ownership import must_get_property
from ..services.section_review_reset import detect_and_reset_section_reviews

log = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


def _columns() -> set[str]:
    return {c.name for c in Property.__table__.columns}


def _check_columns(keys: set[str], *, allow_unique_id: bool = False) -> None:
    protected = READ_ONLY_PROPERTY_COLUMNS - ({"property_unique_id"} if allow_unique_id else set())
    unknown = sorted(k for k in keys if k not in _columns() or k in protected)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown or read-only property fields: {', '.join(unknown)}")


def _typed_values(data: dict[str, Any]) -> dict[str, Any]:
    """Coerce column values to their column types; 400 on bad types or nulls in NOT NULL columns."""
    try:
        typed = PropertyUpdate.model_validate(data).model_dump(exclude_unset=True)
    except ValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise HTTPException(status_code=400, detail=f"Invalid value for property fields: {', '.join(bad)}")

    not_null = sorted(k for k, v in typed.items() if v is None and not Property.__table__.c[k].nullable)
    if not_null:
        raise HTTPException(status_code=400, detail=f"Property fields cannot be null: {', '.join(not_null)}")
    return typed


def _csv(val: Optional[str]) -> list[str]:
    return [x.strip() for x in (val or "").split(",") if x.strip()]


def _scope_to_principal(q, p: Principal):
    ids = perms.accessible_property_ids(p.grants)
    if ids == "all":
        return q
    return q.where(Property.property_unique_id.in_(ids or [""]))


@router.get("")
def list_properties(
    kanbanType: Optional[str] = Query(default=None),
    searchQuery: Optional[str] = Query(default=None),
    property_type: Optional[str] = Query(default=None),
    area_cluster: Optional[str] = Query(default=None),
    admin_name: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    q = select(Property)

    if kanbanType:
        try:
            q = q.where(Property.current_stage.in_(kanban.stages_for(kanbanType)))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if searchQuery and searchQuery.strip():
        like = f"%{searchQuery.strip()}%"
        q = q.where(
            or_(
                Property.property_unique_id.ilike(like),
                Property.address.ilike(like),
                Property.city.ilike(like),
            )
        )

    if _csv(property_type):
        q = q.where(Property.property_asset_type.in_(_csv(property_type)))
    if _csv(area_cluster):
        q = q.where(Property.area_cluster.in_(_csv(area_cluster)))
    if _csv(admin_name):
        q = q.where(Property.admin_name.in_(_csv(admin_name)))

    q = _scope_to_principal(q, p).order_by(Property.days_in_stage.asc(), Property.id.asc())
    return {"properties": [r.model_dump() for r in db.scalars(q).all()]}


@router.get("/published")
def list_published_properties(
    city: Optional[str] = Query(default=None),
    max_price: Optional[float] = Query(default=None),
    min_bedrooms: Optional[int] = Query(default=None),
    area_clusters: Optional[str] = Query(default=None),
    rental_type: Optional[str] = Query(default=None),
    min_sqm: Optional[float] = Query(default=None),
    min_bathrooms: Optional[int] = Query(default=None),
    exclude_ids: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_staff),
):
    """Properties in the "Publicado" stage that match a lead's criteria, plus dropdown options."""
    q = select(Property).where(Property.current_stage == kanban.PUBLISHED_STAGE)

    if city:
        q = q.where(Property.city == city)
    if max_price is not None:
        q = q.where(Property.announcement_price <= max_price)
    if min_bedrooms is not None:
        q = q.where(Property.bedrooms >= min_bedrooms)
    if _csv(area_clusters):
        q = q.where(Property.area_cluster.in_(_csv(area_clusters)))
    if rental_type:
        q = q.where(Property.rental_type == rental_type)
    if min_sqm is not None:
        q = q.where(Property.square_meters >= min_sqm)
    if min_bathrooms is not None:
        q = q.where(Property.bathrooms >= min_bathrooms)
    if _csv(exclude_ids):
        q = q.where(Property.property_unique_id.not_in(_csv(exclude_ids)))
    if search and search.strip():
        q = q.where(Property.address.ilike(f"%{search.strip()}%"))

    rows = db.scalars(q.order_by(Property.announcement_price.asc(), Property.id.asc())).all()

    # options come from every published property, not just the filtered page
    all_published = db.execute(
        select(Property.city, Property.area_cluster, Property.rental_type).where(
            Property.current_stage == kanban.PUBLISHED_STAGE
        )
    ).all()

    def _opts(values) -> list[str]:
        return sorted({v for v in values if isinstance(v, str) and v})

    scoped = [r for r in all_published if not city or r.city == city]
    return {
        "properties": [r.model_dump() for r in rows],
        "filterOptions": {
            "cities": _opts(r.city for r in all_published),
            "areaClusters": _opts(r.area_cluster for r in scoped),
            "rentalTypes": _opts(r.rental_type for r in all_published),
        },
    }


@router.post("")
def create_property(payload: PropertyCreate, db: Session = Depends(get_db), p: Principal = Depends(require_staff)):
    data = payload.model_dump(exclude_unset=True)
    _check_columns(set(data), allow_unique_id=True)
    columns = {k: v for k, v in data.items() if k != "property_unique_id"}
    data = {"property_unique_id": payload.property_unique_id, **_typed_values(columns)}

    now = datetime.utcnow()
    row = Property(**data, created_at=now, updated_at=now)
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Property {payload.property_unique_id} already exists")

    emit_audit(
        db,
        actor=p.email,
        action="property.create",
        entity_type="Property",
        entity_id=row.property_unique_id,
        before=None,
        after=row.model_dump(),
    )
    emit_workflow_event(db, principal=p, event_type="property.created", property_id=row.property_unique_id)
    db.commit()
    db.refresh(row)
    return {"property": row.model_dump()}


@router.get("/{property_unique_id}")
def get_property(property_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    require_view_property(p, property_unique_id)
    row = must_get_property(db, property_unique_id=property_unique_id)
    return {"property": row.model_dump()}


@router.put("/{property_unique_id}")
def update_property(
    property_unique_id: str,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_edit_property(p, property_unique_id)
    row = must_get_property(db, property_unique_id=property_unique_id)
    if not payload:
        raise HTTPException(status_code=400, detail="No fields to update")
    _check_columns(set(payload))
    data = _typed_values(payload)

    before = row.model_dump()
    for k, v in data.items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()

    emit_audit(
        db,
        actor=p.email,
        action="property.update",
        entity_type="Property",
        entity_id=property_unique_id,
        before={k: before.get(k) for k in data},
        after=data,
    )
    emit_workflow_event(
        db,
        principal=p,
        event_type="property.updated",
        property_id=property_unique_id,
        payload={"fields": sorted(data)},
    )
    db.commit()

    detect_and_reset_section_reviews(db, property_unique_id, data)

    db.refresh(row)
    return {"property": row.model_dump()}


@router.delete("/{property_unique_id}")
def delete_property(property_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    row = must_get_property(db, property_unique_id=property_unique_id)
    if not perms.can_delete_property(p.grants):
        raise HTTPException(status_code=403, detail="Only supply_admin can delete properties")

    emit_audit(
        db,
        actor=p.email,
        action="property.delete",
        entity_type="Property",
        entity_id=property_unique_id,
        before=row.model_dump(),
        after=None,
    )
    db.delete(row)
    db.commit()
    log.info("property deleted", extra={"property_id": property_unique_id, "user_id": p.user_id})
    return {"success": True}
