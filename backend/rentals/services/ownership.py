# backend/rentals/services/ownership.py
from __future__ import annotations

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Lead, LeadsProperty, Property, PropertyVisit


def must_get_property(db: Session, *, property_unique_id: str) -> Property:
    row = db.scalar(select(Property).where(Property.property_unique_id == property_unique_id))
    if not row:
        raise HTTPException(status_code=404, detail="Property not found")
    return row


def must_get_lead(db: Session, *, leads_unique_id: str) -> Lead:
    row = db.scalar(select(Lead).where(Lead.leads_unique_id == leads_unique_id))
    if not row:
        raise HTTPException(status_code=404, detail="Lead not found")
    return row


def must_get_visit(db: Session, *, visit_id: int) -> PropertyVisit:
    row = db.get(PropertyVisit, visit_id)
    if not row:
        raise HTTPException(status_code=404, detail="Visit not found")
    return row


def must_get_leads_property(db: Session, *, leads_property_id: int) -> LeadsProperty:
    row = db.get(LeadsProperty, leads_property_id)
    if not row:
        raise HTTPException(status_code=404, detail="Lead-property assignment not found")
    return row
