# backend/rentals/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentals.db import create_tables as _create_tables, session_scope
from rentals.domain import permissions as perms
from rentals.models import Lead, LeadsProperty, Property, UserRole


@dataclass(frozen=True)
class SeedResult:
    admin_email: str
    property_ids: list[str]
    lead_ids: list[str]
    assignment_id: Optional[int]


DEMO_PROPERTIES = (
    {
        "property_unique_id": "PROP-DEMO-001",
        "address": "Calle de Alcalá 120, 3ºB",
        "city": "Madrid",
        "area_cluster": "Salamanca",
        "property_asset_type": "Piso",
        "bedrooms": 3,
        "bathrooms": 2,
        "square_meters": 95.0,
        "rental_type": "Larga estancia",
        "announcement_price": 1450.0,
        "current_stage": "Publicado",
        "days_in_stage": 4,
        "admin_name": "Laura Gómez",
    },
    {
        "property_unique_id": "PROP-DEMO-002",
        "address": "Carrer de Mallorca 245, 1º2ª",
        "city": "Barcelona",
        "area_cluster": "Eixample",
        "property_asset_type": "Piso",
        "bedrooms": 2,
        "bathrooms": 1,
        "square_meters": 70.0,
        "rental_type": "Larga estancia",
        "announcement_price": 1250.0,
        "current_stage": "Viviendas Prophero",
        "days_in_stage": 1,
        "admin_name": "Marc Puig",
        "prophero_section_reviews": {},
    },
    {
        "property_unique_id": "PROP-DEMO-003",
        "address": "Avenida de la Constitución 12",
        "city": "Sevilla",
        "area_cluster": "Centro",
        "property_asset_type": "Ático",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_meters": 82.0,
        "rental_type": "Larga estancia",
        "announcement_price": 980.0,
        "current_stage": "Alquilado",
        "days_in_stage": 30,
        "admin_name": "Laura Gómez",
    },
)

DEMO_LEADS = (
    {
        "leads_unique_id": "LEAD-DEMO-001",
        "name": "Ana Martínez",
        "email": "ana.martinez@example.com",
        "phone": "+34 600 111 222",
        "zone": "Salamanca",
        "current_phase": "Perfil cualificado",
        "employment_status": "Empleado",
        "employment_contract_type": "Indefinido",
    },
    {
        "leads_unique_id": "LEAD-DEMO-002",
        "name": "Javier Ruiz",
        "email": "javier.ruiz@example.com",
        "phone": "+34 600 333 444",
        "zone": "Eixample",
        "current_phase": "Visita agendada",
        "employment_status": "Autónomo",
    },
)


def _get_or_create(db: Session, model, *, key: str, values: dict):
    row = db.scalar(select(model).where(getattr(model, key) == values[key]))
    if row:
        return row
    now = datetime.utcnow()
    row = model(**values, created_at=now, updated_at=now)
    db.add(row)
    db.flush()
    return row


def _ensure_admin(db: Session, *, user_id: str, email: str) -> None:
    existing = db.scalar(select(UserRole).where(UserRole.user_id == user_id, UserRole.role == perms.ADMIN))
    if existing:
        return
    db.add(UserRole(user_id=user_id, email=email, role=perms.ADMIN, created_at=datetime.utcnow()))
    db.flush()


def seed_demo(
    *,
    admin_email: str = "admin@demo.local",
    admin_user_id: str = "00000000-0000-0000-0000-000000000001",
    create_tables: bool = False,
    with_leads: bool = True,
) -> SeedResult:
    if create_tables:
        _create_tables()

    with session_scope() as db:
        _ensure_admin(db, user_id=admin_user_id, email=admin_email)

        props = [
            _get_or_create(
                db,
                Property,
                key="property_unique_id",
                values=dict(p),
            )
            for p in DEMO_PROPERTIES
        ]

        leads: list[Lead] = []
        assignment_id: Optional[int] = None
        if with_leads:
            leads = [
                _get_or_create(
                    db,
                    Lead,
                    key="leads_unique_id",
                    values={**lv, "laboral_financial_docs": {"obligatory": {}, "complementary": []}},
                )
                for lv in DEMO_LEADS
            ]

            # first lead is interested in the published flat
            lead, prop = leads[0], props[0]
            lp = db.scalar(
                select(LeadsProperty).where(
                    LeadsProperty.leads_unique_id == lead.leads_unique_id,
                    LeadsProperty.properties_unique_id == prop.property_unique_id,
                )
            )
            if not lp:
                now = datetime.utcnow()
                lp = LeadsProperty(
                    leads_unique_id=lead.leads_unique_id,
                    properties_unique_id=prop.property_unique_id,
                    current_status="Interesado",
                    created_at=now,
                    updated_at=now,
                )
                db.add(lp)
                db.flush()
            assignment_id = int(lp.id)

        result = SeedResult(
            admin_email=admin_email,
            property_ids=[p.property_unique_id for p in props],
            lead_ids=[x.leads_unique_id for x in leads],
            assignment_id=assignment_id,
        )
    return result
