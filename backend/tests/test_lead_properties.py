# backend/tests/test_lead_properties.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select

from conftest import ADMIN, ANALYST
from rentals.db import SessionLocal
from rentals.models import Lead, LeadsProperty, Property


def _seed(lead_id: str, *property_ids: str) -> None:
    db = SessionLocal()
    try:
        now = datetime.utcnow()
        db.add(Lead(leads_unique_id=lead_id, name="Javier", created_at=now, updated_at=now))
        for pid in property_ids:
            db.add(Property(property_unique_id=pid, current_stage="Publicado", created_at=now, updated_at=now))
        db.commit()
    finally:
        db.close()


def _count(lead_id: str) -> int:
    db = SessionLocal()
    try:
        return db.scalar(select(func.count(LeadsProperty.id)).where(LeadsProperty.leads_unique_id == lead_id))
    finally:
        db.close()


def test_duplicate_assignment_conflicts_and_keeps_one_row(client):
    _seed("LP-1", "LPP-1")

    r1 = client.post("/api/leads/LP-1/properties", json={"properties_unique_id": "LPP-1"}, headers=ANALYST)
    assert r1.status_code == 200, r1.text

    r2 = client.post("/api/leads/LP-1/properties", json={"properties_unique_id": "LPP-1"}, headers=ANALYST)
    assert r2.status_code == 409
    assert "error" in r2.json()

    assert _count("LP-1") == 1


def test_assign_unknown_property_is_404(client):
    _seed("LP-2")
    r = client.post("/api/leads/LP-2/properties", json={"properties_unique_id": "NOPE"}, headers=ADMIN)
    assert r.status_code == 404


def test_list_patch_and_unassign(client):
    _seed("LP-3", "LPP-3a", "LPP-3b")
    for pid in ("LPP-3a", "LPP-3b"):
        assert client.post("/api/leads/LP-3/properties", json={"properties_unique_id": pid}, headers=ADMIN).status_code == 200

    items = client.get("/api/leads/LP-3/properties", headers=ADMIN).json()["items"]
    assert [i["property"]["property_unique_id"] for i in items] == ["LPP-3a", "LPP-3b"]

    lp_id = items[0]["leadsProperty"]["id"]
    r = client.patch(
        f"/api/leads-properties/{lp_id}",
        json={"scheduled_visit_date": "2026-11-03T10:30:00", "current_status": "Visita agendada"},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["current_status"] == "Visita agendada"

    r = client.patch(f"/api/leads-properties/{lp_id}", json={"scheduled_visit_date": ""}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["scheduled_visit_date"] is None

    assert client.patch(f"/api/leads-properties/{lp_id}", json={}, headers=ADMIN).status_code == 400

    r = client.delete("/api/leads/LP-3/properties/LPP-3a", headers=ADMIN)
    assert r.status_code == 200
    assert _count("LP-3") == 1


def test_deleting_lead_cascades_assignments(client):
    _seed("LP-4", "LPP-4")
    client.post("/api/leads/LP-4/properties", json={"properties_unique_id": "LPP-4"}, headers=ADMIN)

    assert client.delete("/api/leads/LP-4", headers=ADMIN).status_code == 200
    assert _count("LP-4") == 0
