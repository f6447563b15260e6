# backend/tests/test_audit_trail.py
from __future__ import annotations

from conftest import ADMIN, ANALYST, partner
from rentals.domain.audit import changed_fields


def test_changed_fields_keeps_only_moved_keys():
    before = {"city": "Madrid", "announcement_price": 1000.0, "updated_at": "t0"}
    after = {"city": "Madrid", "announcement_price": 1100.0, "updated_at": "t1"}
    assert changed_fields(before, after) == ({"announcement_price": 1000.0}, {"announcement_price": 1100.0})


def test_update_audit_row_carries_diff_and_request_id(client):
    r = client.post("/api/properties", json={"property_unique_id": "AU-1", "city": "Madrid"}, headers=ADMIN)
    assert r.status_code == 200, r.text

    r = client.put(
        "/api/properties/AU-1",
        json={"city": "Madrid", "announcement_price": 1200},
        headers={**ADMIN, "X-Request-ID": "edit-au-1"},
    )
    assert r.status_code == 200, r.text
    assert r.headers["X-Request-ID"] == "edit-au-1"

    rows = client.get("/api/audit", params={"entity_type": "Property", "entity_id": "AU-1"}, headers=ADMIN).json()
    assert [row["action"] for row in rows] == ["property.update", "property.create"]

    update = rows[0]
    assert update["actor"] == "admin@test.local"
    assert update["after"] == {"announcement_price": 1200}
    assert update["before"] == {"announcement_price": None}
    assert update["request_id"] == "edit-au-1"


def test_noop_update_writes_no_audit_row(client):
    client.post("/api/properties", json={"property_unique_id": "AU-2", "city": "Sevilla"}, headers=ADMIN)
    assert client.put("/api/properties/AU-2", json={"city": "Sevilla"}, headers=ADMIN).status_code == 200

    rows = client.get("/api/audit", params={"entity_id": "AU-2"}, headers=ADMIN).json()
    assert [row["action"] for row in rows] == ["property.create"]


def test_audit_is_admin_only(client):
    assert client.get("/api/audit", headers=ANALYST).status_code == 403
    assert client.get("/api/audit", headers=partner("AU-3")).status_code == 403


def test_malformed_request_id_is_replaced(client):
    r = client.get("/api/health", headers={"X-Request-ID": "bad id with spaces"})
    rid = r.headers["X-Request-ID"]
    assert rid != "bad id with spaces"
    assert len(rid) == 32


def test_correlation_id_header_is_accepted(client):
    r = client.get("/api/health", headers={"X-Correlation-ID": "corr-9"})
    assert r.headers["X-Request-ID"] == "corr-9"
