# backend/tests/test_properties_crud.py
from __future__ import annotations

from sqlalchemy import func, select

from conftest import ADMIN, ANALYST, partner
from rentals.models import PropertyRental


def _create(client, pid: str, headers=ADMIN, **cols):
    r = client.post("/api/properties", json={"property_unique_id": pid, **cols}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["property"]


def test_create_get_update_delete(client):
    prop = _create(client, "PC-1", address="Calle Mayor 1", city="Madrid", current_stage="Publicado")
    assert prop["days_in_stage"] == 0

    r = client.get("/api/properties/PC-1", headers=ANALYST)
    assert r.status_code == 200
    assert r.json()["property"]["address"] == "Calle Mayor 1"

    r = client.put("/api/properties/PC-1", json={"announcement_price": 1350, "keys_location": "Conserje"}, headers=ANALYST)
    assert r.status_code == 200, r.text
    assert r.json()["property"]["announcement_price"] == 1350

    assert client.delete("/api/properties/PC-1", headers=ANALYST).status_code == 403
    assert client.delete("/api/properties/PC-1", headers=ADMIN).status_code == 200
    assert client.get("/api/properties/PC-1", headers=ADMIN).status_code == 404


def test_duplicate_create_conflicts(client):
    _create(client, "PC-2")
    r = client.post("/api/properties", json={"property_unique_id": "PC-2"}, headers=ADMIN)
    assert r.status_code == 409
    assert "error" in r.json()


def test_unknown_or_protected_column_is_400(client):
    _create(client, "PC-3")

    r = client.put("/api/properties/PC-3", json={"not_a_column": 1}, headers=ADMIN)
    assert r.status_code == 400
    assert "not_a_column" in r.json()["error"]

    assert client.put("/api/properties/PC-3", json={"id": 99}, headers=ADMIN).status_code == 400
    assert client.put("/api/properties/PC-3", json={}, headers=ADMIN).status_code == 400


def test_missing_property_is_404(client):
    r = client.put("/api/properties/NOPE", json={"city": "Madrid"}, headers=ADMIN)
    assert r.status_code == 404
    assert r.json() == {"error": "Property not found"}


def test_partner_sees_only_assigned_properties(client):
    _create(client, "PC-4a", current_stage="Publicado")
    _create(client, "PC-4b", current_stage="Publicado")

    ids = [p["property_unique_id"] for p in client.get("/api/properties", headers=partner("PC-4a")).json()["properties"]]
    assert ids == ["PC-4a"]

    assert client.get("/api/properties/PC-4b", headers=partner("PC-4a")).status_code == 404
    assert client.put("/api/properties/PC-4b", json={"city": "X"}, headers=partner("PC-4a")).status_code == 404
    assert client.post("/api/properties", json={"property_unique_id": "PC-4c"}, headers=partner("PC-4a")).status_code == 403


def test_missing_identity_is_401(client):
    assert client.get("/api/properties").status_code == 401


def test_list_filters_by_kanban_type_and_search(client):
    _create(client, "PC-5a", current_stage="Publicado", address="Calle Sol 3", property_asset_type="Piso")
    _create(client, "PC-5b", current_stage="Alquilado", address="Calle Luna 8", property_asset_type="Ático")

    ids = lambda r: sorted(p["property_unique_id"] for p in r.json()["properties"])  # noqa: E731

    assert ids(client.get("/api/properties", params={"kanbanType": "captacion"}, headers=ADMIN)) == ["PC-5a"]
    assert ids(client.get("/api/properties", params={"kanbanType": "portfolio"}, headers=ADMIN)) == ["PC-5b"]
    assert ids(client.get("/api/properties", params={"searchQuery": "luna"}, headers=ADMIN)) == ["PC-5b"]
    assert ids(client.get("/api/properties", params={"property_type": "Piso,Ático"}, headers=ADMIN)) == ["PC-5a", "PC-5b"]
    assert client.get("/api/properties", params={"kanbanType": "nope"}, headers=ADMIN).status_code == 400


def test_published_filters_and_options(client):
    _create(client, "PC-6a", current_stage="Publicado", city="Madrid", area_cluster="Centro", bedrooms=2, announcement_price=900, rental_type="Larga estancia")
    _create(client, "PC-6b", current_stage="Publicado", city="Madrid", area_cluster="Retiro", bedrooms=3, announcement_price=1500, rental_type="Larga estancia")
    _create(client, "PC-6c", current_stage="Publicado", city="Sevilla", area_cluster="Triana", bedrooms=1, announcement_price=700)
    _create(client, "PC-6d", current_stage="Alquilado", city="Madrid", bedrooms=4, announcement_price=800)

    r = client.get("/api/properties/published", params={"city": "Madrid", "max_price": 1000}, headers=ANALYST)
    assert r.status_code == 200, r.text
    body = r.json()
    assert [p["property_unique_id"] for p in body["properties"]] == ["PC-6a"]
    assert body["filterOptions"]["cities"] == ["Madrid", "Sevilla"]
    assert body["filterOptions"]["areaClusters"] == ["Centro", "Retiro"]

    r = client.get("/api/properties/published", params={"min_bedrooms": 2, "exclude_ids": "PC-6a"}, headers=ANALYST)
    assert [p["property_unique_id"] for p in r.json()["properties"]] == ["PC-6b"]


def test_validation_errors_are_400(client):
    r = client.post("/api/properties", json={"address": "no id"}, headers=ADMIN)
    assert r.status_code == 400
    assert "error" in r.json()


def test_tenant_upsert_mirrors_onto_property(client):
    _create(client, "PC-7")

    r = client.put("/api/properties/PC-7/tenant", json={"full_name": "Lucía Pérez", "email": "lucia@example.com"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    r = client.put("/api/properties/PC-7/tenant", json={"full_name": "Lucía Pérez Gil"}, headers=ADMIN)
    assert r.status_code == 200, r.text

    prop = client.get("/api/properties/PC-7", headers=ADMIN).json()["property"]
    assert prop["tenant_full_name"] == "Lucía Pérez Gil"
    assert client.get("/api/properties/PC-7/tenant", headers=ADMIN).json()["tenant"]["full_name"] == "Lucía Pérez Gil"


def test_visits_date_window_is_inclusive(client):
    _create(client, "PC-8")
    for d, t in (("2026-11-01T09:00:00", "scheduled-visit"), ("2026-11-30T23:30:00", "ipc-update"), ("2026-12-01T08:00:00", "contract-end")):
        r = client.post("/api/properties/PC-8/visits", json={"visit_date": d, "visit_type": t}, headers=ADMIN)
        assert r.status_code == 200, r.text

    r = client.get("/api/properties/PC-8/visits", params={"start_date": "2026-11-01", "end_date": "2026-11-30"}, headers=ADMIN)
    assert [v["visit_type"] for v in r.json()["visits"]] == ["scheduled-visit", "ipc-update"]

    r = client.post("/api/properties/PC-8/visits", json={"visit_date": "2026-11-02T10:00:00", "visit_type": "bogus"}, headers=ADMIN)
    assert r.status_code == 400


def test_update_rejects_wrong_types_and_nulls(client):
    _create(client, "PC-9", city="Madrid")

    r = client.put("/api/properties/PC-9", json={"bedrooms": "three"}, headers=ADMIN)
    assert r.status_code == 400
    assert "bedrooms" in r.json()["error"]

    r = client.put("/api/properties/PC-9", json={"days_in_stage": None}, headers=ADMIN)
    assert r.status_code == 400
    assert "days_in_stage" in r.json()["error"]

    assert client.put("/api/properties/PC-9", json={"needs_update": None}, headers=ADMIN).status_code == 400
    assert client.put("/api/properties/PC-9", json={"city": "x" * 121}, headers=ADMIN).status_code == 400

    prop = client.get("/api/properties/PC-9", headers=ADMIN).json()["property"]
    assert prop["bedrooms"] is None
    assert prop["days_in_stage"] == 0
    assert prop["city"] == "Madrid"


def test_update_coerces_values_to_column_types(client):
    _create(client, "PC-10")

    r = client.put(
        "/api/properties/PC-10",
        json={"bedrooms": "3", "needs_update": True, "pics_urls": ["a.jpg"], "city": None},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    prop = r.json()["property"]
    assert prop["bedrooms"] == 3
    assert prop["needs_update"] is True
    assert prop["pics_urls"] == ["a.jpg"]


def test_create_checks_untyped_columns_too(client):
    r = client.post("/api/properties", json={"property_unique_id": "PC-11", "days_in_stage": "many"}, headers=ADMIN)
    assert r.status_code == 400
    assert "days_in_stage" in r.json()["error"]
    assert client.get("/api/properties/PC-11", headers=ADMIN).status_code == 404


def test_rental_put_updates_in_place(client, db):
    _create(client, "PC-12")
    assert client.get("/api/properties/PC-12/rental", headers=ADMIN).json() == {"rental": None}

    r = client.put("/api/properties/PC-12/rental", json={"rent_price": 950, "duration": "12 meses"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    first = r.json()["rental"]

    r = client.put(
        "/api/properties/PC-12/rental",
        json={"rent_price": 1000, "duration": "12 meses", "start_date": "2026-11-01"},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    second = r.json()["rental"]

    assert second["id"] == first["id"]
    assert second["rent_price"] == 1000
    assert second["start_date"] == "2026-11-01"
    assert db.scalar(select(func.count()).select_from(PropertyRental).where(PropertyRental.property_id == "PC-12")) == 1


def test_partner_cannot_tell_foreign_property_from_missing(client):
    _create(client, "PC-13a")
    _create(client, "PC-13b")
    who = partner("PC-13a")

    foreign = client.get("/api/properties/PC-13b/tasks", headers=who)
    missing = client.get("/api/properties/PC-13-NOPE/tasks", headers=who)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json() == {"error": "Property not found"}

    assert client.put("/api/properties/PC-13b/tenant", json={"full_name": "X"}, headers=who).status_code == 404
    assert client.get("/api/properties/PC-13b/visits", headers=who).status_code == 404
