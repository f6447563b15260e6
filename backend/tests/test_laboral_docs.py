# backend/tests/test_laboral_docs.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from conftest import ADMIN
from rentals.config import settings
from rentals.db import SessionLocal
from rentals.domain import laboral_docs as ld
from rentals.models import Lead

BUCKET = settings.leads_restricted_bucket


def test_obligatory_keys_by_employment():
    assert ld.obligatory_field_keys("Empleado", "Contrato temporal") == ["ultima_nomina", "vida_laboral"]
    assert ld.obligatory_field_keys("Funcionario", "Contrato indefinido") == ["ultima_nomina"]
    assert ld.obligatory_field_keys("Autónomo", None) == ["ultimo_irpf", "ultimo_iva"]
    assert ld.obligatory_field_keys("Empleado", None) == []
    assert ld.obligatory_field_keys(None, None) == []


def test_normalize_docs_copies_and_fills_shape():
    raw = {"obligatory": {"ultima_nomina": "u"}}
    docs = ld.normalize_docs(raw)
    docs["obligatory"]["vida_laboral"] = "v"

    assert docs["complementary"] == []
    assert "vida_laboral" not in raw["obligatory"]
    assert ld.normalize_docs("garbage") == {"obligatory": {}, "complementary": []}


def _mk_lead(lid: str, docs: dict, **cols) -> None:
    db = SessionLocal()
    try:
        now = datetime.utcnow()
        db.add(
            Lead(
                leads_unique_id=lid,
                name="Ana",
                laboral_financial_docs=docs,
                created_at=now,
                updated_at=now,
                **cols,
            )
        )
        db.commit()
    finally:
        db.close()


def _docs(lid: str) -> dict:
    db = SessionLocal()
    try:
        return db.scalar(select(Lead).where(Lead.leads_unique_id == lid)).laboral_financial_docs
    finally:
        db.close()


def test_employment_change_clears_obligatory_docs(client, storage):
    u1 = storage.put(BUCKET, "L1/laboral_financial/ultima_nomina_1.pdf")
    u2 = storage.put(BUCKET, "L1/laboral_financial/vida_laboral_2.pdf")
    comp = {"type": "Ayudas", "title": "Ayudas", "url": storage.put(BUCKET, "L1/laboral_financial/Ayudas_3.pdf")}
    _mk_lead(
        "L1",
        {"obligatory": {"ultima_nomina": u1, "vida_laboral": u2}, "complementary": [comp]},
        employment_status="Empleado",
        employment_contract_type="Contrato temporal",
    )

    r = client.patch("/api/leads/L1", json={"employment_status": "Autónomo"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["lead"]["employment_status"] == "Autónomo"

    docs = _docs("L1")
    assert docs["obligatory"] == {}
    assert docs["complementary"] == [comp]

    assert (BUCKET, "L1/laboral_financial/ultima_nomina_1.pdf") not in storage.objects
    assert (BUCKET, "L1/laboral_financial/vida_laboral_2.pdf") not in storage.objects
    assert (BUCKET, "L1/laboral_financial/Ayudas_3.pdf") in storage.objects


def test_same_employment_keeps_obligatory_docs(client, storage):
    u1 = storage.put(BUCKET, "L2/laboral_financial/ultima_nomina_1.pdf")
    _mk_lead(
        "L2",
        {"obligatory": {"ultima_nomina": u1}, "complementary": []},
        employment_status="Empleado",
        employment_contract_type="Contrato indefinido",
    )

    r = client.patch(
        "/api/leads/L2",
        json={"employment_status": "Empleado", "zone": "Chamberí"},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    assert _docs("L2")["obligatory"] == {"ultima_nomina": u1}
    assert storage.removed == []


def test_remove_failure_still_clears_row(client, storage):
    u1 = storage.put(BUCKET, "L3/laboral_financial/ultimo_irpf_1.pdf")
    _mk_lead("L3", {"obligatory": {"ultimo_irpf": u1}, "complementary": []}, employment_status="Autónomo")
    storage.fail_remove = True

    r = client.post("/api/leads/L3/documents/clear-laboral-obligatory", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["removed"] == []
    assert _docs("L3")["obligatory"] == {}


def test_upload_obligatory_document(client, storage):
    _mk_lead("L4", {"obligatory": {}, "complementary": []}, employment_status="Autónomo")

    r = client.post(
        "/api/leads/L4/documents/upload",
        data={"folder": "laboral_financial", "fieldKey": "ultimo_iva"},
        files={"file": ("iva.pdf", b"%PDF", "application/pdf")},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    url = r.json()["url"]
    assert _docs("L4")["obligatory"] == {"ultimo_iva": url}
    assert any(path.startswith("L4/laboral_financial/ultimo_iva_") for (_, path) in storage.objects)


def test_upload_otros_requires_title(client, storage):
    _mk_lead("L5", {"obligatory": {}, "complementary": []})

    r = client.post(
        "/api/leads/L5/documents/upload",
        data={"folder": "laboral_financial", "docType": "Otros"},
        files={"file": ("x.pdf", b"%PDF", "application/pdf")},
        headers=ADMIN,
    )
    assert r.status_code == 400
    assert "error" in r.json()
    assert storage.objects == {}


def test_leads_are_staff_only(client):
    _mk_lead("L6", {"obligatory": {}, "complementary": []})
    r = client.get(
        "/api/leads/L6",
        headers={"X-User-Email": "p@test.local", "X-User-Role": "supply_partner", "X-Property-Id": "P1"},
    )
    assert r.status_code == 403


def test_lead_upload_db_failure_removes_new_object(client, storage, monkeypatch):
    _mk_lead("L7", {"obligatory": {}, "complementary": []}, employment_status="Autónomo")

    def failing_commit(self):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(Session, "commit", failing_commit)

    r = client.post(
        "/api/leads/L7/documents/upload",
        data={"folder": "laboral_financial", "fieldKey": "ultimo_irpf"},
        files={"file": ("irpf.pdf", b"%PDF", "application/pdf")},
        headers=ADMIN,
    )
    assert r.status_code == 500
    assert storage.objects == {}
    assert _docs("L7")["obligatory"] == {}


def test_identity_replace_keeps_objects_the_lead_never_held(client, storage):
    mine = storage.put(BUCKET, "L8/identity/identity_doc_url_1.pdf")
    foreign = storage.put(BUCKET, "L-OTHER/identity/identity_doc_url_2.pdf")
    _mk_lead("L8", {"obligatory": {}, "complementary": []}, identity_doc_url=mine)

    r = client.post(
        "/api/leads/L8/documents/upload",
        data={"oldValue": foreign},
        files={"file": ("dni.pdf", b"%PDF", "application/pdf")},
        headers=ADMIN,
    )
    assert r.status_code == 200, r.text
    assert (BUCKET, "L-OTHER/identity/identity_doc_url_2.pdf") in storage.objects
    assert _lead_identity("L8") == r.json()["url"]


def _lead_identity(lid: str) -> str:
    db = SessionLocal()
    try:
        return db.scalar(select(Lead).where(Lead.leads_unique_id == lid)).identity_doc_url
    finally:
        db.close()
