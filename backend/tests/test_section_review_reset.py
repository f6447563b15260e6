# backend/tests/test_section_review_reset.py
from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import ADMIN
from rentals.db import SessionLocal
from rentals.domain import section_reviews as sr
from rentals.models import Property, WorkflowEvent
from rentals.services.section_review_reset import REVIEWS_UPDATED_EVENT, detect_and_reset_section_reviews


def _flagged(snapshot: dict, **extra) -> dict:
    return {
        "isCorrect": False,
        "reviewed": True,
        "comments": "needs a fix",
        "submittedComments": "sent to owner",
        "snapshot": snapshot,
        "hasIssue": True,
        **extra,
    }


def _mk_property(pid: str, *, stage: str = sr.PROPHERO_STAGE, reviews=None, **cols) -> None:
    db = SessionLocal()
    try:
        now = datetime.utcnow()
        db.add(
            Property(
                property_unique_id=pid,
                current_stage=stage,
                prophero_section_reviews=reviews,
                created_at=now,
                updated_at=now,
                **cols,
            )
        )
        db.commit()
    finally:
        db.close()


def _reviews(pid: str) -> dict:
    db = SessionLocal()
    try:
        row = db.scalar(select(Property).where(Property.property_unique_id == pid))
        return sr.parse_reviews(row.prophero_section_reviews)
    finally:
        db.close()


def _reset(pid: str, updated: dict) -> bool:
    db = SessionLocal()
    try:
        return detect_and_reset_section_reviews(db, pid, updated)
    finally:
        db.close()


def test_equal_value_keeps_review():
    snap = {"admin_name": "Laura", "keys_location": "Portería"}
    _mk_property("P-EQ", reviews={"property-management-info": _flagged(snap)})

    assert _reset("P-EQ", {"admin_name": "Laura"}) is False
    assert _reviews("P-EQ")["property-management-info"]["isCorrect"] is False


def test_changed_value_resets_but_keeps_history():
    snap = {"admin_name": "Laura", "keys_location": "Portería"}
    _mk_property("P-CH", reviews={"property-management-info": _flagged(snap)})

    assert _reset("P-CH", {"admin_name": "Marc"}) is True

    review = _reviews("P-CH")["property-management-info"]
    assert review["isCorrect"] is None
    assert review["reviewed"] is False
    assert review["comments"] is None
    assert review["submittedComments"] == "sent to owner"
    assert review["snapshot"] == snap
    assert review["hasIssue"] is True


def test_reset_emits_reviews_updated_event():
    _mk_property("P-EV", reviews={"home-insurance": _flagged({"home_insurance_type": "Básico"})})

    assert _reset("P-EV", {"home_insurance_type": "Completo"}) is True

    db = SessionLocal()
    try:
        ev = db.scalar(select(WorkflowEvent).where(WorkflowEvent.property_id == "P-EV"))
        assert ev is not None
        assert ev.event_type == REVIEWS_UPDATED_EVENT
        payload = json.loads(ev.payload_json)
        assert payload["propertyId"] == "P-EV"
        assert payload["propheroSectionReviews"]["home-insurance"]["reviewed"] is False
    finally:
        db.close()


def test_unmapped_field_never_touches_reviews():
    reviews = {"property-management-info": _flagged({"admin_name": "Laura"})}
    _mk_property("P-UN", reviews=reviews)

    assert _reset("P-UN", {"city": "Madrid", "announcement_price": 1000}) is False
    assert _reviews("P-UN") == reviews


def test_list_reorder_is_not_a_change():
    snap = {"doc_energy_cert": None, "doc_renovation_files": ["a.pdf", "b.pdf"]}
    _mk_property("P-LR", reviews={"technical-documents": _flagged(snap)})

    assert _reset("P-LR", {"doc_renovation_files": ["b.pdf", "a.pdf"]}) is False
    assert _reset("P-LR", {"doc_renovation_files": ["b.pdf", "a.pdf", "c.pdf"]}) is True


def test_list_removal_is_a_change():
    snap = {"doc_energy_cert": None, "doc_renovation_files": ["a.pdf", "b.pdf"]}
    _mk_property("P-LD", reviews={"technical-documents": _flagged(snap)})

    assert _reset("P-LD", {"doc_renovation_files": ["a.pdf"]}) is True


def test_legal_documents_example():
    snap = {"doc_purchase_contract": "A", "doc_land_registry_note": "B"}
    _mk_property("P-LEG", reviews={"legal-documents": _flagged(snap)})

    assert _reset("P-LEG", {"doc_purchase_contract": "A"}) is False
    assert _reviews("P-LEG")["legal-documents"]["isCorrect"] is False

    assert _reset("P-LEG", {"doc_purchase_contract": "C"}) is True
    review = _reviews("P-LEG")["legal-documents"]
    assert review["isCorrect"] is None
    assert review["snapshot"]["doc_land_registry_note"] == "B"


def test_other_stages_are_left_alone():
    reviews = {"legal-documents": _flagged({"doc_purchase_contract": "A"})}
    _mk_property("P-ST", stage="Publicado", reviews=reviews)

    assert _reset("P-ST", {"doc_purchase_contract": "Z"}) is False
    assert _reviews("P-ST") == reviews


def test_reviews_stored_as_json_text():
    reviews = {"legal-documents": _flagged({"doc_purchase_contract": "A"})}
    _mk_property("P-TXT", reviews=json.dumps(reviews))

    assert _reset("P-TXT", {"doc_purchase_contract": "Z"}) is True
    assert _reviews("P-TXT")["legal-documents"]["reviewed"] is False


def test_unparsable_reviews_report_false():
    _mk_property("P-BAD", reviews="{not json")
    assert _reset("P-BAD", {"doc_purchase_contract": "Z"}) is False


def test_correct_section_is_not_reset():
    review = {"isCorrect": True, "reviewed": True, "snapshot": {"doc_purchase_contract": "A"}}
    assert sr.sections_to_reset({"legal-documents": review}, {"doc_purchase_contract": "Z"}) == []


def test_each_section_listed_once():
    reviews = {"supplies-bills": _flagged({"doc_bill_water": "w", "doc_bill_gas": "g"})}
    out = sr.sections_to_reset(reviews, {"doc_bill_water": "w2", "doc_bill_gas": "g2"})
    assert out == ["supplies-bills"]


def test_values_differ_on_lists_of_dicts():
    a = [{"title": "x", "url": "u1"}, {"title": "y", "url": "u2"}]
    b = [{"url": "u2", "title": "y"}, {"url": "u1", "title": "x"}]
    assert sr.values_differ(a, b) is False
    assert sr.values_differ(a, None) is True
    assert sr.values_differ([], None) is False


def test_failed_reset_write_keeps_callers_update(client, monkeypatch):
    snap = {"admin_name": "Laura", "keys_location": "Portería"}
    _mk_property("P-FAIL", reviews={"property-management-info": _flagged(snap)})

    real_commit = Session.commit
    commits = []

    def second_commit_fails(self):
        commits.append(self)
        if len(commits) == 2:
            raise OperationalError("UPDATE properties", {}, Exception("database is locked"))
        return real_commit(self)

    monkeypatch.setattr(Session, "commit", second_commit_fails)

    r = client.put("/api/properties/P-FAIL", json={"keys_location": "Buzón"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["property"]["keys_location"] == "Buzón"
    assert len(commits) == 2

    monkeypatch.undo()
    assert _reviews("P-FAIL")["property-management-info"]["isCorrect"] is False


def test_reset_reports_false_when_its_commit_fails(monkeypatch):
    _mk_property("P-FAIL2", reviews={"legal-documents": _flagged({"doc_purchase_contract": "A"})})

    def failing_commit(self):
        raise OperationalError("UPDATE properties", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    assert _reset("P-FAIL2", {"doc_purchase_contract": "Z"}) is False

    monkeypatch.undo()
    assert _reviews("P-FAIL2")["legal-documents"]["reviewed"] is True
