# backend/tests/test_document_fields.py
from __future__ import annotations

from datetime import datetime

from rentals.domain import document_fields as df

NOW = datetime(2026, 10, 1, 12, 0, 0)


def test_field_classification():
    assert df.is_custom_document_field("custom_legal_documents")
    assert df.is_custom_document_field("client_custom_other_documents")
    assert not df.is_custom_document_field("doc_purchase_contract")

    assert df.is_array_field("pics_urls")
    assert df.is_array_field("marketing_photos_kitchen")
    assert df.is_per_room_field("marketing_photos_bedrooms")
    assert df.is_per_room_field("incident_photos_bathrooms")
    assert not df.is_per_room_field("marketing_photos_kitchen")


def test_every_room_has_both_photo_mappings():
    for room in df.ROOMS:
        assert df.FIELD_MAPPINGS[f"marketing_photos_{room}"].visibility == df.PUBLIC
        assert df.FIELD_MAPPINGS[f"incident_photos_{room}"].visibility == df.PUBLIC
    assert df.FIELD_MAPPINGS["doc_purchase_contract"].visibility == df.RESTRICTED


def test_custom_document_append_and_replace():
    current = [{"title": "Nota", "url": "u1", "createdAt": "2026-01-01T00:00:00Z"}]

    appended = df.with_uploaded_url("custom_legal_documents", current, "u2", custom_title="Escritura", now=NOW)
    assert appended[-1] == {"title": "Escritura", "url": "u2", "createdAt": "2026-10-01T12:00:00Z"}
    assert len(current) == 1

    replaced = df.with_uploaded_url("custom_legal_documents", current, "u3", old_value="u1", custom_title="Nota", now=NOW)
    assert [d["url"] for d in replaced] == ["u3"]


def test_per_room_photos_grow_to_room():
    rooms = df.with_uploaded_url("marketing_photos_bedrooms", None, "b2.jpg", room_index=2)
    assert rooms == [[], [], ["b2.jpg"]]

    rooms = df.with_uploaded_url("marketing_photos_bedrooms", rooms, "b2-new.jpg", old_value="b2.jpg", room_index=2)
    assert rooms[2] == ["b2-new.jpg"]

    assert df.without_url("marketing_photos_bedrooms", rooms, "b2-new.jpg", room_index=2) == [[], [], []]


def test_array_and_scalar_fields():
    assert df.with_uploaded_url("pics_urls", ["a"], "b") == ["a", "b"]
    assert df.with_uploaded_url("pics_urls", ["a", "b"], "c", old_value="a") == ["c", "b"]
    assert df.without_url("pics_urls", ["a", "b"], "a") == ["b"]

    assert df.with_uploaded_url("doc_energy_cert", "old", "new") == "new"
    assert df.without_url("doc_energy_cert", "new", "new") is None
