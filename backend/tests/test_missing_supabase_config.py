# backend/tests/test_missing_supabase_config.py
from __future__ import annotations

from conftest import ADMIN
from rentals.config import settings


def test_api_refuses_without_supabase_credentials(client, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", None)

    r = client.get("/api/properties", headers=ADMIN)
    assert r.status_code == 500
    assert r.json() == {"error": "Server configuration error: Missing Supabase credentials"}

    # health stays up
    assert client.get("/api/health").status_code == 200


def test_blank_service_key_counts_as_missing(client, monkeypatch):
    monkeypatch.setattr(settings, "supabase_service_role_key", "  ")
    assert client.get("/api/leads", headers=ADMIN).status_code == 500


def test_request_id_is_echoed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
