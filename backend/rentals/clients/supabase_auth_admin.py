# backend/rentals/clients/supabase_auth_admin.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..config import settings

log = logging.getLogger(__name__)


class AuthAdminError(RuntimeError):
    pass


class SupabaseAuthAdmin:
    """GoTrue admin endpoints, called with the service-role key."""

    def __init__(self, url: Optional[str] = None, service_role_key: Optional[str] = None) -> None:
        self.url = (url or settings.supabase_url or "").rstrip("/")
        key = service_role_key or settings.supabase_service_role_key or ""
        self.headers = {"Authorization": f"Bearer {key}", "apikey": key}

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            with httpx.Client(timeout=settings.http_timeout) as client:
                r = client.request(method, f"{self.url}/auth/v1{endpoint}", headers=self.headers, **kwargs)
        except httpx.HTTPError as e:
            log.error("auth admin request failed: %s %s", method, endpoint, exc_info=True)
            raise AuthAdminError(str(e)) from e

        if r.status_code >= 400:
            try:
                data = r.json()
            except ValueError:
                data = {}
            msg = data.get("msg") or data.get("message") or data.get("error_description") or r.text
            log.error("auth admin %s %s returned %s: %s", method, endpoint, r.status_code, msg)
            raise AuthAdminError(msg or f"HTTP {r.status_code}")
        return r

    def create_user(self, *, email: str, password: str) -> dict[str, Any]:
        r = self._request(
            "POST",
            "/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
        )
        data = r.json() or {}
        # some versions wrap the user object
        return data.get("user") or data

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/admin/users/{user_id}")


def get_auth_admin() -> SupabaseAuthAdmin:
    return SupabaseAuthAdmin()
