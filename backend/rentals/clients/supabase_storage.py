# backend/rentals/clients/supabase_storage.py
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from fastapi import HTTPException

from ..config import settings

log = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Supabase Storage rejected a request or could not be reached."""


class SupabaseStorage:
    """
    Thin sync client over the Supabase Storage REST API (service-role key).

    Only the three calls the document flows need: upload, sign, remove.
    """

    def __init__(self, url: str | None = None, service_role_key: str | None = None) -> None:
        self.url = (url or settings.supabase_url or "").rstrip("/")
        self.service_role_key = service_role_key or settings.supabase_service_role_key or ""
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    def _request(self, method: str, endpoint: str, *, bucket: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            with httpx.Client(timeout=settings.http_timeout) as client:
                r = client.request(method, f"{self.base_api_url}{endpoint}", **kwargs)
        except httpx.HTTPError as e:
            log.error("storage request failed", extra={"bucket": bucket, "path": path}, exc_info=True)
            raise StorageError(str(e)) from e

        if r.status_code >= 400:
            log.error(
                "storage %s %s returned %s: %s",
                method,
                endpoint,
                r.status_code,
                r.text,
                extra={"bucket": bucket, "path": path},
            )
            raise StorageError(_error_message(r))
        return r

    def upload(self, bucket: str, path: str, content: bytes, content_type: str | None = None) -> str:
        self._request(
            "POST",
            f"/object/{bucket}/{quote(path)}",
            bucket=bucket,
            path=path,
            content=content,
            headers={
                **self.headers,
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "true",
            },
        )
        return path

    def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        r = self._request(
            "POST",
            f"/object/sign/{bucket}/{quote(path)}",
            bucket=bucket,
            path=path,
            json={"expiresIn": int(expires_in)},
            headers=self.headers,
        )
        signed = (r.json() or {}).get("signedURL")
        if not signed:
            raise StorageError("Supabase response did not contain signedURL")

        # newer servers answer relative to /storage/v1, older ones include it
        if signed.startswith("/storage/v1/"):
            return f"{self.url}{signed}"
        if signed.startswith("/"):
            return f"{self.base_api_url}{signed}"
        return signed

    def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        self._request(
            "DELETE",
            f"/object/{bucket}",
            bucket=bucket,
            path=",".join(paths),
            json={"prefixes": list(paths)},
            headers=self.headers,
        )


def _error_message(r: httpx.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)


def require_supabase_config() -> None:
    if not settings.supabase_configured:
        raise HTTPException(status_code=500, detail="Server configuration error: Missing Supabase credentials")


def get_storage() -> SupabaseStorage:
    return SupabaseStorage()
