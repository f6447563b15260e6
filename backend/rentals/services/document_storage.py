# backend/rentals/services/document_storage.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import HTTPException

from ..clients.supabase_storage import StorageError, SupabaseStorage
from ..config import settings
from ..domain.storage_paths import extract_storage_path

log = logging.getLogger(__name__)


def upload_and_sign(
    storage: SupabaseStorage,
    *,
    bucket: str,
    path: str,
    content: bytes,
    content_type: Optional[str],
) -> str:
    """
    Upload, then mint the long-lived signed URL that gets stored on the row.

    If signing fails the fresh object is removed before the 500 goes out.
    """
    try:
        storage.upload(bucket, path, content, content_type)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Failed to upload file: {e}")

    try:
        return storage.create_signed_url(bucket, path, settings.signed_url_ttl_seconds)
    except StorageError as e:
        discard_objects(storage, bucket=bucket, paths=[path])
        raise HTTPException(status_code=500, detail=f"Failed to create signed URL: {e}")


def discard_objects(storage: SupabaseStorage, *, bucket: str, paths: Iterable[Optional[str]]) -> list[str]:
    """Best-effort removal, one call per object. Returns the paths actually removed."""
    removed: list[str] = []
    for path in paths:
        if not path:
            continue
        try:
            storage.remove(bucket, [path])
            removed.append(path)
        except StorageError:
            log.warning("could not remove storage object", extra={"bucket": bucket, "path": path}, exc_info=True)
    return removed


def discard_url(storage: SupabaseStorage, *, bucket: str, url: Optional[str]) -> None:
    path = extract_storage_path(url)
    if path:
        discard_objects(storage, bucket=bucket, paths=[path])
