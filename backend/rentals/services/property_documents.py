# backend/rentals/services/property_documents.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..clients.supabase_storage import SupabaseStorage
from ..config import settings
from ..domain import document_fields as dfields
from ..domain.storage_paths import build_object_path, references_object
from ..models import Property
from .document_storage import discard_objects, discard_url, upload_and_sign
from .section_review_reset import detect_and_reset_section_reviews

log = logging.getLogger(__name__)


def bucket_for(field_name: str) -> str:
    mapping = mapping_for(field_name)
    if mapping.visibility == dfields.PUBLIC:
        return settings.properties_public_bucket
    return settings.properties_restricted_bucket


def mapping_for(field_name: str) -> dfields.FieldMapping:
    mapping = dfields.FIELD_MAPPINGS.get(field_name)
    if mapping is None:
        raise HTTPException(status_code=400, detail=f"Unknown field name: {field_name}")
    return mapping


def parse_room_index(raw: Optional[str | int]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        idx = int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid roomIndex")
    if idx < 0:
        raise HTTPException(status_code=400, detail="Invalid roomIndex")
    return idx


def upload_property_document(
    db: Session,
    prop: Property,
    storage: SupabaseStorage,
    *,
    field_name: str,
    filename: Optional[str],
    content: bytes,
    content_type: Optional[str],
    old_value: Optional[str] = None,
    custom_title: Optional[str] = None,
    room_index: Optional[int] = None,
) -> dict[str, Any]:
    """
    Store a property document and point ``field_name`` at it.

    upload -> signed URL -> row update -> section-review check -> old object removal.
    A failed sign or a failed row update removes the new object again.
    """
    mapping = mapping_for(field_name)
    bucket = bucket_for(field_name)
    if dfields.is_custom_document_field(field_name) and not old_value and not (custom_title or "").strip():
        raise HTTPException(status_code=400, detail="customTitle is required for custom documents")

    pid = prop.property_unique_id
    # only an object this column already points at may be replaced
    drop_old = references_object(getattr(prop, field_name), old_value)
    path = build_object_path(pid, mapping.folder, field_name, filename)
    url = upload_and_sign(storage, bucket=bucket, path=path, content=content, content_type=content_type)

    try:
        current = getattr(prop, field_name)
        title = (custom_title or "").strip() or _existing_title(current, old_value)
        new_value = dfields.with_uploaded_url(
            field_name,
            current,
            url,
            old_value=old_value,
            custom_title=title,
            room_index=room_index,
        )
        setattr(prop, field_name, new_value)
        prop.updated_at = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("property document db update failed", extra={"property_id": pid})
        discard_objects(storage, bucket=bucket, paths=[path])
        raise HTTPException(status_code=500, detail=f"Failed to update database: {e}")

    detect_and_reset_section_reviews(db, pid, {field_name: new_value})

    if drop_old:
        discard_url(storage, bucket=bucket, url=old_value)

    return {"success": True, "url": url}


def _existing_title(current: Any, old_value: Optional[str]) -> Optional[str]:
    if not old_value or not isinstance(current, list):
        return None
    for d in current:
        if isinstance(d, dict) and d.get("url") == old_value:
            return d.get("title")
    return None


def delete_property_document(
    db: Session,
    prop: Property,
    storage: SupabaseStorage,
    *,
    field_name: str,
    file_url: str,
    room_index: Optional[int] = None,
) -> dict[str, Any]:
    bucket = bucket_for(field_name)
    pid = prop.property_unique_id

    held = references_object(getattr(prop, field_name), file_url)
    new_value = dfields.without_url(field_name, getattr(prop, field_name), file_url, room_index=room_index)
    setattr(prop, field_name, new_value)
    prop.updated_at = datetime.utcnow()
    db.commit()

    detect_and_reset_section_reviews(db, pid, {field_name: new_value})

    # row first, object second
    if held:
        discard_url(storage, bucket=bucket, url=file_url)
    return {"success": True, "message": "Document deleted successfully"}
