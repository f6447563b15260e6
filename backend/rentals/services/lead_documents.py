# backend/rentals/services/lead_documents.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..clients.supabase_storage import SupabaseStorage
from ..config import settings
from ..domain import laboral_docs as ld
from ..domain.storage_paths import build_object_path, extract_storage_path, references_object
from ..models import Lead
from .document_storage import discard_objects, discard_url, upload_and_sign

log = logging.getLogger(__name__)


def _bucket() -> str:
    return settings.leads_restricted_bucket


def _held_documents(lead: Lead) -> list[Any]:
    return [lead.identity_doc_url, lead.laboral_financial_docs]


def clear_obligatory_docs(db: Session, lead: Lead, storage: SupabaseStorage, *, commit: bool = True) -> list[str]:
    """
    Drop every obligatory laboral/financial document of a lead.

    Storage objects go first (per-file, failures logged and skipped), then the
    map is persisted as {} with complementary documents left alone.
    Returns the storage paths that were removed.
    """
    docs = ld.normalize_docs(lead.laboral_financial_docs)
    paths = [extract_storage_path(url) for url in docs["obligatory"].values() if isinstance(url, str)]
    removed = discard_objects(storage, bucket=_bucket(), paths=paths)

    docs["obligatory"] = {}
    lead.laboral_financial_docs = docs
    lead.updated_at = datetime.utcnow()
    if commit:
        db.commit()

    log.info(
        "cleared obligatory lead documents",
        extra={"lead_id": lead.leads_unique_id, "path": removed},
    )
    return removed


def upload_lead_document(
    db: Session,
    lead: Lead,
    storage: SupabaseStorage,
    *,
    filename: Optional[str],
    content: bytes,
    content_type: Optional[str],
    old_value: Optional[str] = None,
    folder: Optional[str] = None,
    field_key: Optional[str] = None,
    doc_type: Optional[str] = None,
    doc_title: Optional[str] = None,
) -> dict[str, Any]:
    if folder and folder != ld.LABORAL_FOLDER:
        raise HTTPException(status_code=400, detail=f"Unknown folder: {folder}")

    if folder == ld.LABORAL_FOLDER:
        if field_key:
            if field_key not in ld.OBLIGATORY_FIELDS:
                raise HTTPException(status_code=400, detail=f"Unknown obligatory field: {field_key}")
            stem = field_key
        elif doc_type:
            if doc_type not in ld.COMPLEMENTARY_DOC_TYPES:
                raise HTTPException(status_code=400, detail=f"Unknown document type: {doc_type}")
            if doc_type == ld.OTHER_DOC_TYPE and not (doc_title or "").strip():
                raise HTTPException(status_code=400, detail="docTitle is required for docType Otros")
            stem = doc_type
        else:
            raise HTTPException(status_code=400, detail="fieldKey or docType is required for laboral_financial")
        path = build_object_path(lead.leads_unique_id, ld.LABORAL_FOLDER, stem, filename)
    else:
        path = build_object_path(lead.leads_unique_id, ld.IDENTITY_FOLDER, "identity_doc_url", filename)

    drop_old = references_object(_held_documents(lead), old_value)
    url = upload_and_sign(storage, bucket=_bucket(), path=path, content=content, content_type=content_type)

    try:
        if folder != ld.LABORAL_FOLDER:
            lead.identity_doc_url = url
        else:
            docs = ld.normalize_docs(lead.laboral_financial_docs)
            if field_key:
                docs["obligatory"][field_key] = url
            else:
                docs["complementary"].append(
                    {
                        "type": doc_type,
                        "title": (doc_title or "").strip() if doc_type == ld.OTHER_DOC_TYPE else doc_type,
                        "url": url,
                        "createdAt": datetime.utcnow().isoformat() + "Z",
                    }
                )
            lead.laboral_financial_docs = docs
        lead.updated_at = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("lead document db update failed", extra={"lead_id": lead.leads_unique_id})
        discard_objects(storage, bucket=_bucket(), paths=[path])
        raise HTTPException(status_code=500, detail=f"Failed to update database: {e}")

    if drop_old:
        discard_url(storage, bucket=_bucket(), url=old_value)

    return {"success": True, "url": url}


def delete_lead_document(
    db: Session,
    lead: Lead,
    storage: SupabaseStorage,
    *,
    file_url: str,
    field_type: Optional[str] = None,
    field_key: Optional[str] = None,
) -> dict[str, Any]:
    held = references_object(_held_documents(lead), file_url)

    if field_type == ld.LABORAL_FOLDER:
        docs = ld.normalize_docs(lead.laboral_financial_docs)
        if field_key:
            docs["obligatory"].pop(field_key, None)
        else:
            docs["complementary"] = [d for d in docs["complementary"] if not (isinstance(d, dict) and d.get("url") == file_url)]
        lead.laboral_financial_docs = docs
    else:
        lead.identity_doc_url = None

    lead.updated_at = datetime.utcnow()
    db.commit()

    # row first, object second
    if held:
        discard_url(storage, bucket=_bucket(), url=file_url)
    return {"success": True, "message": "Document deleted successfully"}
