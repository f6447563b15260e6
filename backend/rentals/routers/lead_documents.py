# backend/rentals/routers/lead_documents.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..auth import Principal, require_staff
from ..clients.supabase_storage import SupabaseStorage, get_storage
from ..db import get_db
from ..schemas import LeadDocumentDelete
from ..services.lead_documents import clear_obligatory_docs, delete_lead_document, upload_lead_document
from ..services.ownership import must_get_lead

router = APIRouter(prefix="/leads", tags=["lead-documents"])


@router.post("/{leads_unique_id}/documents/upload")
def upload_document(
    leads_unique_id: str,
    file: UploadFile = File(...),
    oldValue: Optional[str] = Form(default=None),
    folder: Optional[str] = Form(default=None),
    fieldKey: Optional[str] = Form(default=None),
    docType: Optional[str] = Form(default=None),
    docTitle: Optional[str] = Form(default=None),
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(require_staff),
):
    lead = must_get_lead(db, leads_unique_id=leads_unique_id)
    return upload_lead_document(
        db,
        lead,
        storage,
        filename=file.filename,
        content=file.file.read(),
        content_type=file.content_type,
        old_value=oldValue or None,
        folder=folder or None,
        field_key=fieldKey or None,
        doc_type=docType or None,
        doc_title=docTitle,
    )


@router.delete("/{leads_unique_id}/documents/delete")
def delete_document(
    leads_unique_id: str,
    payload: LeadDocumentDelete,
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(require_staff),
):
    lead = must_get_lead(db, leads_unique_id=leads_unique_id)
    return delete_lead_document(
        db,
        lead,
        storage,
        file_url=payload.fileUrl,
        field_type=payload.fieldType,
        field_key=payload.fieldKey,
    )


@router.post("/{leads_unique_id}/documents/clear-laboral-obligatory")
def clear_laboral_obligatory(
    leads_unique_id: str,
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(require_staff),
):
    lead = must_get_lead(db, leads_unique_id=leads_unique_id)
    removed = clear_obligatory_docs(db, lead, storage)
    return {"success": True, "removed": removed}
