# backend/rentals/routers/documents.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property
from ..clients.supabase_storage import SupabaseStorage, get_storage
from ..db import get_db
from ..schemas import PropertyDocumentDelete
from ..services.ownership import must_get_property
from ..services.property_documents import (
    delete_property_document,
    mapping_for,
    parse_room_index,
    upload_property_document,
)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload")
def upload_document(
    file: UploadFile = File(...),
    fieldName: str = Form(...),
    propertyId: str = Form(...),
    oldValue: Optional[str] = Form(default=None),
    customTitle: Optional[str] = Form(default=None),
    roomIndex: Optional[str] = Form(default=None),
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(get_principal),
):
    mapping_for(fieldName)
    room_index = parse_room_index(roomIndex)

    require_edit_property(p, propertyId)
    prop = must_get_property(db, property_unique_id=propertyId)

    return upload_property_document(
        db,
        prop,
        storage,
        field_name=fieldName,
        filename=file.filename,
        content=file.file.read(),
        content_type=file.content_type,
        old_value=oldValue or None,
        custom_title=customTitle,
        room_index=room_index,
    )


@router.delete("/delete")
def delete_document(
    payload: PropertyDocumentDelete,
    db: Session = Depends(get_db),
    storage: SupabaseStorage = Depends(get_storage),
    p: Principal = Depends(get_principal),
):
    mapping_for(payload.fieldName)

    require_edit_property(p, payload.propertyId)
    prop = must_get_property(db, property_unique_id=payload.propertyId)

    return delete_property_document(
        db,
        prop,
        storage,
        field_name=payload.fieldName,
        file_url=payload.fileUrl,
        room_index=parse_room_index(payload.roomIndex),
    )
