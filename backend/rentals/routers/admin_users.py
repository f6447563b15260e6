# backend/rentals/routers/admin_users.py
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import Principal, require_admin
from ..clients.supabase_auth_admin import AuthAdminError, SupabaseAuthAdmin, get_auth_admin
from ..db import get_db
from ..domain import permissions as perms
from ..domain.audit import emit_audit
from ..models import UserRole
from ..schemas import AdminUserCreate, UserRoleOut

log = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.get("")
def list_users(db: Session = Depends(get_db), p: Principal = Depends(require_admin)):
    rows = db.scalars(select(UserRole).order_by(desc(UserRole.created_at), desc(UserRole.id))).all()
    return {"users": [UserRoleOut.model_validate(r) for r in rows]}


@router.post("")
def create_user(
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    admin: SupabaseAuthAdmin = Depends(get_auth_admin),
    p: Principal = Depends(require_admin),
):
    if payload.role == perms.PARTNER and not payload.property_id:
        raise HTTPException(status_code=400, detail="property_id is required for supply_partner")

    try:
        user = admin.create_user(email=payload.email, password=payload.password)
    except AuthAdminError as e:
        raise HTTPException(status_code=500, detail=str(e) or "Error creating user")

    user_id = user.get("id")
    if not user_id:
        raise HTTPException(status_code=500, detail="User creation failed")

    row = UserRole(
        user_id=str(user_id),
        email=user.get("email") or payload.email,
        role=payload.role,
        property_id=payload.property_id,
        created_at=datetime.utcnow(),
    )
    try:
        db.add(row)
        db.flush()
        emit_audit(
            db,
            actor=p.email,
            action="user_role.create",
            entity_type="UserRole",
            entity_id=str(user_id),
            after={"email": row.email, "role": row.role, "property_id": row.property_id},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.error("role assignment failed", extra={"user_id": str(user_id)}, exc_info=True)
        try:
            admin.delete_user(str(user_id))
        except AuthAdminError:
            log.warning("orphaned auth user", extra={"user_id": str(user_id)}, exc_info=True)
        raise HTTPException(status_code=500, detail="Error assigning role")

    db.refresh(row)
    return {"success": True, "user": UserRoleOut.model_validate(row)}
