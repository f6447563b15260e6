# backend/rentals/auth.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import jwt  # PyJWT
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .domain import permissions as perms
from .domain.permissions import RoleGrant
from .models import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    grants: tuple[RoleGrant, ...] = field(default_factory=tuple)

    @property
    def roles(self) -> list[str]:
        return sorted({g.role for g in self.grants})


# -------------------------
# Token + role helpers
# -------------------------
def decode_supabase_token(token: str) -> dict[str, Any]:
    secret = (settings.supabase_jwt_secret or "").strip()
    if not secret:
        raise HTTPException(status_code=500, detail="Server configuration error: Missing Supabase JWT secret")
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def load_grants(db: Session, *, user_id: Optional[str] = None, email: Optional[str] = None) -> tuple[RoleGrant, ...]:
    q = select(UserRole)
    if user_id:
        q = q.where(UserRole.user_id == user_id)
    elif email:
        q = q.where(UserRole.email == email)
    else:
        return ()
    return tuple(RoleGrant(role=str(r.role), property_id=r.property_id) for r in db.scalars(q).all())


def _dev_grants(role_header: str, property_header: str) -> tuple[RoleGrant, ...]:
    roles = [r.strip().lower() for r in role_header.split(",") if r.strip()]
    property_ids = [x.strip() for x in property_header.split(",") if x.strip()]

    out: list[RoleGrant] = []
    for role in roles:
        if role not in perms.APP_ROLES:
            raise HTTPException(status_code=401, detail=f"Unknown role: {role}")
        if role == perms.PARTNER:
            out.extend(RoleGrant(role=role, property_id=pid) for pid in property_ids)
        else:
            out.append(RoleGrant(role=role))
    return tuple(out)


# -------------------------
# get_principal
# -------------------------
def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    """
    Auth modes:
      1) Authorization: Bearer <Supabase access token>  (auth_mode=jwt)
      2) dev header spoofing (ONLY if settings.auth_mode == "dev")
    """
    token = None
    if authorization and str(authorization).lower().startswith("bearer "):
        token = str(authorization).split(" ", 1)[1].strip()

    if token:
        claims = decode_supabase_token(token)
        sub = str(claims.get("sub") or "")
        if not sub:
            raise HTTPException(status_code=401, detail="Token missing sub")
        email = str(claims.get("email") or "")
        return Principal(user_id=sub, email=email, grants=load_grants(db, user_id=sub))

    if settings.auth_mode == "dev":
        email = (request.headers.get(settings.dev_header_user_email) or "").strip().lower()
        if not email:
            raise HTTPException(status_code=401, detail="Missing X-User-Email for dev auth")

        role_header = request.headers.get(settings.dev_header_user_role) or ""
        if role_header.strip():
            grants = _dev_grants(role_header, request.headers.get(settings.dev_header_property_id) or "")
        else:
            grants = load_grants(db, email=email)
        return Principal(user_id=email, email=email, grants=grants)

    raise HTTPException(status_code=401, detail="Not authenticated")


# -------------------------
# Route guards
# -------------------------
# A partner without a grant gets the same 404 as for a missing property, so
# property ids outside the grant stay undiscoverable.
def require_view_property(p: Principal, property_unique_id: str, *, not_found: str = "Property not found") -> None:
    if not perms.can_view_property(p.grants, property_unique_id):
        raise HTTPException(status_code=404, detail=not_found)


def require_edit_property(p: Principal, property_unique_id: str, *, not_found: str = "Property not found") -> None:
    if not perms.can_edit_property(p.grants, property_unique_id):
        raise HTTPException(status_code=404, detail=not_found)


def require_staff(p: Principal = Depends(get_principal)) -> Principal:
    if not perms.can_view_all_properties(p.grants):
        raise HTTPException(status_code=403, detail="Requires supply_admin or supply_analyst")
    return p


def require_admin(p: Principal = Depends(get_principal)) -> Principal:
    if not perms.can_manage_users(p.grants):
        raise HTTPException(status_code=403, detail="Requires supply_admin")
    return p
