# backend/rentals/domain/permissions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional

ADMIN = "supply_admin"
ANALYST = "supply_analyst"
PARTNER = "supply_partner"

APP_ROLES = (ADMIN, ANALYST, PARTNER)


@dataclass(frozen=True)
class RoleGrant:
    role: str
    property_id: Optional[str] = None


def _has(grants: Iterable[RoleGrant], *roles: str) -> bool:
    return any(g.role in roles for g in grants)


def is_admin(grants: Iterable[RoleGrant]) -> bool:
    return _has(grants, ADMIN)


def is_analyst(grants: Iterable[RoleGrant]) -> bool:
    return _has(grants, ANALYST)


def is_partner(grants: Iterable[RoleGrant]) -> bool:
    return _has(grants, PARTNER)


def can_view_all_properties(grants: Iterable[RoleGrant]) -> bool:
    return _has(grants, ADMIN, ANALYST)


def _partner_assigned(grants: Iterable[RoleGrant], property_id: str) -> bool:
    return any(g.role == PARTNER and g.property_id == property_id for g in grants)


def can_view_property(grants: Iterable[RoleGrant], property_id: str) -> bool:
    grants = list(grants)
    return can_view_all_properties(grants) or _partner_assigned(grants, property_id)


def can_edit_property(grants: Iterable[RoleGrant], property_id: str) -> bool:
    # partners edit what they can see
    return can_view_property(grants, property_id)


def can_delete_property(grants: Iterable[RoleGrant]) -> bool:
    return is_admin(grants)


def can_manage_users(grants: Iterable[RoleGrant]) -> bool:
    return is_admin(grants)


def accessible_property_ids(grants: Iterable[RoleGrant]) -> list[str] | Literal["all"]:
    grants = list(grants)
    if can_view_all_properties(grants):
        return "all"
    return [g.property_id for g in grants if g.role == PARTNER and g.property_id]
