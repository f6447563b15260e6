# backend/rentals/domain/document_fields.py
from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

RESTRICTED = "restricted"
PUBLIC = "public"

ROOMS = (
    "common_areas",
    "entry_hallways",
    "bedrooms",
    "living_room",
    "bathrooms",
    "kitchen",
    "exterior",
    "garage",
    "storage",
    "terrace",
)
PER_ROOM_AREAS = ("bedrooms", "bathrooms")


@dataclass(frozen=True)
class FieldMapping:
    visibility: str  # restricted|public
    folder: str


FIELD_MAPPINGS: dict[str, FieldMapping] = {
    # client
    "client_identity_doc_url": FieldMapping(RESTRICTED, "client/identity"),
    "client_bank_certificate_url": FieldMapping(RESTRICTED, "client/financial"),
    # legal
    "doc_purchase_contract": FieldMapping(RESTRICTED, "property/legal/purchase_contract"),
    "doc_land_registry_note": FieldMapping(RESTRICTED, "property/legal/land_registry_note"),
    "property_management_plan_contract_url": FieldMapping(
        RESTRICTED, "property/legal/property_management_plan_contract"
    ),
    # technical
    "doc_energy_cert": FieldMapping(RESTRICTED, "property/technical/energy_certificate"),
    "doc_renovation_files": FieldMapping(RESTRICTED, "property/technical/renovation"),
    # insurance + supplies
    "home_insurance_policy_url": FieldMapping(RESTRICTED, "property/insurance"),
    "doc_contract_electricity": FieldMapping(RESTRICTED, "property/supplies/electricity"),
    "doc_bill_electricity": FieldMapping(RESTRICTED, "property/supplies/electricity"),
    "doc_contract_water": FieldMapping(RESTRICTED, "property/supplies/water"),
    "doc_bill_water": FieldMapping(RESTRICTED, "property/supplies/water"),
    "doc_contract_gas": FieldMapping(RESTRICTED, "property/supplies/gas"),
    "doc_bill_gas": FieldMapping(RESTRICTED, "property/supplies/gas"),
    # custom documents
    "client_custom_identity_documents": FieldMapping(RESTRICTED, "client/identity"),
    "client_custom_financial_documents": FieldMapping(RESTRICTED, "client/financial"),
    "client_custom_other_documents": FieldMapping(RESTRICTED, "client/other"),
    "custom_insurance_documents": FieldMapping(RESTRICTED, "property/insurance"),
    "custom_technical_documents": FieldMapping(RESTRICTED, "property/technical/custom"),
    "custom_legal_documents": FieldMapping(RESTRICTED, "property/legal/custom"),
    "custom_supplies_documents": FieldMapping(RESTRICTED, "property/supplies/other"),
    "property_custom_other_documents": FieldMapping(RESTRICTED, "property/other"),
    # gallery
    "pics_urls": FieldMapping(PUBLIC, "gallery"),
}
for _room in ROOMS:
    FIELD_MAPPINGS[f"marketing_photos_{_room}"] = FieldMapping(PUBLIC, f"photos/marketing/{_room}")
    FIELD_MAPPINGS[f"incident_photos_{_room}"] = FieldMapping(PUBLIC, f"photos/incidents/{_room}")


def is_custom_document_field(field_name: str) -> bool:
    return field_name.startswith(("custom_", "property_custom_", "client_custom_"))


def is_array_field(field_name: str) -> bool:
    return field_name in ("doc_renovation_files", "pics_urls") or field_name.startswith(
        ("marketing_photos_", "incident_photos_")
    )


def is_per_room_field(field_name: str) -> bool:
    return is_array_field(field_name) and field_name.rsplit("_", 1)[-1] in PER_ROOM_AREAS


def _list(v: Any) -> list:
    return copy.deepcopy(v) if isinstance(v, list) else []


def with_uploaded_url(
    field_name: str,
    current: Any,
    url: str,
    *,
    old_value: Optional[str] = None,
    custom_title: Optional[str] = None,
    room_index: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Any:
    """
    New column value after storing ``url`` into ``field_name``.

    custom documents: append {title, url, createdAt}, or replace the entry whose url is old_value
    per-room photos with room_index: grow to the room, append or replace inside it
    array fields: append, or replace old_value in place
    anything else: the url itself
    """
    if is_custom_document_field(field_name):
        doc = {
            "title": custom_title,
            "url": url,
            "createdAt": (now or datetime.utcnow()).isoformat() + "Z",
        }
        docs = _list(current)
        if old_value:
            return [doc if isinstance(d, dict) and d.get("url") == old_value else d for d in docs]
        return docs + [doc]

    if is_per_room_field(field_name) and room_index is not None:
        rooms = _list(current)
        while len(rooms) <= room_index:
            rooms.append([])
        photos = rooms[room_index] if isinstance(rooms[room_index], list) else []
        if old_value and old_value in photos:
            photos[photos.index(old_value)] = url
        else:
            photos.append(url)
        rooms[room_index] = photos
        return rooms

    if is_array_field(field_name):
        urls = _list(current)
        if old_value and old_value in urls:
            return [url if u == old_value else u for u in urls]
        return urls + [url]

    return url


def without_url(field_name: str, current: Any, url: str, *, room_index: Optional[int] = None) -> Any:
    """Column value with ``url`` removed; scalar fields become None."""
    if is_custom_document_field(field_name):
        return [d for d in _list(current) if not (isinstance(d, dict) and d.get("url") == url)]

    if is_per_room_field(field_name) and room_index is not None:
        rooms = _list(current)
        if 0 <= room_index < len(rooms) and isinstance(rooms[room_index], list):
            rooms[room_index] = [u for u in rooms[room_index] if u != url]
        return rooms

    if is_array_field(field_name):
        return [u for u in _list(current) if u != url]

    return None
