# backend/rentals/domain/section_reviews.py
"""
Prophero section reviews.

A property in the "Viviendas Prophero" stage carries a JSON map
``{sectionId: review}`` in ``properties.prophero_section_reviews``. A reviewer
marks each section correct/incorrect; marking it incorrect stores a snapshot
of the section's fields. When a tracked field later diverges from that
snapshot, the section goes back to "not reviewed".

Everything here is pure: callers load/persist the map.
"""
from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

PROPHERO_STAGE = "Viviendas Prophero"
META_KEY = "_meta"

SECTION_FIELDS: dict[str, tuple[str, ...]] = {
    "property-management-info": ("admin_name", "keys_location"),
    "technical-documents": ("doc_energy_cert", "doc_renovation_files"),
    "legal-documents": ("doc_purchase_contract", "doc_land_registry_note"),
    "client-financial-info": ("client_iban", "client_bank_certificate_url"),
    "supplies-contracts": ("doc_contract_electricity", "doc_contract_water", "doc_contract_gas"),
    "supplies-bills": ("doc_bill_electricity", "doc_bill_water", "doc_bill_gas"),
    "home-insurance": ("home_insurance_type", "home_insurance_policy_url"),
    "property-management": (
        "property_management_plan",
        "property_management_plan_contract_url",
        "property_manager",
    ),
}

FIELD_TO_SECTION: dict[str, str] = {f: sid for sid, fields in SECTION_FIELDS.items() for f in fields}


class ReviewsParseError(ValueError):
    pass


def parse_reviews(raw: Any) -> dict[str, Any]:
    """Reviews map from the column value; text columns hold JSON."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise ReviewsParseError(f"prophero_section_reviews is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ReviewsParseError(f"prophero_section_reviews must be an object, got {type(raw).__name__}")
    return dict(raw)


def _canon(v: Any) -> str:
    return json.dumps(v, sort_keys=True, ensure_ascii=False, default=str)


def values_differ(new_value: Any, snapshot_value: Any) -> bool:
    # lists compare as multisets of deep-equal elements; a non-list side counts as empty
    if isinstance(new_value, list) or isinstance(snapshot_value, list):
        a = new_value if isinstance(new_value, list) else []
        b = snapshot_value if isinstance(snapshot_value, list) else []
        return sorted(_canon(x) for x in a) != sorted(_canon(x) for x in b)
    return new_value != snapshot_value


def _flagged_with_snapshot(review: Any) -> bool:
    return (
        isinstance(review, dict)
        and review.get("isCorrect") is False
        and isinstance(review.get("snapshot"), dict)
    )


def sections_to_reset(reviews: Mapping[str, Any], updated_fields: Mapping[str, Any]) -> list[str]:
    """Section ids whose snapshot disagrees with an updated field, in first-seen order."""
    out: list[str] = []
    for field_name, new_value in updated_fields.items():
        section_id = FIELD_TO_SECTION.get(field_name)
        if section_id is None or section_id in out:
            continue

        review = reviews.get(section_id)
        if not _flagged_with_snapshot(review):
            continue

        if values_differ(new_value, review["snapshot"].get(field_name)):
            out.append(section_id)
    return out


def reset_review(review: Mapping[str, Any]) -> dict[str, Any]:
    # submittedComments, snapshot and hasIssue are history and survive the reset
    return {**review, "isCorrect": None, "reviewed": False, "comments": None}


def apply_resets(reviews: Mapping[str, Any], section_ids: Iterable[str]) -> dict[str, Any]:
    out = dict(reviews)
    for sid in section_ids:
        out[sid] = reset_review(reviews[sid])
    return out


def section_snapshot(section_id: str, current_values: Mapping[str, Any]) -> dict[str, Any]:
    return {f: current_values.get(f) for f in SECTION_FIELDS[section_id]}


def record_review(
    reviews: Mapping[str, Any],
    section_id: str,
    *,
    current_values: Mapping[str, Any],
    is_correct: Optional[bool],
    set_is_correct: bool = True,
    comments: Optional[str] = None,
    set_comments: bool = False,
    submitted_comments: Optional[str] = None,
    set_submitted_comments: bool = False,
) -> dict[str, Any]:
    """
    Reviewer answer for one section.

    isCorrect=False takes a fresh snapshot of the section's fields and sets the
    historical hasIssue flag; other answers keep whatever snapshot exists.
    """
    if section_id not in SECTION_FIELDS:
        raise KeyError(section_id)

    prev = reviews.get(section_id)
    review: dict[str, Any] = dict(prev) if isinstance(prev, dict) else {}
    review.setdefault("isCorrect", None)
    review.setdefault("comments", None)
    review.setdefault("submittedComments", None)
    review.setdefault("snapshot", None)
    review.setdefault("hasIssue", False)

    if set_is_correct:
        review["isCorrect"] = is_correct
        review["reviewed"] = True
        if is_correct is False:
            review["snapshot"] = section_snapshot(section_id, current_values)
            review["hasIssue"] = True
    else:
        review.setdefault("reviewed", False)

    if set_comments:
        review["comments"] = comments or None
    if set_submitted_comments:
        review["submittedComments"] = submitted_comments or None

    out = dict(reviews)
    out[section_id] = review
    return out


def completeness(reviews: Mapping[str, Any]) -> dict[str, bool]:
    return {
        sid: isinstance(reviews.get(sid), dict) and reviews[sid].get("isCorrect") is True
        for sid in SECTION_FIELDS
    }
