# backend/rentals/services/section_review_reset.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain import section_reviews as sr
from ..domain.events import emit_workflow_event
from ..models import Property

log = logging.getLogger(__name__)

REVIEWS_UPDATED_EVENT = "prophero_reviews.updated"


def detect_and_reset_section_reviews(
    db: Session,
    property_unique_id: str,
    updated_fields: Mapping[str, Any],
) -> bool:
    """
    Re-open flagged Prophero sections whose tracked fields were just changed.

    Runs after the caller's own write has committed. Returns True when at
    least one section was reset. Never raises: read/parse/write failures are
    logged and reported as False.
    """
    if not any(f in sr.FIELD_TO_SECTION for f in updated_fields):
        return False

    try:
        row = db.scalar(select(Property).where(Property.property_unique_id == property_unique_id))
        if row is None:
            log.warning("section review check: property not found", extra={"property_id": property_unique_id})
            return False

        if row.current_stage != sr.PROPHERO_STAGE:
            return False

        try:
            reviews = sr.parse_reviews(row.prophero_section_reviews)
        except sr.ReviewsParseError:
            log.exception("could not parse prophero_section_reviews", extra={"property_id": property_unique_id})
            return False

        to_reset = sr.sections_to_reset(reviews, updated_fields)
        if not to_reset:
            return False

        updated = sr.apply_resets(reviews, to_reset)
        row.prophero_section_reviews = updated
        row.updated_at = datetime.utcnow()

        emit_workflow_event(
            db,
            actor="system",
            event_type=REVIEWS_UPDATED_EVENT,
            property_id=property_unique_id,
            payload={"propertyId": property_unique_id, "propheroSectionReviews": updated},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("section review reset failed", extra={"property_id": property_unique_id})
        return False

    log.info(
        "prophero sections reset",
        extra={"property_id": property_unique_id, "section_ids": to_reset},
    )
    return True
