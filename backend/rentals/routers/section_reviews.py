# backend/rentals/routers/section_reviews.py
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_view_property
from ..db import get_db
from ..domain import section_reviews as sr
from ..domain.events import emit_workflow_event
from ..models import Property
from ..schemas import SectionReview, SectionReviewIn, SectionReviewsOut
from ..services.ownership import must_get_property
from ..services.section_review_reset import REVIEWS_UPDATED_EVENT

log = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["section-reviews"])


def _load(row: Property) -> dict:
    try:
        return sr.parse_reviews(row.prophero_section_reviews)
    except sr.ReviewsParseError as e:
        raise HTTPException(status_code=500, detail=str(e))


def _out(property_unique_id: str, reviews: dict) -> SectionReviewsOut:
    sections = {k: SectionReview.model_validate(v) for k, v in reviews.items() if k in sr.SECTION_FIELDS}
    done = sr.completeness(reviews)
    return SectionReviewsOut(
        propertyId=property_unique_id,
        reviews=sections,
        completeness=done,
        allComplete=all(done.values()),
    )


@router.get("/{property_unique_id}/section-reviews", response_model=SectionReviewsOut)
def get_section_reviews(property_unique_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    require_view_property(p, property_unique_id)
    row = must_get_property(db, property_unique_id=property_unique_id)
    return _out(property_unique_id, _load(row))


@router.put("/{property_unique_id}/section-reviews/{section_id}", response_model=SectionReviewsOut)
def put_section_review(
    property_unique_id: str,
    section_id: str,
    payload: SectionReviewIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    if section_id not in sr.SECTION_FIELDS:
        raise HTTPException(status_code=400, detail=f"Unknown section: {section_id}")

    require_edit_property(p, property_unique_id)
    row = must_get_property(db, property_unique_id=property_unique_id)

    sent = payload.model_fields_set
    updated = sr.record_review(
        _load(row),
        section_id,
        current_values=row.model_dump(),
        is_correct=payload.isCorrect,
        set_is_correct="isCorrect" in sent,
        comments=payload.comments,
        set_comments="comments" in sent,
        submitted_comments=payload.submittedComments,
        set_submitted_comments="submittedComments" in sent,
    )
    row.prophero_section_reviews = updated
    row.updated_at = datetime.utcnow()

    emit_workflow_event(
        db,
        principal=p,
        event_type=REVIEWS_UPDATED_EVENT,
        property_id=property_unique_id,
        payload={"propertyId": property_unique_id, "propheroSectionReviews": updated},
    )
    db.commit()

    log.info("section review recorded", extra={"property_id": property_unique_id, "section_ids": [section_id]})
    return _out(property_unique_id, updated)
