# src/gated_feedback/api/v1/endpoints/feedback.py
"""Feedback submission and listing endpoints."""

import math
from typing import Annotated

from fastapi import APIRouter, Query, status

from gated_feedback.api.v1.dependencies import SessionDep
from gated_feedback.core.settings import settings
from gated_feedback.schemas.feedback import (
    FeedbackListResponse,
    FeedbackRow,
    FeedbackStatusRequest,
    FeedbackStatusResponse,
    FeedbackSubmit,
    FeedbackSubmitResponse,
)
from gated_feedback.services import feedback_ledger
from gated_feedback.services.errors import InvalidInputError

router = APIRouter(tags=["feedback"])

FILTER_ALL = "all"


@router.post(
    "/submit-feedback",
    response_model=FeedbackSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(body: FeedbackSubmit, db: SessionDep) -> FeedbackSubmitResponse:
    """Store one feedback entry for a wallet with a confirmed payment."""
    row = feedback_ledger.submit_feedback(
        db,
        text=body.feedback,
        category=body.category,
        wallet_address=body.wallet_address,
        anonymous=body.is_anonymous,
    )
    return FeedbackSubmitResponse(feedback_id=row.id)


@router.post("/check-feedback-status", response_model=FeedbackStatusResponse)
async def check_feedback_status(
    body: FeedbackStatusRequest,
    db: SessionDep,
) -> FeedbackStatusResponse:
    row = feedback_ledger.get_feedback_by_wallet(db, body.wallet_address)
    if row is None:
        return FeedbackStatusResponse(has_submitted_feedback=False)
    return FeedbackStatusResponse(
        has_submitted_feedback=True,
        feedback_id=row.id,
        submitted_at=row.created_at,
    )


def _parse_anonymous(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered == FILTER_ALL:
        return None
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise InvalidInputError("anonymous must be one of: all, true, false")


@router.get("/get-responses", response_model=FeedbackListResponse)
async def get_responses(
    db: SessionDep,
    category: Annotated[str, Query()] = FILTER_ALL,
    anonymous: Annotated[str, Query()] = FILTER_ALL,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> FeedbackListResponse:
    """Page through feedback, newest first, with anonymous wallets hidden."""
    if limit is None:
        limit = settings.responses_default_page_size
    limit = min(limit, settings.responses_max_page_size)
    offset = (page - 1) * limit

    result = feedback_ledger.get_all_feedback(
        db,
        category=None if category == FILTER_ALL else category,
        anonymous=_parse_anonymous(anonymous),
        limit=limit,
        offset=offset,
    )
    return FeedbackListResponse(
        responses=[FeedbackRow.model_validate(row) for row in result.rows],
        total=result.total,
        page=page,
        total_pages=math.ceil(result.total / limit),
        has_next=offset + limit < result.total,
        has_prev=page > 1,
    )
