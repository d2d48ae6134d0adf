"""Feedback submission and listing schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import field_validator

from .common import CamelModel, RowModel, wallet_field


class FeedbackSubmit(CamelModel):
    """Feedback text is length-checked by the ledger after trimming."""

    feedback: str
    category: str
    wallet_address: str
    is_anonymous: bool = True

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FeedbackSubmitResponse(CamelModel):
    success: bool = True
    feedback_id: int
    message: str = "Feedback submitted successfully"


class FeedbackStatusRequest(CamelModel):
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FeedbackStatusResponse(CamelModel):
    has_submitted_feedback: bool
    feedback_id: int | None = None
    submitted_at: datetime | None = None


class FeedbackRow(RowModel):
    """Listed feedback; ``wallet_address`` is null for anonymous rows."""

    id: int
    feedback: str
    category: str
    wallet_address: str | None
    is_anonymous: bool
    created_at: datetime


class FeedbackListResponse(CamelModel):
    success: bool = True
    responses: list[FeedbackRow]
    total: int
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool
