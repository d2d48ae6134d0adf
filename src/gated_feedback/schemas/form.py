"""Form, question and response schemas."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator

from .common import WEI_DECIMALS, CamelModel, RowModel, required_text, wallet_field


class QuestionInput(CamelModel):
    """Question as sent by the form builder.

    Blank questions are allowed here and skipped when the form is created.
    """

    question_text: str = ""
    question_type: str | None = None
    question_options: list[str] | None = None
    is_required: bool = False
    order_index: int | None = None


class FormCreate(CamelModel):
    name: str
    slug: str
    title: str
    description: str | None = None
    payment_amount: Decimal = Field(..., ge=0, decimal_places=WEI_DECIMALS)
    admin_wallet_address: str
    questions: list[QuestionInput] = Field(default_factory=list)

    @field_validator("name", "slug", "title")
    @classmethod
    def _require_text(cls, value: str) -> str:
        return required_text(value)

    @field_validator("admin_wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FormSummary(CamelModel):
    id: int
    name: str
    slug: str
    title: str
    description: str | None = None
    payment_amount: str
    created_at: datetime


class FormCreateResponse(CamelModel):
    message: str = "Form created successfully"
    form: FormSummary


class FormRow(RowModel):
    id: int
    name: str
    slug: str
    title: str
    description: str | None = None
    payment_amount: str
    admin_wallet_address: str
    is_active: bool
    created_at: datetime


class QuestionRow(RowModel):
    id: int
    form_id: int
    question_text: str
    question_type: str
    question_options: list[str] | None = None
    is_required: bool
    order_index: int


class ResponseRow(RowModel):
    id: int
    form_id: int
    response_data: dict[str, Any]
    wallet_address: str
    payment_hash: str
    submitted_at: datetime


class PublicForm(CamelModel):
    form: FormRow
    questions: list[QuestionRow]


class FormPaymentCheck(CamelModel):
    wallet_address: str
    form_id: int
    payment_amount: Decimal = Field(..., ge=0, decimal_places=WEI_DECIMALS)

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FormPaymentCheckResponse(CamelModel):
    has_payment: bool


class FormSubmissionCheck(CamelModel):
    wallet_address: str
    form_id: int

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FormSubmissionCheckResponse(CamelModel):
    has_submitted: bool


class ResponseSubmit(CamelModel):
    """Answers keyed by question id."""

    form_id: int
    responses: dict[str, Any]
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class ResponseSubmitResponse(CamelModel):
    message: str = "Response submitted successfully"
    response_id: int
    submitted_at: datetime
