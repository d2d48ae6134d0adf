"""Admin registry schemas."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from .common import WEI_DECIMALS, CamelModel, hash_field, wallet_field
from .form import FormRow, QuestionRow, ResponseRow


class AdminWallet(CamelModel):
    """Body carrying only the caller's wallet."""

    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class AdminStatusResponse(CamelModel):
    is_admin: bool


class AdminCreate(CamelModel):
    wallet_address: str
    payment_hash: str
    amount: Decimal = Field(..., ge=0, decimal_places=WEI_DECIMALS)

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)

    @field_validator("payment_hash")
    @classmethod
    def _normalize_hash(cls, value: str) -> str:
        return hash_field(value)


class AdminSummary(CamelModel):
    id: int
    wallet_address: str
    created_at: datetime


class AdminCreateResponse(CamelModel):
    message: str = "Admin created successfully"
    admin: AdminSummary


class AdminFormsResponse(CamelModel):
    forms: list[FormRow]


class FormResponsesRequest(CamelModel):
    form_id: int
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class FormResponsesResponse(CamelModel):
    success: bool = True
    form: FormRow
    questions: list[QuestionRow]
    responses: list[ResponseRow]
    total: int
