"""Payment ledger schemas."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator

from .common import WEI_DECIMALS, CamelModel, RowModel, hash_field, wallet_field

PaymentStatusLiteral = Literal["pending", "confirmed", "failed"]


class PaymentRow(RowModel):
    """Payment as stored."""

    payment_hash: str
    wallet_address: str
    amount: str
    status: str
    purpose: str
    block_number: int | None = None
    gas_used: int | None = None
    form_id: int | None = None
    created_at: datetime
    confirmed_at: datetime | None = None


class _PaymentRecordBase(CamelModel):
    payment_hash: str
    wallet_address: str
    amount: Decimal = Field(..., ge=0, decimal_places=WEI_DECIMALS)
    status: PaymentStatusLiteral | None = None
    block_number: int | None = Field(None, ge=0)
    gas_used: int | None = Field(None, ge=0)

    @field_validator("payment_hash")
    @classmethod
    def _normalize_hash(cls, value: str) -> str:
        return hash_field(value)

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class PaymentRecordRequest(_PaymentRecordBase):
    """Feedback or admin fee payment."""

    purpose: Literal["feedback", "admin"] = "feedback"


class FormPaymentRecordRequest(_PaymentRecordBase):
    """Payment unlocking a single form."""

    form_id: int


class PaymentRecordResponse(CamelModel):
    success: bool = True
    payment: PaymentRow
    action: Literal["created", "updated"]


class PaymentStatusRequest(CamelModel):
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return wallet_field(value)


class PaymentStatusResponse(CamelModel):
    has_payment: bool
    payment_count: int
    last_payment: PaymentRow | None = None
