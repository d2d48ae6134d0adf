"""Schemas for the balance and transaction-confirmation endpoints."""
from __future__ import annotations

from typing import Any

from pydantic import field_validator

from .common import CamelModel, hash_field, wallet_field


class BalanceRequest(CamelModel):
    address: str

    @field_validator("address")
    @classmethod
    def _normalize_address(cls, value: str) -> str:
        return wallet_field(value)


class BalanceResponse(CamelModel):
    """Balance in wei as a decimal string plus the node's raw hex value."""

    balance: str
    address: str
    balance_hex: str


class TransactionCheckRequest(CamelModel):
    tx_hash: str

    @field_validator("tx_hash")
    @classmethod
    def _normalize_hash(cls, value: str) -> str:
        return hash_field(value)


class TransactionCheckResponse(CamelModel):
    """Receipt summary; only ``confirmed`` and ``txHash`` while unmined."""

    confirmed: bool
    tx_hash: str
    success: bool | None = None
    block_number: int | None = None
    gas_used: int | None = None
    status: str | None = None
    receipt: dict[str, Any] | None = None
