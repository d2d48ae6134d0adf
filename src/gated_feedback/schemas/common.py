"""Shared Pydantic building blocks for API request/response models."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gated_feedback.utils.normalize import normalize_address, normalize_tx_hash

# The smallest transferable amount is 1 wei.
WEI_DECIMALS = 18


class CamelModel(BaseModel):
    """Model whose JSON field names are camelCase (``walletAddress``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RowModel(BaseModel):
    """Stored row rendered with its column names."""

    model_config = ConfigDict(from_attributes=True)


def wallet_field(value: str) -> str:
    return normalize_address(value)


def hash_field(value: str) -> str:
    return normalize_tx_hash(value)


def required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value
