"""Async HTTP client for the gated feedback API.

Used by the submission workflow to drive the same endpoints a browser would.
Non-2xx answers raise :class:`GateApiError` carrying the server's ``error``
message; transport failures surface as ``httpx.HTTPError``.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any

import httpx

from gated_feedback.services.rpc import ConfirmationCheck

logger = logging.getLogger(__name__)

HTTP_CONFLICT = 409


class GateApiError(RuntimeError):
    """Raised when the API answers with an error status."""

    def __init__(self, status_code: int, message: str, details: Any = None) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details

    @property
    def is_conflict(self) -> bool:
        return self.status_code == HTTP_CONFLICT


# Failures a caller may treat as "try again later".
API_ERRORS: tuple[type[BaseException], ...] = (GateApiError, httpx.HTTPError)


def _amount(value: Decimal | str) -> str:
    return str(value)


class GateApiClient:
    """Thin wrapper over the JSON endpoints mounted under ``/api``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = await self._ensure_client()
        response = await client.request(
            method,
            f"{self.base_url}/api{path}",
            json=json_data,
            params=params,
        )

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else None
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise GateApiError(response.status_code, message or response.reason_phrase, details)
        return body

    async def close(self) -> None:
        async with self._client_lock:
            if self._client is not None and self._owns_client:
                await self._client.aclose()
            self._client = None

    # Chain lookups

    async def get_balance(self, address: str) -> dict[str, Any]:
        return await self._request("POST", "/balance", json_data={"address": address})

    async def check_transaction(self, tx_hash: str) -> ConfirmationCheck:
        """Single receipt check through the API; suitable as a poller check."""
        body = await self._request("POST", "/check-transaction", json_data={"txHash": tx_hash})
        if not body.get("confirmed"):
            return ConfirmationCheck.pending(tx_hash)
        return ConfirmationCheck(
            tx_hash=body.get("txHash", tx_hash),
            confirmed=True,
            success=bool(body.get("success")),
            block_number=body.get("blockNumber"),
            gas_used=body.get("gasUsed"),
            status=body.get("status"),
            receipt=body.get("receipt"),
        )

    # Feedback and admin fee payments

    async def check_payment_status(self, wallet_address: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/check-payment-status", json_data={"walletAddress": wallet_address}
        )

    async def record_payment(
        self,
        *,
        payment_hash: str,
        wallet_address: str,
        amount: Decimal | str,
        status: str | None = None,
        block_number: int | None = None,
        gas_used: int | None = None,
        purpose: str = "feedback",
    ) -> dict[str, Any]:
        payload = {
            "paymentHash": payment_hash,
            "walletAddress": wallet_address,
            "amount": _amount(amount),
            "status": status,
            "blockNumber": block_number,
            "gasUsed": gas_used,
            "purpose": purpose,
        }
        return await self._request("POST", "/record-payment", json_data=payload)

    async def submit_feedback(
        self,
        *,
        wallet_address: str,
        feedback: str,
        category: str,
        is_anonymous: bool = True,
    ) -> dict[str, Any]:
        payload = {
            "feedback": feedback,
            "category": category,
            "walletAddress": wallet_address,
            "isAnonymous": is_anonymous,
        }
        return await self._request("POST", "/submit-feedback", json_data=payload)

    async def check_feedback_status(self, wallet_address: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/check-feedback-status", json_data={"walletAddress": wallet_address}
        )

    async def get_responses(self, **params: Any) -> dict[str, Any]:
        return await self._request("GET", "/get-responses", params=params)

    # Admin registry

    async def admin_check_status(self, wallet_address: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/admin/check-status", json_data={"walletAddress": wallet_address}
        )

    async def admin_create(
        self,
        *,
        wallet_address: str,
        payment_hash: str,
        amount: Decimal | str,
    ) -> dict[str, Any]:
        payload = {
            "walletAddress": wallet_address,
            "paymentHash": payment_hash,
            "amount": _amount(amount),
        }
        return await self._request("POST", "/admin/create", json_data=payload)

    # Forms

    async def form_check_payment(
        self,
        *,
        wallet_address: str,
        form_id: int,
        payment_amount: Decimal | str,
    ) -> dict[str, Any]:
        payload = {
            "walletAddress": wallet_address,
            "formId": form_id,
            "paymentAmount": _amount(payment_amount),
        }
        return await self._request("POST", "/forms/check-payment", json_data=payload)

    async def form_check_submission(self, *, wallet_address: str, form_id: int) -> dict[str, Any]:
        payload = {"walletAddress": wallet_address, "formId": form_id}
        return await self._request("POST", "/forms/check-submission", json_data=payload)

    async def form_record_payment(
        self,
        *,
        form_id: int,
        payment_hash: str,
        wallet_address: str,
        amount: Decimal | str,
        status: str | None = None,
        block_number: int | None = None,
        gas_used: int | None = None,
    ) -> dict[str, Any]:
        payload = {
            "formId": form_id,
            "paymentHash": payment_hash,
            "walletAddress": wallet_address,
            "amount": _amount(amount),
            "status": status,
            "blockNumber": block_number,
            "gasUsed": gas_used,
        }
        return await self._request("POST", "/forms/record-payment", json_data=payload)

    async def form_submit_response(
        self,
        *,
        form_id: int,
        wallet_address: str,
        responses: dict[str, Any],
    ) -> dict[str, Any]:
        payload = {"formId": form_id, "walletAddress": wallet_address, "responses": responses}
        return await self._request("POST", "/forms/submit-response", json_data=payload)

    async def get_form(self, slug: str) -> dict[str, Any]:
        return await self._request("GET", f"/forms/by-slug/{slug}")
