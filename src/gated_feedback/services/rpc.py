"""Blockchain node client built on web3.py.

Covers the two read calls the service needs (native balance and
transaction receipt) plus the chain id, gas price and transaction sending
used by the JSON-RPC wallet. Receipt checks are single point-in-time
lookups; polling cadence belongs to :mod:`gated_feedback.services.confirmation`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Any

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception
from web3.providers.async_base import AsyncBaseProvider

from gated_feedback.core.settings import settings

logger = logging.getLogger(__name__)

DISPLAY_QUANTUM = Decimal("0.0001")
RECEIPT_STATUS_SUCCESS = 1
RECEIPT_STATUS_FAILURE = 0

# Failures from the node or the transport underneath it.
NODE_ERRORS: tuple[type[BaseException], ...] = (
    Web3Exception,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class RpcError(RuntimeError):
    """Raised when the node is unreachable or returns an unusable answer."""


def wei_to_token(wei: int) -> Decimal:
    """Convert wei into a display amount with four decimals."""
    return Decimal(Web3.from_wei(wei, "ether")).quantize(DISPLAY_QUANTUM, rounding=ROUND_DOWN)


def token_to_wei(amount: Decimal | str) -> int:
    """Convert a token amount like ``"0.01"`` into integer wei."""
    amount = Decimal(amount)
    wei = Web3.to_wei(amount, "ether")
    if Web3.from_wei(wei, "ether") != amount:
        raise ValueError(f"Amount {amount} has more precision than wei allows")
    return wei


def _checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


@dataclass(frozen=True)
class BalanceReading:
    """Native balance of an address at the latest block."""

    address: str
    wei: int

    @property
    def hex_value(self) -> str:
        return Web3.to_hex(self.wei)

    @property
    def display(self) -> Decimal:
        return wei_to_token(self.wei)


@dataclass(frozen=True)
class ConfirmationCheck:
    """Result of one receipt lookup.

    ``confirmed`` is False while the node has no receipt; the remaining
    fields are only populated once it does.
    """

    tx_hash: str
    confirmed: bool
    success: bool | None = None
    block_number: int | None = None
    gas_used: int | None = None
    status: str | None = None
    receipt: dict[str, Any] | None = field(default=None, compare=False)

    @classmethod
    def pending(cls, tx_hash: str) -> ConfirmationCheck:
        return cls(tx_hash=tx_hash, confirmed=False)

    @classmethod
    def from_receipt(cls, tx_hash: str, receipt: Any) -> ConfirmationCheck:
        status = receipt.get("status")
        if status not in (RECEIPT_STATUS_SUCCESS, RECEIPT_STATUS_FAILURE):
            raise RpcError(f"Receipt for {tx_hash} has unexpected status {status!r}")
        block_number = receipt.get("blockNumber")
        gas_used = receipt.get("gasUsed")
        if not isinstance(block_number, int) or not isinstance(gas_used, int):
            raise RpcError(f"Receipt for {tx_hash} is missing block number or gas used")
        return cls(
            tx_hash=tx_hash,
            confirmed=True,
            success=status == RECEIPT_STATUS_SUCCESS,
            block_number=block_number,
            gas_used=gas_used,
            status=Web3.to_hex(status),
            receipt=json.loads(Web3.to_json(receipt)),
        )


class ChainRpcClient:
    """Async web3 wrapper around a single node endpoint."""

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        provider: AsyncBaseProvider | None = None,
    ) -> None:
        self.url = url or settings.rpc_url
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.rpc_timeout_seconds
        )
        self._owns_provider = provider is None
        if provider is None:
            provider = AsyncHTTPProvider(
                self.url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=self.timeout_seconds)},
            )
        self.w3 = AsyncWeb3(provider)

    async def _run(self, label: str, call: Any) -> Any:
        try:
            return await call
        except NODE_ERRORS as exc:
            logger.warning("RPC %s failed: %s", label, exc)
            raise RpcError(f"RPC request failed: {exc}") from exc

    async def get_balance(self, address: str) -> BalanceReading:
        """Read the native balance of ``address`` at the latest block."""
        wei = await self._run(
            "eth_getBalance", self.w3.eth.get_balance(_checksum(address), "latest")
        )
        return BalanceReading(address=address, wei=int(wei))

    async def check_transaction(self, tx_hash: str) -> ConfirmationCheck:
        """Report whether ``tx_hash`` is mined and whether it succeeded."""
        try:
            receipt = await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return ConfirmationCheck.pending(tx_hash)
        except NODE_ERRORS as exc:
            logger.warning("RPC eth_getTransactionReceipt failed: %s", exc)
            raise RpcError(f"RPC request failed: {exc}") from exc
        return ConfirmationCheck.from_receipt(tx_hash, receipt)

    async def get_chain_id(self) -> int:
        return int(await self._run("eth_chainId", self.w3.eth.chain_id))

    async def get_gas_price(self) -> int:
        return int(await self._run("eth_gasPrice", self.w3.eth.gas_price))

    async def send_transaction(self, transaction: dict[str, Any]) -> str:
        """Send a transaction from an account the node holds unlocked."""
        tx = dict(transaction)
        for key in ("from", "to"):
            if key in tx:
                tx[key] = _checksum(tx[key])
        tx_hash = await self._run("eth_sendTransaction", self.w3.eth.send_transaction(tx))
        return Web3.to_hex(tx_hash)

    async def close(self) -> None:
        """Release the provider's HTTP sessions if this instance created it."""
        if self._owns_provider:
            await self.w3.provider.disconnect()


class _RpcClientSingleton:
    _instance: ChainRpcClient | None = None

    @classmethod
    def get_instance(cls) -> ChainRpcClient:
        if cls._instance is None:
            cls._instance = ChainRpcClient()
        return cls._instance


def get_rpc_client() -> ChainRpcClient:
    """Return the process-wide node client."""
    return _RpcClientSingleton.get_instance()
