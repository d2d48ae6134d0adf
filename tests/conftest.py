# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from decimal import Decimal
from typing import Any

import aiohttp
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from web3.providers.async_base import AsyncBaseProvider

os.environ.setdefault("DATABASE_URL", "sqlite://")

from gated_feedback.api.v1.dependencies import get_rpc_client_dep
from gated_feedback.db.session import Base
from gated_feedback.db.session import get_db as app_get_session
from gated_feedback.main import app as fastapi_app
from gated_feedback.models import Payment
from gated_feedback.services import admin_registry, payment_ledger
from gated_feedback.services.rpc import ChainRpcClient

TEST_DB_URL = "sqlite://"
NODE_URL = "http://node.test"

USER_WALLET = "0x" + "b" * 40
OTHER_WALLET = "0x" + "c" * 40
ADMIN_WALLET = "0x" + "a" * 40


def _rpc_error(message: str, code: int = -32000) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}}


class FakeNode(AsyncBaseProvider):
    """In-memory JSON-RPC node plugged into web3 as its provider."""

    def __init__(self) -> None:
        super().__init__()
        self.balances: dict[str, int] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, list[Any]]] = []
        self.sent: list[dict[str, Any]] = []
        self.http_failures = 0
        self.rpc_errors: dict[str, str] = {}
        self.chain_id = "0x279f"
        self.gas_price = "0x3b9aca00"
        self.next_tx_hash = "0x" + "ab" * 32

    def mine(self, tx_hash: str, *, success: bool = True, block: int = 5, gas: int = 21000) -> None:
        self.receipts[tx_hash.lower()] = {
            "transactionHash": tx_hash,
            "status": "0x1" if success else "0x0",
            "blockNumber": hex(block),
            "gasUsed": hex(gas),
        }

    async def is_connected(self, show_traceback: bool = False) -> bool:
        return True

    async def make_request(self, method: str, params: Any) -> dict[str, Any]:
        params = list(params)
        self.calls.append((method, params))

        if self.http_failures:
            self.http_failures -= 1
            raise aiohttp.ClientConnectionError("node unavailable (503)")
        if method in self.rpc_errors:
            return _rpc_error(self.rpc_errors[method])

        if method == "eth_getBalance":
            result: Any = hex(self.balances.get(params[0].lower(), 0))
        elif method == "eth_getTransactionReceipt":
            tx_hash = params[0]
            key = tx_hash.lower() if isinstance(tx_hash, str) else "0x" + bytes(tx_hash).hex()
            result = self.receipts.get(key)
        elif method == "eth_chainId":
            result = self.chain_id
        elif method == "eth_gasPrice":
            result = self.gas_price
        elif method == "eth_sendTransaction":
            self.sent.append(dict(params[0]))
            result = self.next_tx_hash
        else:
            return _rpc_error(f"method not found: {method}", code=-32601)
        return {"jsonrpc": "2.0", "id": 1, "result": result}


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def rpc_client(fake_node: FakeNode) -> ChainRpcClient:
    return ChainRpcClient(NODE_URL, provider=fake_node)


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    rpc_client: ChainRpcClient,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_rpc_client_dep] = lambda: rpc_client
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_rpc_client_dep, None)


@pytest.fixture()
def client(app: FastAPI, override_dependencies: None) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_payment(db_session: Session) -> Callable[..., Payment]:
    """Create a payment row directly in the ledger."""
    counter = iter(range(1, 10_000))

    def _make(
        wallet_address: str = USER_WALLET,
        *,
        status: str = "confirmed",
        amount: str = "0.01",
        purpose: str = "feedback",
        form_id: int | None = None,
        payment_hash: str | None = None,
    ) -> Payment:
        return payment_ledger.create_payment(
            db_session,
            payment_hash=payment_hash or f"0x{next(counter):064x}",
            wallet_address=wallet_address,
            amount=amount,
            status=status,
            block_number=5 if status != "pending" else None,
            gas_used=21000 if status != "pending" else None,
            form_id=form_id,
            purpose=purpose,
        )

    return _make


@pytest.fixture()
def admin_wallet(db_session: Session, make_payment: Callable[..., Payment]) -> str:
    """A wallet holding a confirmed admin grant."""
    payment = make_payment(ADMIN_WALLET, purpose="admin", amount="0.001")
    admin_registry.create_admin(
        db_session,
        wallet_address=ADMIN_WALLET,
        payment_hash=payment.payment_hash,
        amount=Decimal("0.001"),
    )
    return ADMIN_WALLET


SAMPLE_QUESTIONS: list[dict[str, Any]] = [
    {"questionText": "What do you build?", "questionType": "textarea", "isRequired": True},
    {
        "questionText": "Favourite chain?",
        "questionType": "radio",
        "questionOptions": ["Monad", "Other"],
        "isRequired": True,
    },
    {
        "questionText": "Tools you use",
        "questionType": "checkbox",
        "questionOptions": ["Foundry", "Hardhat", "Remix"],
    },
]


@pytest.fixture()
def create_form(client: TestClient, admin_wallet: str) -> Callable[..., dict[str, Any]]:
    """Create a form through the API and return its ``form`` summary."""

    def _create(slug: str = "my-form", **overrides: Any) -> dict[str, Any]:
        payload = {
            "name": "Builder survey",
            "slug": slug,
            "title": "Tell us about your stack",
            "description": "Five minutes, promise",
            "paymentAmount": "0.05",
            "adminWalletAddress": admin_wallet,
            "questions": SAMPLE_QUESTIONS,
        }
        payload.update(overrides)
        response = client.post("/api/admin/create-form", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["form"]

    return _create
