"""Tests for the bounded confirmation poller."""

from __future__ import annotations

import httpx
import pytest

from gated_feedback.services.confirmation import (
    ConfirmationPoller,
    PollOutcome,
    RetryPolicy,
)
from gated_feedback.services.rpc import ConfirmationCheck, RpcError

TX = "0x" + "ab" * 32


class ScriptedCheck:
    """Returns (or raises) the scripted results in order."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self, tx_hash: str) -> ConfirmationCheck:
        self.calls += 1
        result = self.results.pop(0) if self.results else ConfirmationCheck.pending(tx_hash)
        if isinstance(result, BaseException):
            raise result
        return result


def _mined(success: bool = True) -> ConfirmationCheck:
    return ConfirmationCheck(
        tx_hash=TX,
        confirmed=True,
        success=success,
        block_number=5,
        gas_used=21000,
        status="0x1" if success else "0x0",
    )


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def fake_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


def test_policy_validation() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(interval_seconds=-1)
    assert RetryPolicy.from_settings() == RetryPolicy(30, 1.0)


@pytest.mark.asyncio
async def test_success_after_pending_attempts(fake_sleep, sleeps) -> None:
    check = ScriptedCheck(ConfirmationCheck.pending(TX), ConfirmationCheck.pending(TX), _mined())
    result = await ConfirmationPoller(check, RetryPolicy(30, 1.0), sleep=fake_sleep).poll(TX)

    assert result.outcome is PollOutcome.CONFIRMED_SUCCESS
    assert result.attempts == 3
    assert result.succeeded and result.confirmed
    assert sleeps == [1.0, 1.0]


@pytest.mark.asyncio
async def test_reverted_is_confirmed_failure(fake_sleep) -> None:
    result = await ConfirmationPoller(
        ScriptedCheck(_mined(success=False)), RetryPolicy(3, 1.0), sleep=fake_sleep
    ).poll(TX)
    assert result.outcome is PollOutcome.CONFIRMED_FAILURE
    assert result.confirmed and not result.succeeded


@pytest.mark.asyncio
async def test_timeout_after_attempt_cap(fake_sleep, sleeps) -> None:
    check = ScriptedCheck()
    attempts = []
    poller = ConfirmationPoller(
        check,
        RetryPolicy(30, 1.0),
        sleep=fake_sleep,
        on_attempt=lambda attempt, total: attempts.append((attempt, total)),
    )
    result = await poller.poll(TX)

    assert result.outcome is PollOutcome.TIMEOUT
    assert not result.confirmed
    assert check.calls == 30
    assert len(sleeps) == 29
    assert attempts[-1] == (30, 30)


@pytest.mark.asyncio
async def test_transient_errors_are_retried(fake_sleep) -> None:
    check = ScriptedCheck(
        RpcError("node down"),
        httpx.ConnectError("refused"),
        _mined(),
    )
    result = await ConfirmationPoller(check, RetryPolicy(5, 1.0), sleep=fake_sleep).poll(TX)
    assert result.outcome is PollOutcome.CONFIRMED_SUCCESS
    assert result.attempts == 3


@pytest.mark.asyncio
async def test_errors_exhaust_budget_as_timeout(fake_sleep) -> None:
    check = ScriptedCheck(*[RpcError("down")] * 4)
    result = await ConfirmationPoller(check, RetryPolicy(4, 0.5), sleep=fake_sleep).poll(TX)
    assert result.outcome is PollOutcome.TIMEOUT
    assert result.attempts == 4


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(fake_sleep) -> None:
    check = ScriptedCheck(KeyError("bug"))
    with pytest.raises(KeyError):
        await ConfirmationPoller(check, RetryPolicy(5, 1.0), sleep=fake_sleep).poll(TX)
