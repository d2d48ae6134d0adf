"""Tests for feedback submission and listing."""

from __future__ import annotations

import pytest
from fastapi import status

from gated_feedback.models import Feedback

WALLET = "0x" + "b" * 40
OTHER = "0x" + "c" * 40


def _submit(client, wallet=WALLET, **overrides):
    payload = {"feedback": "Great docs", "category": "dev", "walletAddress": wallet}
    payload.update(overrides)
    return client.post("/api/submit-feedback", json=payload)


def test_submit_and_status(client, make_payment) -> None:
    before = client.post("/api/check-feedback-status", json={"walletAddress": WALLET}).json()
    assert before == {"hasSubmittedFeedback": False, "feedbackId": None, "submittedAt": None}

    make_payment(WALLET)
    response = _submit(client)
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    feedback_id = body["feedbackId"]

    after = client.post("/api/check-feedback-status", json={"walletAddress": WALLET}).json()
    assert after["hasSubmittedFeedback"] is True
    assert after["feedbackId"] == feedback_id
    assert after["submittedAt"] is not None


def test_length_boundary(client, make_payment) -> None:
    make_payment(WALLET)
    assert _submit(client, feedback="x" * 1001).status_code == status.HTTP_400_BAD_REQUEST
    assert _submit(client, feedback="x" * 1000).status_code == status.HTTP_201_CREATED


def test_invalid_category(client, make_payment) -> None:
    make_payment(WALLET)
    response = _submit(client, category="marketing")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "dev, community" in response.json()["error"]


def test_missing_fields(client) -> None:
    response = client.post("/api/submit-feedback", json={"feedback": "hi"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_duplicate_takes_precedence_over_payment(client, make_payment, db_session) -> None:
    make_payment(WALLET)
    assert _submit(client).status_code == status.HTTP_201_CREATED
    response = _submit(client, feedback="again")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert db_session.query(Feedback).count() == 1


def test_anonymous_rows_are_redacted(client, make_payment, db_session) -> None:
    make_payment(WALLET)
    make_payment(OTHER)
    _submit(client, WALLET, feedback="anon", isAnonymous=True)
    _submit(client, OTHER, feedback="named", category="community", isAnonymous=False)

    body = client.get("/api/get-responses").json()
    assert body["success"] is True
    assert body["total"] == 2
    rows = {row["feedback"]: row for row in body["responses"]}
    assert rows["anon"]["wallet_address"] is None
    assert rows["anon"]["is_anonymous"] is True
    assert rows["named"]["wallet_address"] == OTHER

    stored = db_session.query(Feedback).filter(Feedback.feedback == "anon").one()
    assert stored.wallet_address == WALLET


def test_is_anonymous_defaults_to_true(client, make_payment) -> None:
    make_payment(WALLET)
    _submit(client)
    row = client.get("/api/get-responses").json()["responses"][0]
    assert row["is_anonymous"] is True
    assert row["wallet_address"] is None


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("", {"dev-0", "dev-1", "community-2"}),
        ("?category=all&anonymous=all", {"dev-0", "dev-1", "community-2"}),
        ("?category=dev", {"dev-0", "dev-1"}),
        ("?anonymous=false", {"dev-1"}),
        ("?category=community&anonymous=true", {"community-2"}),
    ],
)
def test_filters(client, make_payment, query, expected) -> None:
    entries = [("dev", True), ("dev", False), ("community", True)]
    for index, (category, anonymous) in enumerate(entries):
        wallet = f"0x{index + 1:040x}"
        make_payment(wallet)
        _submit(
            client,
            wallet,
            feedback=f"{category}-{index}",
            category=category,
            isAnonymous=anonymous,
        )

    body = client.get(f"/api/get-responses{query}").json()
    assert {row["feedback"] for row in body["responses"]} == expected


def test_pagination(client, make_payment) -> None:
    for index in range(5):
        wallet = f"0x{index + 1:040x}"
        make_payment(wallet)
        _submit(client, wallet, feedback=f"entry {index}")

    first = client.get("/api/get-responses?page=1&limit=2").json()
    assert first["total"] == 5
    assert first["totalPages"] == 3
    assert first["hasNext"] is True
    assert first["hasPrev"] is False
    assert [row["feedback"] for row in first["responses"]] == ["entry 4", "entry 3"]

    last = client.get("/api/get-responses?page=3&limit=2").json()
    assert [row["feedback"] for row in last["responses"]] == ["entry 0"]
    assert last["hasNext"] is False
    assert last["hasPrev"] is True


def test_invalid_listing_params(client) -> None:
    assert client.get("/api/get-responses?page=0").status_code == status.HTTP_400_BAD_REQUEST
    assert client.get("/api/get-responses?anonymous=maybe").status_code == status.HTTP_400_BAD_REQUEST
