import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

WALLET = "0x" + "b" * 40


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_service(client) -> None:
    body = client.get("/").json()
    assert body["docs"] == "/docs"
    assert "version" in body


POST_PATHS = [
    "/api/balance",
    "/api/check-transaction",
    "/api/check-payment-status",
    "/api/record-payment",
    "/api/submit-feedback",
    "/api/check-feedback-status",
    "/api/admin/check-status",
    "/api/admin/create",
    "/api/admin/forms",
    "/api/admin/create-form",
    "/api/admin/form-responses",
    "/api/forms/check-payment",
    "/api/forms/check-submission",
    "/api/forms/record-payment",
    "/api/forms/submit-response",
]


@pytest.mark.parametrize("path", POST_PATHS)
def test_get_on_post_endpoint_is_405(client, path) -> None:
    response = client.get(path)
    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert "error" in response.json()


def test_post_on_listing_is_405(client) -> None:
    response = client.post("/api/get-responses", json={})
    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


def test_database_errors_are_reported(client, mocker) -> None:
    mocker.patch(
        "gated_feedback.services.payment_ledger.payment_status",
        side_effect=OperationalError("SELECT 1", {}, Exception("database is locked")),
    )
    response = client.post("/api/check-payment-status", json={"walletAddress": WALLET})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"] == "Database error"


def test_unexpected_errors_are_reported(app, override_dependencies, mocker) -> None:
    mocker.patch(
        "gated_feedback.services.payment_ledger.payment_status",
        side_effect=RuntimeError("boom"),
    )
    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/api/check-payment-status", json={"walletAddress": WALLET})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error", "details": "boom"}
