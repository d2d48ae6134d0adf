"""Error taxonomy shared by the ledgers, registries and endpoints.

Every error carries the HTTP status it maps to so the API layer can render
it without inspecting the type.
"""

from __future__ import annotations

from typing import Any


class GateError(RuntimeError):
    """Base class for failures surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInputError(GateError):
    """Missing or malformed client input."""

    status_code = 400


class NotAuthorizedError(GateError):
    """Caller lacks admin status or a qualifying payment."""

    status_code = 403


class NotFoundError(GateError):
    """Referenced form, payment or admin does not exist."""

    status_code = 404


class ConflictError(GateError):
    """Duplicate hash, slug, admin grant or submission."""

    status_code = 409


class UpstreamError(GateError):
    """The blockchain node failed or answered with garbage."""

    status_code = 500
