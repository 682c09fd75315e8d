"""
Domain errors raised by services and mapped to HTTP responses in main.py.
"""

from typing import Any


class ServiceError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code = 500

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"detail": self.message}
        if self.errors:
            content["errors"] = self.errors
        return content


class ValidationFailed(ServiceError):
    """Input is well-formed but violates a business rule."""

    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls("Validation error", errors=[{"field": field, "message": message}])


class NotFoundError(ServiceError):
    """Missing, or outside the caller's scope."""

    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class PaymentRequiredError(ServiceError):
    status_code = 402


class UpstreamError(ServiceError):
    """A third-party call (Stripe, xAI) failed."""

    status_code = 500
