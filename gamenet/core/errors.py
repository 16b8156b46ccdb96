"""
Domain errors raised by the booking engine and their HTTP mapping.
Services raise these; routes stay thin and translate with to_http().
"""
from __future__ import annotations

from fastapi import HTTPException


class DomainError(Exception):
    """Base class for expected failures surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(DomainError):
    """Malformed range, misaligned slot, past start, headcount or pricing problems. Never retried."""

    status_code = 400


class NotFoundError(DomainError):
    """Venue or station missing, soft-deleted or inactive."""

    status_code = 404


class ConflictError(DomainError):
    """Slot taken, or a concurrent booking won the race. Retry with another slot."""

    status_code = 409


class UpstreamError(DomainError):
    """An external lookup (catalog, geocoding) failed."""

    status_code = 502


STATUS_INTERNAL_ERROR = 500

# (exception type, status_code). First match wins; subclasses go before their bases.
ERROR_RULES: list[tuple[type[DomainError], int]] = [
    (ValidationError, ValidationError.status_code),
    (NotFoundError, NotFoundError.status_code),
    (ConflictError, ConflictError.status_code),
    (UpstreamError, UpstreamError.status_code),
]


def to_http(exc: Exception) -> HTTPException:
    """
    Map a service exception into an HTTPException.
    Unknown exceptions become 500 with the exception message.
    """
    for exc_type, status_code in ERROR_RULES:
        if isinstance(exc, exc_type):
            detail = {"message": exc.message, "code": exc.code} if exc.code else exc.message
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
