from __future__ import annotations

from typing import Optional


class IngestionError(Exception):
    """Base error for repository ingestion and prompt assembly."""

    kind = "ingestion_error"


class ValidationError(IngestionError):
    """Raised when user input is invalid."""

    kind = "validation_error"


class InvalidReferenceError(ValidationError):
    """Raised when a URL does not name a repository on the configured host."""

    kind = "invalid_reference"


class AccessDeniedError(IngestionError):
    """Raised when an operation tries to write data outside the allowed scope."""

    kind = "access_denied"


class RateLimitedError(IngestionError):
    """Raised when the GitHub request quota is exhausted. Try again later."""

    kind = "rate_limited"

    def __init__(self, message: str, *, reset_at: Optional[int] = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class NotFoundError(IngestionError):
    """Raised when a repository or ref does not exist (or is private)."""

    kind = "not_found"


class CloneFailedError(IngestionError):
    """Raised when a shallow clone fails."""

    kind = "clone_failed"


class IngestionTimeoutError(IngestionError):
    """Raised when a network call or clone exceeds its time bound."""

    kind = "timeout"


class ExternalServiceError(IngestionError):
    """Raised when GitHub or the filesystem fails in any other way."""

    kind = "external_service_error"
