"""Application-level exception types.

This module defines domain errors used across repositories/services, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional so each error only carries what is relevant to it.
    """

    code: str
    message: str
    hint: str
    min_value: int
    max_value: int
    actual_value: int
    retry_after: float
    category: str
    allowed: list[str]
    vote_type: str
    secret_id: int
    user_id: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails, before any state is mutated."""


class NotFoundAppError(AppError):
    """Raised when a secret or user does not exist, or there is nothing to sample."""


class RateLimitAppError(AppError):
    """Raised when a user posts again inside the throttle window."""


class ConflictAppError(AppError):
    """Raised when a unique attribute (e.g. nickname) is already taken."""


class StorageAppError(AppError):
    """Raised on unexpected database failures. Not retried by the core."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""
