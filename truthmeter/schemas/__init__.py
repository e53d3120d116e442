"""Request and response schemas."""

from truthmeter.schemas.secret import (
    CreateSecretRequest,
    CreateSecretResponse,
    MessageResponse,
    SecretView,
    VoteRequest,
    VoteTally,
)
from truthmeter.schemas.user import UserStats, UserView

__all__ = [
    "CreateSecretRequest",
    "CreateSecretResponse",
    "MessageResponse",
    "SecretView",
    "UserStats",
    "UserView",
    "VoteRequest",
    "VoteTally",
]
