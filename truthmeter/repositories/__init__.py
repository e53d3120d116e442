"""Repository modules for database access."""

from truthmeter.repositories.secret_repository import SecretRepository
from truthmeter.repositories.user_repository import UserRepository
from truthmeter.repositories.vote_repository import VoteOutcome, VoteRepository

__all__ = [
    "SecretRepository",
    "UserRepository",
    "VoteOutcome",
    "VoteRepository",
]
