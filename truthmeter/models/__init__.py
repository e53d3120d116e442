"""Database models module."""

from truthmeter.models.secret import Secret
from truthmeter.models.user import Gender, User
from truthmeter.models.vote import TruthMeterVote, VoteType

__all__ = [
    "Gender",
    "Secret",
    "TruthMeterVote",
    "User",
    "VoteType",
]
