"""Truth-meter ledger: one row per (secret, user) vote."""

from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from truthmeter.db.session import Base


class VoteType(str, Enum):
    TRUTH = "truth"
    LIE = "lie"


class TruthMeterVote(Base):
    """Per-user vote on a secret.

    The composite primary key is the serialization point for voting: an
    insert that hits it is a duplicate vote and must not touch the tallies.
    """

    __tablename__ = "truth_meter_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN ('truth','lie')", name="ck_truth_meter_votes_type"),
    )

    secret_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("secrets.id"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id"), primary_key=True
    )
    vote_type: Mapped[str] = mapped_column(String, nullable=False)

    def __repr__(self) -> str:
        return f"<TruthMeterVote(secret={self.secret_id}, user={self.user_id}, type={self.vote_type})>"
