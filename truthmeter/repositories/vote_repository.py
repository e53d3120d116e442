"""Vote repository: the truth-meter ledger and its tallies.

Voting is exactly-once per (secret, user). The ledger's composite primary key
decides which vote is first: the vote row is inserted with ``ON CONFLICT DO
NOTHING`` and only an insert that actually added a row increments a tally.
The increment is column-relative (``truthVotes = truthVotes + 1``), so
concurrent votes from different users on the same secret never overwrite
each other.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from truthmeter.core.errors import NotFoundAppError, StorageAppError
from truthmeter.models.secret import Secret
from truthmeter.models.vote import TruthMeterVote, VoteType
from truthmeter.schemas.secret import VoteTally

logger = logging.getLogger(__name__)

_TALLY_COLUMNS = {
    VoteType.TRUTH: Secret.truth_votes,
    VoteType.LIE: Secret.lie_votes,
}


class VoteOutcome(NamedTuple):
    tally: VoteTally
    recorded: bool


def _secret_not_found(secret_id: int) -> NotFoundAppError:
    return NotFoundAppError(
        code="secret_not_found",
        message="Secret not found.",
        details={"secret_id": secret_id},
    )


class VoteRepository:
    """Repository for truth-meter vote operations.

    Every method runs inside the caller's transaction; ``record`` must be the
    only statement sequence of that transaction so the insert, increment and
    read-back commit or roll back together.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(self, secret_id: int, user_id: str, vote_type: VoteType) -> VoteOutcome:
        """Record a vote and return the secret's tallies.

        A repeated vote by the same user is a no-op: the tallies are returned
        unchanged and the ledger keeps the first vote's type.

        Raises:
            NotFoundAppError: ``secret_not_found`` when the secret is gone,
                ``vote_target_not_found`` when the insert hit a foreign key.
        """
        try:
            result = self.db.execute(self._insert_ignoring_duplicates(secret_id, user_id, vote_type))
        except IntegrityError as exc:
            # Foreign key violation: the secret or the voting user is gone.
            # The transaction may be aborted here, so callers find out which.
            raise NotFoundAppError(
                code="vote_target_not_found",
                message="Secret or user not found.",
                details={"secret_id": secret_id, "user_id": user_id},
            ) from exc

        recorded = result.rowcount == 1
        if recorded:
            column = _TALLY_COLUMNS[vote_type]
            updated = self.db.execute(
                update(Secret)
                .where(Secret.id == secret_id)
                .values({column: column + 1})
                .execution_options(synchronize_session=False)
            )
            if updated.rowcount == 0:
                raise _secret_not_found(secret_id)

        tally = self.get_tally(secret_id)
        if tally is None:
            raise _secret_not_found(secret_id)

        return VoteOutcome(tally=tally, recorded=recorded)

    def get_tally(self, secret_id: int) -> Optional[VoteTally]:
        row = self.db.execute(
            select(Secret.truth_votes, Secret.lie_votes).where(Secret.id == secret_id)
        ).one_or_none()
        if row is None:
            return None
        return VoteTally(truth_votes=row[0], lie_votes=row[1])

    def get_vote(self, secret_id: int, user_id: str) -> Optional[VoteType]:
        """Return the vote ``user_id`` cast on ``secret_id``, if any."""
        vote_type = self.db.execute(
            select(TruthMeterVote.vote_type).where(
                TruthMeterVote.secret_id == secret_id,
                TruthMeterVote.user_id == user_id,
            )
        ).scalar_one_or_none()
        return VoteType(vote_type) if vote_type is not None else None

    def count_for_secret(self, secret_id: int, vote_type: Optional[VoteType] = None) -> int:
        query = select(func.count()).select_from(TruthMeterVote).where(
            TruthMeterVote.secret_id == secret_id
        )
        if vote_type is not None:
            query = query.where(TruthMeterVote.vote_type == vote_type.value)
        return self.db.execute(query).scalar() or 0

    def retract_by_user(self, user_id: str) -> int:
        """Remove every vote cast by ``user_id`` and take it off the tallies.

        Used when a user is deleted, so no ledger row outlives its voter and
        tallies keep matching the ledger. The delete is the first write of the
        transaction, so it takes the write lock and the decrements apply to exactly the
        rows it removed, including a vote committed just before it.

        Returns:
            Number of votes retracted.
        """
        votes_table = TruthMeterVote.__table__
        removed = self.db.execute(
            votes_table.delete()
            .where(votes_table.c.user_id == user_id)
            .returning(votes_table.c.secret_id, votes_table.c.vote_type)
        ).all()

        for secret_id, vote_type in removed:
            column = _TALLY_COLUMNS[VoteType(vote_type)]
            self.db.execute(
                update(Secret)
                .where(Secret.id == secret_id)
                .values({column: case((column > 0, column - 1), else_=0)})
                .execution_options(synchronize_session=False)
            )

        if removed:
            logger.info("vote.retracted", extra={"votes": len(removed)})
        return len(removed)

    def _insert_ignoring_duplicates(self, secret_id: int, user_id: str, vote_type: VoteType):
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            insert = sqlite.insert
        elif dialect == "postgresql":
            insert = postgresql.insert
        else:
            raise StorageAppError(
                code="unsupported_dialect",
                message=f"Voting is not supported on the '{dialect}' database.",
            )

        return (
            insert(TruthMeterVote.__table__)
            .values(secret_id=secret_id, user_id=user_id, vote_type=vote_type.value)
            .on_conflict_do_nothing(index_elements=["secret_id", "user_id"])
        )
