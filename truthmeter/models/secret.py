"""Secret model: an anonymous post plus its truth-meter tallies."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from truthmeter.db.session import Base


class Secret(Base):
    """A posted secret.

    ``truth_votes`` and ``lie_votes`` are only ever changed with
    column-relative updates issued by the vote repository; their sum always
    equals the number of ledger rows for the secret.
    """

    __tablename__ = "secrets"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    truth_votes: Mapped[int] = mapped_column(
        "truthVotes", Integer, nullable=False, default=0, server_default="0"
    )
    lie_votes: Mapped[int] = mapped_column(
        "lieVotes", Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<Secret(id={self.id}, category={self.category}, "
            f"truth={self.truth_votes}, lie={self.lie_votes})>"
        )


Index("idx_secrets_created_at", Secret.created_at.desc())
Index("idx_secrets_category", Secret.category)
