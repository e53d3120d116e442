"""Secret repository: durable storage and feed reads for secrets."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from truthmeter.core.categories import CategoryCatalog, catalog as default_catalog
from truthmeter.core.errors import NotFoundAppError
from truthmeter.core.validation import validate_category, validate_content
from truthmeter.models.secret import Secret
from truthmeter.models.user import User
from truthmeter.models.vote import TruthMeterVote
from truthmeter.schemas.secret import SecretView

logger = logging.getLogger(__name__)


def _secret_view_query() -> Select:
    """Secrets joined with the author's display nickname and gender."""
    return select(
        Secret.id.label("id"),
        Secret.category.label("category"),
        Secret.content.label("content"),
        Secret.truth_votes.label("truth_votes"),
        Secret.lie_votes.label("lie_votes"),
        Secret.created_at.label("created_at"),
        User.nickname_raw.label("nickname"),
        User.gender.label("gender"),
    ).join(User, User.id == Secret.user_id)


def _newest_first(query: Select) -> Select:
    # created_at has one-second resolution on SQLite; id breaks ties
    return query.order_by(Secret.created_at.desc(), Secret.id.desc())


class SecretRepository:
    """Repository for secret database operations."""

    def __init__(self, db: Session, catalog: CategoryCatalog = default_catalog):
        self.db = db
        self.catalog = catalog

    def insert(self, author_id: str, category: str, content: str) -> int:
        """Append a secret with zeroed tallies and return its id.

        Category and content are re-validated here; the stored content is
        the trimmed text.
        """
        category = validate_category(category, self.catalog)
        content = validate_content(content)

        secret = Secret(user_id=author_id, category=category, content=content)
        self.db.add(secret)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # The only foreign key is the author; deleted since the caller checked
            raise NotFoundAppError(
                code="user_not_found",
                message="User not found.",
                details={"user_id": author_id},
            ) from exc
        secret_id = secret.id
        logger.debug("secret.inserted", extra={"secret_id": secret_id, "category": category})
        return secret_id

    def get(self, secret_id: int) -> Optional[SecretView]:
        row = self.db.execute(
            _secret_view_query().where(Secret.id == secret_id)
        ).one_or_none()
        return SecretView.model_validate(dict(row._mapping)) if row else None

    def list(self, category: Optional[str] = None, *, limit: int = 100) -> list[SecretView]:
        """Return up to ``limit`` secrets, newest first, optionally for one category."""
        query = _secret_view_query()
        if category is not None:
            query = query.where(Secret.category == category)
        rows = self.db.execute(_newest_first(query).limit(limit)).all()
        return [SecretView.model_validate(dict(row._mapping)) for row in rows]

    def get_random(self) -> Optional[SecretView]:
        """Pick one secret uniformly at random.

        ``ORDER BY RANDOM()`` scans the whole table, which is fine at the
        scale of a single-instance deployment.
        """
        row = self.db.execute(
            _secret_view_query().order_by(func.random()).limit(1)
        ).one_or_none()
        return SecretView.model_validate(dict(row._mapping)) if row else None

    def count(self, category: Optional[str] = None) -> int:
        query = select(func.count(Secret.id))
        if category is not None:
            query = query.where(Secret.category == category)
        return self.db.execute(query).scalar() or 0

    def delete(self, secret_id: int) -> bool:
        """Delete a secret and its ledger rows. Returns whether the secret existed."""
        self.db.execute(
            delete(TruthMeterVote)
            .where(TruthMeterVote.secret_id == secret_id)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(Secret)
            .where(Secret.id == secret_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def delete_by_author(self, user_id: str) -> int:
        """Delete every secret posted by ``user_id`` (and their ledger rows)."""
        authored = select(Secret.id).where(Secret.user_id == user_id)
        self.db.execute(
            delete(TruthMeterVote)
            .where(TruthMeterVote.secret_id.in_(authored))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(Secret)
            .where(Secret.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
