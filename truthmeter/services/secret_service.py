"""Secret service: the operations the HTTP layer calls.

Each public method is one unit of work and runs in exactly one database
transaction, so multi-step mutations (voting, cascading user deletion) are
all-or-nothing.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from truthmeter.adapters.rate_limit.base import AbstractPostThrottle
from truthmeter.core.categories import CategoryCatalog, catalog as default_catalog
from truthmeter.core.errors import NotFoundAppError, RateLimitAppError
from truthmeter.core.validation import validate_category, validate_content, validate_vote_type
from truthmeter.db.session import session_scope
from truthmeter.models.user import User
from truthmeter.repositories import SecretRepository, UserRepository, VoteRepository
from truthmeter.schemas.secret import SecretView, VoteTally
from truthmeter.schemas.user import UserStats
from truthmeter.services.feed_service import FeedQuery

logger = logging.getLogger(__name__)


def _user_not_found(user_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="user_not_found",
        message="User not found.",
        details={"user_id": user_id},
    )


class SecretService:
    """Posting, browsing, voting and moderation of secrets.

    Attributes:
        session_factory: Creates the session of each unit of work.
        throttle: Per-user post throttle.
        catalog: Allowed categories.
        feed: Feed listing rules.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        throttle: AbstractPostThrottle,
        catalog: CategoryCatalog = default_catalog,
        feed: FeedQuery | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.throttle = throttle
        self.catalog = catalog
        self.feed = feed or FeedQuery(catalog=catalog)

    # Secrets

    def create_secret(self, user_id: str, category: str, content: str) -> int:
        """Post a secret on behalf of ``user_id``.

        Inputs are validated before the throttle is consulted, and the window
        is released again when the insert fails, so only a stored secret uses
        up the user's posting window.

        Returns:
            The new secret id.

        Raises:
            ValidationAppError: Unknown category or content length out of range.
            RateLimitAppError: The user posted less than the window ago.
            NotFoundAppError: The author does not exist.
        """
        category = validate_category(category, self.catalog)
        content = validate_content(content)

        result = self.throttle.check(user_id)
        if not result.allowed:
            logger.warning(
                "post_throttle.blocked",
                extra={
                    "window_ms": result.window_ms,
                    "retry_after_s": result.retry_after_seconds,
                },
            )
            raise RateLimitAppError(
                code="post_rate_limited",
                message="You are posting too fast, please wait a moment.",
                details={"retry_after": float(result.retry_after_seconds or 0)},
            )

        try:
            with session_scope(self.session_factory) as db:
                if UserRepository(db).get_by_id(user_id) is None:
                    raise _user_not_found(user_id)
                secret_id = SecretRepository(db, self.catalog).insert(user_id, category, content)
        except Exception:
            # Nothing was posted, so the window goes back to the user
            self.throttle.release(user_id, result.last_post_ms, result.previous_post_ms)
            raise

        logger.info("secret.created", extra={"secret_id": secret_id, "category": category})
        return secret_id

    def list_secrets(self, category: Optional[str] = None) -> list[SecretView]:
        with session_scope(self.session_factory) as db:
            return self.feed.public_feed(SecretRepository(db, self.catalog), category)

    def get_random_secret(self) -> SecretView:
        with session_scope(self.session_factory) as db:
            secret = SecretRepository(db, self.catalog).get_random()
        if secret is None:
            raise NotFoundAppError(code="no_secrets", message="No secrets have been shared yet.")
        return secret

    def get_secret(self, secret_id: int) -> SecretView:
        with session_scope(self.session_factory) as db:
            secret = SecretRepository(db, self.catalog).get(secret_id)
        if secret is None:
            raise NotFoundAppError(
                code="secret_not_found",
                message="Secret not found.",
                details={"secret_id": secret_id},
            )
        return secret

    def list_categories(self) -> list[str]:
        return self.catalog.all()

    # Voting

    def record_vote(self, secret_id: int, user_id: str, vote_type: str) -> VoteTally:
        """Cast ``user_id``'s truth-meter vote on a secret.

        A second vote by the same user changes nothing and returns the
        current tallies.

        Raises:
            ValidationAppError: ``vote_type`` is not 'truth' or 'lie'.
            NotFoundAppError: The secret (``secret_not_found``) or the voting
                user (``user_not_found``) does not exist.
        """
        kind = validate_vote_type(vote_type)

        try:
            with session_scope(self.session_factory) as db:
                outcome = VoteRepository(db).record(secret_id, user_id, kind)
        except NotFoundAppError as exc:
            if exc.code != "vote_target_not_found":
                raise
            raise self._missing_vote_target(secret_id, user_id) from exc

        logger.info(
            "vote.recorded" if outcome.recorded else "vote.duplicate",
            extra={
                "secret_id": secret_id,
                "vote_type": kind.value,
                "truth_votes": outcome.tally.truth_votes,
                "lie_votes": outcome.tally.lie_votes,
            },
        )
        return outcome.tally

    def _missing_vote_target(self, secret_id: int, user_id: str) -> NotFoundAppError:
        """Tell which side of a rejected vote is gone, after the rollback."""
        with session_scope(self.session_factory) as db:
            secret_exists = VoteRepository(db).get_tally(secret_id) is not None
        if secret_exists:
            return _user_not_found(user_id)
        return NotFoundAppError(
            code="secret_not_found",
            message="Secret not found.",
            details={"secret_id": secret_id},
        )

    # Users

    def create_user(
        self,
        nickname: str,
        password_hash: str,
        gender: str,
        is_admin: bool = False,
        user_id: Optional[str] = None,
    ) -> User:
        with session_scope(self.session_factory) as db:
            user = UserRepository(db).create(
                nickname=nickname,
                password_hash=password_hash,
                gender=gender,
                is_admin=is_admin,
                user_id=user_id,
            )
        logger.info("user.created", extra={"is_admin": user.is_admin})
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        with session_scope(self.session_factory) as db:
            return UserRepository(db).get_by_id(user_id)

    def get_user_by_nickname(self, nickname: str) -> Optional[User]:
        with session_scope(self.session_factory) as db:
            return UserRepository(db).get_by_nickname(nickname)

    def set_user_admin(self, user_id: str, is_admin: bool) -> bool:
        with session_scope(self.session_factory) as db:
            return UserRepository(db).set_admin(user_id, is_admin)

    def update_user_password(self, user_id: str, password_hash: str) -> bool:
        with session_scope(self.session_factory) as db:
            return UserRepository(db).update_password(user_id, password_hash)

    # Administration

    def list_users_with_stats(self) -> list[UserStats]:
        with session_scope(self.session_factory) as db:
            return UserRepository(db).list_with_stats()

    def list_all_secrets(self, limit: Optional[int] = None) -> list[SecretView]:
        with session_scope(self.session_factory) as db:
            return self.feed.admin_feed(SecretRepository(db, self.catalog), limit)

    def delete_secret(self, secret_id: int) -> bool:
        """Delete a secret together with its votes. Returns whether it existed."""
        with session_scope(self.session_factory) as db:
            removed = SecretRepository(db, self.catalog).delete(secret_id)
        if removed:
            logger.info("secret.deleted", extra={"secret_id": secret_id})
        return removed

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and everything they produced, in one transaction.

        Order: the user's votes are retracted from other secrets' tallies,
        then the user's secrets (with their votes) are deleted, then the user.

        Returns:
            Whether the user existed. Nothing is changed when it did not.
        """
        with session_scope(self.session_factory) as db:
            users = UserRepository(db)
            if users.get_by_id(user_id) is None:
                return False

            retracted = VoteRepository(db).retract_by_user(user_id)
            deleted_secrets = SecretRepository(db, self.catalog).delete_by_author(user_id)
            removed = users.delete(user_id)

        logger.info(
            "user.deleted",
            extra={"secrets_deleted": deleted_secrets, "votes_retracted": retracted},
        )
        return removed
