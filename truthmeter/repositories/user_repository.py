"""User repository for database operations."""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from truthmeter.core.errors import ConflictAppError
from truthmeter.core.validation import validate_gender, validate_nickname
from truthmeter.models.secret import Secret
from truthmeter.models.user import User
from truthmeter.schemas.user import UserStats
from truthmeter.utils.text_normalizer import normalize_nickname


def _nickname_taken() -> ConflictAppError:
    return ConflictAppError(code="nickname_taken", message="Nickname already taken.")


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_nickname(self, nickname: str) -> Optional[User]:
        """Look a user up by nickname, ignoring case and surrounding whitespace."""
        result = self.db.execute(select(User).where(User.nickname == normalize_nickname(nickname)))
        return result.scalar_one_or_none()

    def create(
        self,
        nickname: str,
        password_hash: str,
        gender: str,
        is_admin: bool = False,
        user_id: Optional[str] = None,
    ) -> User:
        """
        Create a user.

        ``password_hash`` must already be hashed by the registration layer.

        Raises:
            ValidationAppError: If nickname or gender are invalid.
            ConflictAppError: If the normalized nickname is already in use.
        """
        display = validate_nickname(nickname)
        gender_value = validate_gender(gender).value
        normalized = normalize_nickname(display)

        if self.get_by_nickname(normalized) is not None:
            raise _nickname_taken()

        user = User(
            id=user_id or str(uuid4()),
            nickname=normalized,
            nickname_raw=display,
            password_hash=password_hash,
            gender=gender_value,
            is_admin=bool(is_admin),
        )
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same nickname
            raise _nickname_taken() from exc
        return user

    def set_admin(self, user_id: str, is_admin: bool) -> bool:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(is_admin=bool(is_admin))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def update_password(self, user_id: str, password_hash: str) -> bool:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def list_with_stats(self) -> list[UserStats]:
        """All users with their secret counts, ordered by nickname (case-insensitive)."""
        result = self.db.execute(
            select(
                User.id.label("id"),
                User.nickname_raw.label("nickname"),
                User.gender.label("gender"),
                User.is_admin.label("is_admin"),
                func.count(Secret.id).label("secret_count"),
            )
            .outerjoin(Secret, Secret.user_id == User.id)
            .group_by(User.id, User.nickname_raw, User.gender, User.is_admin)
            .order_by(func.lower(User.nickname_raw))
        )
        return [UserStats.model_validate(dict(row._mapping)) for row in result.all()]

    def delete(self, user_id: str) -> bool:
        """Delete the user row only. Callers remove dependent rows first."""
        result = self.db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
