"""User account model.

Accounts are created by the registration layer; this package only stores
them and joins secrets against their display attributes.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from truthmeter.db.session import Base


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("gender IN ('male','female','other')", name="ck_users_gender"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Normalized (trimmed, lower-cased) nickname, used for uniqueness and login lookups
    nickname: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    nickname_raw: Mapped[str] = mapped_column(String, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    gender: Mapped[str] = mapped_column(String, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, nickname={self.nickname_raw!r}, admin={self.is_admin})>"
