"""Defensive validation of values entering the store.

The HTTP layer validates requests before calling the service, but every
mutation path re-checks its inputs here so nothing invalid reaches the
database regardless of the caller.
"""

from __future__ import annotations

import re

from truthmeter.core.categories import CategoryCatalog, catalog as default_catalog
from truthmeter.core.config import settings
from truthmeter.core.errors import ValidationAppError
from truthmeter.models.user import Gender
from truthmeter.models.vote import VoteType
from truthmeter.utils.text_normalizer import has_control_chars, normalize_line_breaks

NICKNAME_MIN_CHARS = 2
NICKNAME_MAX_CHARS = 32
_NICKNAME_PATTERN = re.compile(r"^[A-Za-z0-9 _-]+$")


def validate_category(category: object, catalog: CategoryCatalog = default_catalog) -> str:
    """Return ``category`` if it belongs to the catalog.

    Raises:
        ValidationAppError: If the category is unknown or not a string.
    """
    if not catalog.is_member(category):
        raise ValidationAppError(
            code="invalid_category",
            message="Unknown category.",
            details={"allowed": catalog.all()},
        )
    return category  # type: ignore[return-value]


def validate_content(
    content: object,
    *,
    min_chars: int | None = None,
    max_chars: int | None = None,
) -> str:
    """Trim secret text and check its length.

    Args:
        content: Raw secret text.
        min_chars: Minimum trimmed length (defaults to settings).
        max_chars: Maximum trimmed length (defaults to settings).

    Returns:
        The trimmed text, which is what gets stored.

    Raises:
        ValidationAppError: If the text is not a string, contains control
            characters, or its trimmed length is out of bounds.
    """
    min_chars = settings.app.content_min_chars if min_chars is None else min_chars
    max_chars = settings.app.content_max_chars if max_chars is None else max_chars

    if not isinstance(content, str):
        raise ValidationAppError(code="invalid_content", message="Secret text must be a string.")

    text = normalize_line_breaks(content).strip()
    if has_control_chars(text, allow_newlines=True):
        raise ValidationAppError(
            code="invalid_content",
            message="Control characters are not allowed.",
        )

    if not min_chars <= len(text) <= max_chars:
        raise ValidationAppError(
            code="content_length_out_of_range",
            message=f"Secret text must be between {min_chars} and {max_chars} characters.",
            details={"min_value": min_chars, "max_value": max_chars, "actual_value": len(text)},
        )
    return text


def validate_vote_type(vote_type: object) -> VoteType:
    try:
        return VoteType(vote_type)
    except ValueError:
        raise ValidationAppError(
            code="invalid_vote_type",
            message="Vote type must be 'truth' or 'lie'.",
            details={"allowed": [v.value for v in VoteType]},
        ) from None


def validate_gender(gender: object) -> Gender:
    try:
        return Gender(gender)
    except ValueError:
        raise ValidationAppError(
            code="invalid_gender",
            message="Gender must be one of male, female or other.",
        ) from None


def validate_nickname(nickname: object) -> str:
    """Return the trimmed display nickname.

    Raises:
        ValidationAppError: If it is not 2-32 letters, digits, spaces, '_' or '-'.
    """
    if not isinstance(nickname, str):
        raise ValidationAppError(code="invalid_nickname", message="Nickname must be a string.")

    trimmed = nickname.strip()
    if not NICKNAME_MIN_CHARS <= len(trimmed) <= NICKNAME_MAX_CHARS or not _NICKNAME_PATTERN.match(trimmed):
        raise ValidationAppError(
            code="invalid_nickname",
            message=(
                f"Nickname must be {NICKNAME_MIN_CHARS}-{NICKNAME_MAX_CHARS} characters "
                "of letters, digits, spaces, '_' or '-'."
            ),
        )
    return trimmed


def validate_limit(limit: object) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationAppError(
            code="invalid_limit",
            message="Limit must be a positive integer.",
            details={"min_value": 1},
        )
    return limit
