"""Tests for the category catalog and input validation."""

import pytest

from truthmeter.core.categories import DEFAULT_CATEGORIES, CategoryCatalog, catalog
from truthmeter.core.errors import ValidationAppError
from truthmeter.core.validation import (
    validate_category,
    validate_content,
    validate_gender,
    validate_limit,
    validate_nickname,
    validate_vote_type,
)
from truthmeter.models import Gender, VoteType
from truthmeter.utils.text_normalizer import has_control_chars, normalize_nickname


class TestCategoryCatalog:
    def test_default_categories_in_display_order(self) -> None:
        assert catalog.all() == ["desire", "family", "work", "health", "other"]
        assert len(catalog) == len(DEFAULT_CATEGORIES)

    @pytest.mark.parametrize("category", ["desire", "family", "work", "health", "other"])
    def test_members(self, category: str) -> None:
        assert catalog.is_member(category)
        assert category in catalog

    @pytest.mark.parametrize("category", ["Work", "sports", "", " work", None, 3])
    def test_non_members(self, category) -> None:
        assert not catalog.is_member(category)

    def test_all_returns_a_copy(self) -> None:
        categories = catalog.all()
        categories.append("sports")
        assert "sports" not in catalog

    def test_duplicates_are_collapsed(self) -> None:
        custom = CategoryCatalog(["a", "b", "a"])
        assert custom.all() == ["a", "b"]

    def test_empty_catalog_rejected(self) -> None:
        with pytest.raises(ValueError):
            CategoryCatalog([])


class TestValidateCategory:
    def test_accepts_member(self) -> None:
        assert validate_category("health") == "health"

    def test_rejects_unknown_with_allowed_list(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_category("sports")

        assert exc_info.value.code == "invalid_category"
        assert exc_info.value.details["allowed"] == catalog.all()


class TestValidateContent:
    def test_returns_trimmed_text(self) -> None:
        assert validate_content("   my secret  \n") == "my secret"

    def test_normalizes_line_breaks(self) -> None:
        assert validate_content("line one\r\nline two") == "line one\nline two"

    @pytest.mark.parametrize("content", ["", " ", "a", "  a  "])
    def test_too_short(self, content: str) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_content(content)

        assert exc_info.value.code == "content_length_out_of_range"

    def test_bounds_are_inclusive(self) -> None:
        assert validate_content("ab") == "ab"
        assert len(validate_content("x" * 2000)) == 2000

    def test_too_long(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_content("x" * 2001)

        details = exc_info.value.details
        assert details["actual_value"] == 2001
        assert details["max_value"] == 2000

    def test_length_counts_trimmed_text(self) -> None:
        assert validate_content("  " + "x" * 2000 + "  ") == "x" * 2000

    def test_rejects_control_characters(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_content("bad\x00secret")

        assert exc_info.value.code == "invalid_content"

    def test_rejects_non_string(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_content(42)

        assert exc_info.value.code == "invalid_content"


class TestOtherValidators:
    def test_vote_type(self) -> None:
        assert validate_vote_type("truth") is VoteType.TRUTH
        assert validate_vote_type("lie") is VoteType.LIE

    @pytest.mark.parametrize("vote_type", ["TRUTH", "maybe", "", None])
    def test_invalid_vote_type(self, vote_type) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_vote_type(vote_type)

        assert exc_info.value.code == "invalid_vote_type"

    def test_gender(self) -> None:
        assert validate_gender("other") is Gender.OTHER

        with pytest.raises(ValidationAppError):
            validate_gender("unknown")

    @pytest.mark.parametrize("nickname", ["Al", "night_owl", "Mary-Jane 2"])
    def test_valid_nickname(self, nickname: str) -> None:
        assert validate_nickname(f" {nickname} ") == nickname

    @pytest.mark.parametrize("nickname", ["a", "x" * 33, "bad!name", "emoji😀"])
    def test_invalid_nickname(self, nickname: str) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validate_nickname(nickname)

        assert exc_info.value.code == "invalid_nickname"

    @pytest.mark.parametrize("limit", [0, -1, True, "10", 1.5])
    def test_invalid_limit(self, limit) -> None:
        with pytest.raises(ValidationAppError):
            validate_limit(limit)


def test_normalize_nickname() -> None:
    assert normalize_nickname("  Night_Owl ") == "night_owl"
    assert normalize_nickname(None) == ""


def test_has_control_chars() -> None:
    assert has_control_chars("a\nb") is True
    assert has_control_chars("a\nb", allow_newlines=True) is False
    assert has_control_chars("a\x07b", allow_newlines=True) is True
