"""Fixed category taxonomy for secrets."""

from __future__ import annotations

from typing import Iterable


class CategoryCatalog:
    """Ordered, immutable set of allowed category identifiers.

    The order is the one shown to users in filter/selection lists.
    """

    def __init__(self, categories: Iterable[str]) -> None:
        ordered = tuple(dict.fromkeys(categories))
        if not ordered:
            raise ValueError("category catalog must not be empty")
        self._ordered = ordered
        self._members = frozenset(ordered)

    def is_member(self, category: object) -> bool:
        return isinstance(category, str) and category in self._members

    def all(self) -> list[str]:
        return list(self._ordered)

    def __contains__(self, category: object) -> bool:
        return self.is_member(category)

    def __len__(self) -> int:
        return len(self._ordered)


DEFAULT_CATEGORIES: tuple[str, ...] = ("desire", "family", "work", "health", "other")

catalog = CategoryCatalog(DEFAULT_CATEGORIES)
