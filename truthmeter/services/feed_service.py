"""Feed queries: category-filtered, newest-first, bounded secret listings."""

from __future__ import annotations

from typing import Optional

from truthmeter.core.categories import CategoryCatalog, catalog as default_catalog
from truthmeter.core.config import settings
from truthmeter.core.validation import validate_category, validate_limit
from truthmeter.repositories.secret_repository import SecretRepository
from truthmeter.schemas.secret import SecretView


class FeedQuery:
    """Stateless composition over ``SecretRepository.list``.

    Attributes:
        catalog: Categories accepted as filters.
        feed_limit: Hard cap of the public feed.
        admin_feed_limit: Default size of the admin listing.
    """

    def __init__(
        self,
        catalog: CategoryCatalog = default_catalog,
        feed_limit: int | None = None,
        admin_feed_limit: int | None = None,
    ) -> None:
        self.catalog = catalog
        self.feed_limit = feed_limit or settings.app.feed_limit
        self.admin_feed_limit = admin_feed_limit or settings.app.admin_feed_limit

    def public_feed(
        self,
        secrets: SecretRepository,
        category: Optional[str] = None,
    ) -> list[SecretView]:
        """Newest secrets, optionally restricted to one category.

        An empty string is treated like no filter.

        Raises:
            ValidationAppError: If ``category`` is not in the catalog.
        """
        if category:
            category = validate_category(category, self.catalog)
        else:
            category = None
        return secrets.list(category, limit=self.feed_limit)

    def admin_feed(self, secrets: SecretRepository, limit: Optional[int] = None) -> list[SecretView]:
        limit = self.admin_feed_limit if limit is None else validate_limit(limit)
        return secrets.list(limit=limit)
