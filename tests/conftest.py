"""Pytest configuration and fixtures shared across all test modules.

This file is loaded by pytest before any test module, so the environment
below is in place before ``truthmeter.core.config`` builds its settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
# This prevents the .env.{APP_ENV} file from being loaded during tests
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock

import pytest

from truthmeter.adapters.rate_limit.in_memory import InMemoryPostThrottle
from truthmeter.db.session import create_db_engine, create_session_factory, init_db
from truthmeter.services.secret_service import SecretService


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite database, one per test."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'secrets.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def clock() -> Mock:
    """Controllable millisecond clock for the post throttle."""
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def throttle(clock: Mock) -> InMemoryPostThrottle:
    return InMemoryPostThrottle(window_ms=15000, clock=clock)


@pytest.fixture
def service(session_factory, throttle) -> SecretService:
    return SecretService(session_factory=session_factory, throttle=throttle)


@pytest.fixture
def alice(service: SecretService) -> str:
    return service.create_user("Alice", "hash-a", "female", user_id="user-alice").id


@pytest.fixture
def bob(service: SecretService) -> str:
    return service.create_user("Bob", "hash-b", "male", user_id="user-bob").id


@pytest.fixture
def admin(service: SecretService) -> str:
    return service.create_user("Root", "hash-r", "other", is_admin=True, user_id="user-admin").id


@pytest.fixture
def post_secret(service: SecretService, clock: Mock):
    """Post a secret, moving the clock past the throttle window first."""

    def _post(user_id: str, category: str = "work", content: str = "I never read the docs") -> int:
        clock.return_value += 20_000
        return service.create_secret(user_id, category, content)

    return _post
