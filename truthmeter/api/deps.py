"""Application-wide service wiring for the HTTP layer.

The engine, session factory and service are built once per process on first
use. Tests replace ``get_secret_service`` through ``app.dependency_overrides``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from truthmeter.core.rate_limit import get_post_throttle
from truthmeter.db.session import create_db_engine, create_session_factory, init_db
from truthmeter.services.secret_service import SecretService


@dataclass(frozen=True)
class ServiceContainer:
    engine: Engine
    session_factory: sessionmaker[Session]
    secret_service: SecretService


@lru_cache
def get_service_container() -> ServiceContainer:
    """Build the configured engine and service, creating missing tables."""
    engine = create_db_engine()
    init_db(engine)
    session_factory = create_session_factory(engine)
    service = SecretService(session_factory=session_factory, throttle=get_post_throttle())
    return ServiceContainer(engine=engine, session_factory=session_factory, secret_service=service)


def get_secret_service() -> SecretService:
    return get_service_container().secret_service
