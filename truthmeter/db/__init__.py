"""Database module."""

from truthmeter.db.session import (
    Base,
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
