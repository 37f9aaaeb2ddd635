"""Database engine and session helpers."""

from blog.db.database import (
    async_session_maker,
    atomic,
    close_db,
    engine,
    get_session,
    init_db,
    transaction,
)

__all__ = [
    "async_session_maker",
    "atomic",
    "close_db",
    "engine",
    "get_session",
    "init_db",
    "transaction",
]
