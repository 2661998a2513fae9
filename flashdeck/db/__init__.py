"""Reference record store (SQLAlchemy, SQLite by default)."""

from .database import (
    create_db_engine,
    create_session_factory,
    get_engine,
    init_db,
    reset_engine,
    session_scope,
)
from .repository import SqlRecordStore, StudySetSummary

__all__ = [
    "SqlRecordStore",
    "StudySetSummary",
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "init_db",
    "reset_engine",
    "session_scope",
]
