from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from flashdeck.config import get_settings
from flashdeck.db.models import Base

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on."""
    engine = create_engine(url, echo=echo, pool_pre_ping=True)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to ``engine``."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_engine() -> Engine:
    """Get the database engine for the configured URL (created lazily)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory for the configured engine."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory(get_engine())
    return _SessionLocal


def reset_engine() -> None:
    """Dispose the cached engine (used after settings change)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def init_db(engine: Engine | None = None) -> None:
    """Initialize database tables."""
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database tables initialized ({engine.url.render_as_string(hide_password=True)})")


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()
