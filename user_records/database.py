"""Database configuration and session management."""

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from user_records.config import get_settings

settings = get_settings()


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_connection, connection_record) -> None:
    """Replace SQLite's ASCII-only lower() so case-insensitive search folds all letters."""
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def build_engine(database_url: str) -> Engine:
    """Create an engine, relaxing SQLite's same-thread check for pooled use."""
    if database_url.startswith("sqlite"):
        sqlite_engine = create_engine(database_url, connect_args={"check_same_thread": False})
        event.listen(sqlite_engine, "connect", _register_unicode_lower)
        return sqlite_engine
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    """Sessions keep loaded attributes after commit so records outlive them."""
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=bind)


engine = build_engine(settings.database_url)

SessionLocal = build_session_factory(engine)

Base: Any = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from user_records import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
