"""Engine and session helpers for the scheduling database."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

DEFAULT_DB_URL = "sqlite:///scheduler.db"


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False) -> Engine:
    return create_engine(db_url, echo=echo)


def init_database(db_url: str = DEFAULT_DB_URL) -> Engine:
    """Create all tables that don't exist yet."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    print(f"[INFO] Database initialized: {db_url}")
    return engine


def reset_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Drop all tables and recreate (WARNING: deletes all data!)."""
    engine = create_db_engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print(f"[WARN] Database reset: {db_url}")


def get_session(db_url: str = DEFAULT_DB_URL) -> Session:
    return sessionmaker(bind=create_db_engine(db_url))()


@contextmanager
def session_scope(db_url: str = DEFAULT_DB_URL) -> Iterator[Session]:
    """
    Session that commits on success and rolls back on any error.

    The error is re-raised after the rollback.
    """
    session = get_session(db_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
