"""
Database plumbing for profiles, contacts and sync logs.

DATABASE_URL selects the backend: Postgres (psycopg) in deployments, a file
SQLite database in tests and local runs. The engine and sessionmaker are
built lazily and cached; reset_engine() drops both after DATABASE_URL moves.
"""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tarjeta.core.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    url = (get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cards and contacts need a database.")
    connect_args = {}
    if url.startswith("sqlite"):
        # sync routes run in the threadpool, sessions cross threads
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


def reset_engine() -> None:
    """Dispose the cached engine so the next call re-reads DATABASE_URL."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_engine.cache_clear()
    _get_sessionmaker.cache_clear()


@contextmanager
def get_session() -> Iterator[Session]:
    """One short-lived session; SQLRepository opens one per call and commits itself."""
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
