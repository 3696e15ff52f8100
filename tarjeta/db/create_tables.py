"""
Create the card backend schema (profiles, contacts, sync_logs).

    DATABASE_URL=sqlite:///./tarjeta.db python -m tarjeta.db.create_tables

Existing tables are left untouched; there is no migration step.
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401  # registers the tables on Base.metadata
from .session import Base, get_engine


def create_all() -> list[str]:
    """Create missing tables and return the names the schema defines."""
    Base.metadata.create_all(bind=get_engine())
    return sorted(Base.metadata.tables)


if __name__ == "__main__":
    try:
        tables = create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print("OK: schema ready (" + ", ".join(tables) + ")")
