from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the tarjeta package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tarjeta.core import config as core_config  # noqa: E402
from tarjeta.core.rate_limiter import reset_rate_limits  # noqa: E402
from tarjeta.db import models  # noqa: E402
from tarjeta.db import session as db_session  # noqa: E402
from tarjeta.db.create_tables import create_all  # noqa: E402


@pytest.fixture(autouse=True)
def base_env(monkeypatch):
    """Isolate every test from the developer's environment."""
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://cards.test")
    monkeypatch.setenv("GHL_API_BASE", "https://ghl.test")
    monkeypatch.delenv("LOG_JSON", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    core_config.get_settings.cache_clear()
    reset_rate_limits()
    yield
    core_config.get_settings.cache_clear()


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Temporary SQLite database; settings/engine caches are reset around the test."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.reset_engine()

    create_all()

    yield db_file

    models.Base.metadata.drop_all(bind=db_session.get_engine())
    db_session.reset_engine()
