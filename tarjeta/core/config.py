"""
Configuration helpers for the Tarjeta backend.

Routers and services read settings through get_settings() instead of
fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    ghl_api_base: str
    ghl_api_version: str
    ghl_timeout_seconds: float
    photo_fetch_timeout_seconds: float
    contact_rate_limit: int
    contact_rate_window_seconds: int
    log_level: str
    log_json: bool


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    return Settings(
        app_env=app_env,
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", ""),
        ghl_api_base=os.getenv("GHL_API_BASE", "https://services.leadconnectorhq.com").rstrip("/"),
        ghl_api_version=os.getenv("GHL_API_VERSION", "2021-07-28"),
        ghl_timeout_seconds=_float(os.getenv("GHL_TIMEOUT_SECONDS", "15"), 15.0),
        photo_fetch_timeout_seconds=_float(os.getenv("PHOTO_FETCH_TIMEOUT_SECONDS", "10"), 10.0),
        contact_rate_limit=_int(os.getenv("CONTACT_RATE_LIMIT", "10"), 10),
        contact_rate_window_seconds=_int(os.getenv("CONTACT_RATE_WINDOW_SECONDS", "60"), 60),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_json=_bool(os.getenv("LOG_JSON"), app_env == "prod"),
    )
