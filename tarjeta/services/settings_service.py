"""CRM settings use cases (save credentials, test a connection)."""

from __future__ import annotations

from typing import Callable

import structlog

from tarjeta.db.models import Profile
from tarjeta.repositories.sql_repository import SQLRepository
from tarjeta.services.ghl_client import ConnectionResult, GoHighLevelClient

logger = structlog.get_logger(__name__)


class SettingsError(Exception):
    """Raised when CRM settings are incomplete."""


def default_full_name(email: str) -> str:
    local = (email or "").split("@", 1)[0].strip()
    return local or "User"


class SettingsService:
    def __init__(
        self,
        repository: SQLRepository | None = None,
        client_class: Callable[..., GoHighLevelClient] = GoHighLevelClient,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.client_class = client_class

    def save_ghl_settings(
        self,
        profile_id: str,
        email: str,
        *,
        api_key: str | None,
        location_id: str | None,
        auto_sync: bool | None = None,
        connected: bool = False,
    ) -> Profile:
        """
        Store CRM credentials. The profile is created on first save, named
        after the account e-mail until the owner edits the card.
        """
        fields = {
            "ghl_api_key": (api_key or "").strip() or None,
            "ghl_location_id": (location_id or "").strip() or None,
            "ghl_auto_sync": True if auto_sync is None else bool(auto_sync),
            "ghl_connected": connected is True,
        }
        existing = self.repository.get_profile(profile_id)
        if not existing:
            fields["email"] = email or ""
            fields["full_name"] = default_full_name(email)
            logger.info("settings.profile_created", profile_id=profile_id)
        profile = self.repository.upsert_profile(profile_id, **fields)
        logger.info(
            "settings.ghl_saved",
            profile_id=profile_id,
            has_api_key=bool(profile.ghl_api_key),
            location_id=profile.ghl_location_id,
            connected=profile.ghl_connected,
        )
        return profile

    def test_connection(self, api_key: str | None, location_id: str | None) -> ConnectionResult:
        api_key = (api_key or "").strip()
        location_id = (location_id or "").strip()
        if not api_key or not location_id:
            raise SettingsError("API Key and Location ID are required")
        return self.client_class(api_key, location_id).test_connection()

    def connect(self, profile_id: str, email: str, api_key: str, location_id: str, *, auto_sync: bool = True) -> ConnectionResult:
        """Test the credentials and save them, marking the profile connected only on success."""
        result = self.test_connection(api_key, location_id)
        self.save_ghl_settings(
            profile_id,
            email,
            api_key=api_key,
            location_id=location_id,
            auto_sync=auto_sync,
            connected=result.success,
        )
        return result
