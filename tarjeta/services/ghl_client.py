"""GoHighLevel (LeadConnector API v2) client.

Every public method converts transport errors, non-2xx responses and
malformed bodies into a typed result; nothing raises to the caller. There is
no retry here: the upsert endpoint deduplicates by email/phone server-side,
so callers retry by calling again.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional

import httpx
import structlog

from tarjeta.core.config import get_settings
from tarjeta.domain.contacts import interest_label, split_full_name

logger = structlog.get_logger(__name__)

SOURCE_TAG = "Tarjeta Digital"
CONTACT_TAGS = ["digital-card"]

# Header encoding (non-ASCII key) raises UnicodeEncodeError, a ValueError.
REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


@dataclass
class UpsertResult:
    success: bool
    ghl_contact_id: Optional[str] = None
    is_new: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ConnectionResult:
    success: bool
    error: Optional[str] = None


def build_contact_payload(contact: Any, location_id: str) -> dict:
    """Map a captured contact onto the CRM upsert payload."""
    first_name, last_name = split_full_name((contact.full_name or "").strip())
    payload: dict = {
        "locationId": location_id,
        "firstName": first_name,
        "lastName": last_name,
        "email": contact.email,
        "source": SOURCE_TAG,
        "tags": list(CONTACT_TAGS),
        "customFields": [
            {"key": "interest_type", "field_value": interest_label(contact.interest_type)},
        ],
    }
    if getattr(contact, "phone", None):
        payload["phone"] = contact.phone
    if getattr(contact, "company", None):
        payload["companyName"] = contact.company
    if getattr(contact, "message", None):
        payload["customFields"].append({"key": "initial_message", "field_value": contact.message})
    if getattr(contact, "source", None):
        payload["customFields"].append({"key": "contact_source", "field_value": contact.source})
    return payload


def _error_message(response: httpx.Response) -> str:
    fallback = f"GHL API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    message = body.get("message") or body.get("error")
    if isinstance(message, list):
        message = "; ".join(str(item) for item in message if item)
    return str(message) if message else fallback


class GoHighLevelClient:
    """Thin client for the contact endpoints used by the card backend.

    Args:
        api_key: Private integration token of the GHL sub-account.
        location_id: Sub-account (location) the contacts belong to.
        base_url / api_version / timeout: default to Settings.
        transport: optional httpx transport, used by tests.
    """

    def __init__(
        self,
        api_key: str,
        location_id: str,
        *,
        base_url: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.location_id = location_id
        self._api_key = api_key
        self._base_url = (base_url or settings.ghl_api_base).rstrip("/")
        self._api_version = api_version or settings.ghl_api_version
        self._timeout = timeout if timeout is not None else settings.ghl_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Version": self._api_version,
                "Accept": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    def upsert_contact(self, contact: Any) -> UpsertResult:
        """Create or update a contact through POST /contacts/upsert.

        The CRM decides create vs. update from the location's duplicate
        settings; the result reports which one happened via ``is_new``.
        """
        try:
            payload = build_contact_payload(contact, self.location_id)
            logger.info("ghl.upsert_started", email=contact.email, location_id=self.location_id)
            with self._client() as client:
                response = client.post("/contacts/upsert", json=payload)
            if not response.is_success:
                error = _error_message(response)
                logger.warning("ghl.upsert_failed", status_code=response.status_code, error=error)
                return UpsertResult(success=False, error=error)
            data = response.json()
            contact_data = data.get("contact") if isinstance(data, dict) else None
            ghl_id = contact_data.get("id") if isinstance(contact_data, dict) else None
            if not ghl_id:
                logger.warning("ghl.upsert_missing_id", status_code=response.status_code)
                return UpsertResult(success=False, error="GHL API response missing contact id")
            is_new = data.get("new")
            result = UpsertResult(success=True, ghl_contact_id=str(ghl_id), is_new=True if is_new is None else bool(is_new))
            logger.info("ghl.upsert_succeeded", ghl_contact_id=result.ghl_contact_id, is_new=result.is_new)
            return result
        except REQUEST_ERRORS + (AttributeError, TypeError) as exc:
            logger.error("ghl.upsert_error", error=str(exc))
            return UpsertResult(success=False, error=str(exc) or exc.__class__.__name__)

    def find_by_email(self, email: str) -> Optional[str]:
        """Return the CRM id of the contact the location treats as a duplicate for ``email``."""
        try:
            with self._client() as client:
                response = client.get(
                    "/contacts/search/duplicate",
                    params={"locationId": self.location_id, "email": email},
                )
            if not response.is_success:
                return None
            data = response.json()
            contact_data = data.get("contact") if isinstance(data, dict) else None
            if isinstance(contact_data, dict) and contact_data.get("id"):
                return str(contact_data["id"])
            return None
        except REQUEST_ERRORS as exc:
            logger.error("ghl.find_by_email_error", error=str(exc))
            return None

    def update_contact(self, ghl_contact_id: str, updates: dict) -> UpsertResult:
        try:
            with self._client() as client:
                response = client.put(f"/contacts/{ghl_contact_id}", json=updates)
            if not response.is_success:
                return UpsertResult(success=False, error=_error_message(response))
            return UpsertResult(success=True, ghl_contact_id=ghl_contact_id, is_new=False)
        except REQUEST_ERRORS as exc:
            logger.error("ghl.update_error", ghl_contact_id=ghl_contact_id, error=str(exc))
            return UpsertResult(success=False, error=str(exc) or exc.__class__.__name__)

    def add_note(self, ghl_contact_id: str, note: str) -> bool:
        try:
            with self._client() as client:
                response = client.post(f"/contacts/{ghl_contact_id}/notes", json={"body": note})
            return response.is_success
        except REQUEST_ERRORS as exc:
            logger.error("ghl.add_note_error", ghl_contact_id=ghl_contact_id, error=str(exc))
            return False

    def test_connection(self) -> ConnectionResult:
        """Check the credentials by reading the location."""
        try:
            with self._client() as client:
                response = client.get(f"/locations/{self.location_id}")
        except REQUEST_ERRORS as exc:
            logger.error("ghl.test_connection_error", location_id=self.location_id, error=str(exc))
            return ConnectionResult(success=False, error=str(exc) or "Connection failed")
        if response.is_success:
            return ConnectionResult(success=True)
        if response.status_code == 401:
            return ConnectionResult(success=False, error="Invalid API Key")
        if response.status_code == 404:
            return ConnectionResult(success=False, error="Location not found. Check your Location ID.")
        return ConnectionResult(success=False, error=f"Connection failed: {response.status_code}")


def create_ghl_client(profile: Any) -> Optional[GoHighLevelClient]:
    """Client for a profile's CRM credentials, or None when they are incomplete."""
    api_key = (getattr(profile, "ghl_api_key", None) or "").strip()
    location_id = (getattr(profile, "ghl_location_id", None) or "").strip()
    if not api_key or not location_id:
        return None
    return GoHighLevelClient(api_key, location_id)
