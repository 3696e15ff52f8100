"""CRM synchronization of captured contacts.

One call to ContactSyncService.sync_contact is one attempt: it decides
whether the contact should go to GoHighLevel, performs at most one upsert
and leaves the contact in a persisted, inspectable state. Retries are made
by calling it again (operator action or the submission flow); the CRM's
upsert deduplicates, so repeated attempts do not create duplicates.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog

from tarjeta.domain.contacts import SYNC_FAILED
from tarjeta.repositories.sql_repository import SQLRepository
from tarjeta.services.ghl_client import UpsertResult, create_ghl_client

logger = structlog.get_logger(__name__)

NOT_CONFIGURED_ERROR = "GHL not configured"

OUTCOME_SYNCED = "synced"
OUTCOME_FAILED = "failed"
OUTCOME_NOT_CONFIGURED = "not_configured"
OUTCOME_DISABLED = "disabled"


class SyncError(Exception):
    """Base exception for the sync workflow."""


class ContactNotFoundError(SyncError):
    """Raised when the contact to sync does not exist."""


class ProfileNotFoundError(SyncError):
    """Raised when the contact's owning profile does not exist."""


@dataclass
class SyncOutcome:
    success: bool
    status: str
    ghl_contact_id: Optional[str] = None
    is_new: Optional[bool] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def is_ghl_configured(profile: Any) -> bool:
    return bool(
        profile.ghl_connected
        and (profile.ghl_api_key or "").strip()
        and (profile.ghl_location_id or "").strip()
    )


class ContactSyncService:
    """Pushes one contact to its owner's CRM and records the outcome."""

    def __init__(
        self,
        repository: SQLRepository | None = None,
        client_factory: Callable[[Any], Any] = create_ghl_client,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.client_factory = client_factory

    def sync_contact(self, contact_id: str) -> SyncOutcome:
        contact, profile = self.repository.get_contact_with_profile(contact_id)
        if not contact:
            raise ContactNotFoundError(f"Contact {contact_id} not found")
        if not profile:
            raise ProfileNotFoundError(f"Profile for contact {contact_id} not found")

        log = logger.bind(contact_id=contact_id, profile_id=profile.id)

        if not is_ghl_configured(profile):
            self.repository.mark_contact_pending(contact_id, NOT_CONFIGURED_ERROR)
            log.info("sync.skipped_not_configured")
            return SyncOutcome(
                success=False,
                status=OUTCOME_NOT_CONFIGURED,
                error="GHL not configured for this profile",
            )

        if not profile.ghl_auto_sync:
            log.info("sync.skipped_disabled")
            return SyncOutcome(success=False, status=OUTCOME_DISABLED, error="Auto-sync disabled")

        attempts = self.repository.increment_sync_attempts(contact_id)
        result = self._upsert(profile, contact)

        sync_type = "contact_create" if result.is_new else "contact_update"
        self.repository.add_sync_log(
            contact_id,
            sync_type=sync_type,
            status="success" if result.success else "failed",
            request_payload={"contact_id": contact_id, "email": contact.email},
            response_payload=result.to_dict(),
            error_message=result.error,
        )

        if result.success:
            self.repository.mark_contact_synced(
                contact_id, result.ghl_contact_id, synced_at=datetime.now(timezone.utc)
            )
            log.info(
                "sync.contact_synced",
                ghl_contact_id=result.ghl_contact_id,
                is_new=result.is_new,
                attempts=attempts,
            )
            return SyncOutcome(
                success=True,
                status=OUTCOME_SYNCED,
                ghl_contact_id=result.ghl_contact_id,
                is_new=result.is_new,
            )

        error = result.error or "Unknown error"
        self.repository.mark_contact_failed(contact_id, error)
        log.warning("sync.contact_failed", error=error, attempts=attempts)
        return SyncOutcome(success=False, status=OUTCOME_FAILED, error=error)

    def _upsert(self, profile: Any, contact: Any) -> UpsertResult:
        try:
            client = self.client_factory(profile)
            if client is None:
                return UpsertResult(success=False, error="Failed to create GHL client")
            result = client.upsert_contact(contact)
        except Exception as exc:
            logger.exception("sync.client_error", contact_id=contact.id)
            return UpsertResult(success=False, error=str(exc) or exc.__class__.__name__)
        if result.success and not result.ghl_contact_id:
            return UpsertResult(success=False, error="GHL API response missing contact id")
        return result

    def retry_failed(self) -> list[tuple[str, SyncOutcome]]:
        """Run one new attempt for every contact currently marked failed."""
        outcomes = []
        for contact in self.repository.list_contacts_by_status(SYNC_FAILED):
            outcomes.append((contact.id, self.sync_contact(contact.id)))
        return outcomes
