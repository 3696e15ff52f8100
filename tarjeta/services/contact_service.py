"""Exchange-form submissions: validate, store, then sync to the owner's CRM."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import structlog

from tarjeta.domain.contacts import (
    CONTACT_SOURCES,
    DEFAULT_CONTACT_SOURCE,
    is_valid_email,
    is_valid_interest,
)
from tarjeta.repositories.sql_repository import SQLRepository
from tarjeta.services.sync_service import ContactSyncService, SyncError

logger = structlog.get_logger(__name__)


class ContactSubmissionError(Exception):
    """Base exception for the submission workflow."""


class InvalidContactError(ContactSubmissionError):
    """Raised when the submitted form is incomplete or malformed."""


class ProfileNotFoundError(ContactSubmissionError):
    """Raised when the card the visitor submitted to does not exist."""


@dataclass
class ContactSubmission:
    profile_id: str
    full_name: str
    email: str
    interest_type: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None


@dataclass
class SubmissionResult:
    contact_id: str
    ghl_sync: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"success": True, "contact_id": self.contact_id, "ghl_sync": self.ghl_sync}


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class ContactService:
    def __init__(
        self,
        repository: SQLRepository | None = None,
        sync_service: ContactSyncService | None = None,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.sync_service = sync_service or ContactSyncService(self.repository)

    def validate(self, submission: ContactSubmission) -> None:
        if not (
            _clean(submission.profile_id)
            and _clean(submission.full_name)
            and _clean(submission.email)
            and _clean(submission.interest_type)
        ):
            raise InvalidContactError("Missing required fields")
        if not is_valid_email(submission.email.strip()):
            raise InvalidContactError("Invalid email format")
        if not is_valid_interest(submission.interest_type):
            raise InvalidContactError("Invalid interest type")

    def submit(
        self,
        submission: ContactSubmission,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """
        Store the contact as pending and run one CRM sync attempt before
        returning. A sync problem never fails the submission itself.
        """
        self.validate(submission)
        profile = self.repository.get_profile(submission.profile_id.strip())
        if not profile:
            raise ProfileNotFoundError("Profile not found")

        source = submission.source if submission.source in CONTACT_SOURCES else DEFAULT_CONTACT_SOURCE
        contact = self.repository.create_contact(
            profile.id,
            full_name=submission.full_name.strip(),
            email=submission.email.strip(),
            interest_type=submission.interest_type,
            phone=_clean(submission.phone),
            company=_clean(submission.company),
            message=_clean(submission.message),
            source=source,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("contacts.created", contact_id=contact.id, profile_id=profile.id)

        try:
            outcome = self.sync_service.sync_contact(contact.id)
            ghl_sync = {"success": outcome.success}
            if outcome.error:
                ghl_sync["error"] = outcome.error
        except SyncError as exc:
            logger.error("contacts.sync_error", contact_id=contact.id, error=str(exc))
            ghl_sync = {"success": False, "error": str(exc)}
        except Exception as exc:
            # The contact row is committed at this point.
            logger.exception("contacts.sync_crashed", contact_id=contact.id)
            ghl_sync = {"success": False, "error": str(exc) or exc.__class__.__name__}
        return SubmissionResult(contact_id=contact.id, ghl_sync=ghl_sync)
