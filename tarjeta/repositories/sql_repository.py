"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update

from tarjeta.db.models import Contact, Profile, SyncLog
from tarjeta.db.session import get_session
from tarjeta.domain.contacts import SYNC_FAILED, SYNC_PENDING, SYNC_SYNCED
from tarjeta.domain.profiles import normalize_resources

# Columns a card owner may edit through upsert_profile.
PROFILE_FIELDS = (
    "email",
    "username",
    "full_name",
    "photo_url",
    "job_title",
    "company",
    "location",
    "bio",
    "phone",
    "email_public",
    "website",
    "linkedin_url",
    "instagram_url",
    "facebook_url",
    "youtube_channel_url",
    "calendar_url",
    "resources",
    "ghl_api_key",
    "ghl_location_id",
    "ghl_connected",
    "ghl_auto_sync",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- profiles --------------------------
    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with get_session() as session:
            return session.get(Profile, profile_id)

    def get_profile_by_username(self, username: str) -> Optional[Profile]:
        value = (username or "").strip()
        if not value:
            return None
        with get_session() as session:
            stmt = select(Profile).where(Profile.username == value)
            return session.execute(stmt).scalar_one_or_none()

    def upsert_profile(self, profile_id: str, **fields) -> Profile:
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        if "resources" in fields:
            fields["resources"] = normalize_resources(fields["resources"])
        now = _now()
        with get_session() as session:
            profile = session.get(Profile, profile_id)
            if not profile:
                profile = Profile(id=profile_id, created_at=now, updated_at=now, **fields)
                session.add(profile)
            else:
                for key, value in fields.items():
                    setattr(profile, key, value)
                profile.updated_at = now
            session.commit()
            session.refresh(profile)
            return profile

    # -------------------------- contacts --------------------------
    def create_contact(
        self,
        profile_id: str,
        *,
        full_name: str,
        email: str,
        interest_type: str,
        phone: str | None = None,
        company: str | None = None,
        job_title: str | None = None,
        message: str | None = None,
        source: str = "direct_link",
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Contact:
        now = _now()
        entity = Contact(
            profile_id=profile_id,
            full_name=full_name,
            email=email,
            phone=phone,
            company=company,
            job_title=job_title,
            interest_type=interest_type,
            message=message,
            source=source,
            ip_address=ip_address,
            user_agent=user_agent,
            ghl_sync_status=SYNC_PENDING,
            ghl_sync_attempts=0,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        with get_session() as session:
            return session.get(Contact, contact_id)

    def get_contact_with_profile(self, contact_id: str) -> tuple[Optional[Contact], Optional[Profile]]:
        with get_session() as session:
            contact = session.get(Contact, contact_id)
            if not contact:
                return None, None
            return contact, session.get(Profile, contact.profile_id)

    def list_contacts_by_status(self, status: str) -> list[Contact]:
        with get_session() as session:
            stmt = select(Contact).where(Contact.ghl_sync_status == status).order_by(Contact.created_at)
            return session.execute(stmt).scalars().all()

    def increment_sync_attempts(self, contact_id: str) -> int:
        with get_session() as session:
            stmt = (
                update(Contact)
                .where(Contact.id == contact_id)
                .values(ghl_sync_attempts=Contact.ghl_sync_attempts + 1, updated_at=_now())
            )
            session.execute(stmt)
            session.commit()
            attempts = session.execute(
                select(Contact.ghl_sync_attempts).where(Contact.id == contact_id)
            ).scalar_one_or_none()
            return int(attempts or 0)

    def mark_contact_pending(self, contact_id: str, error: str | None) -> None:
        with get_session() as session:
            stmt = (
                update(Contact)
                .where(Contact.id == contact_id)
                .values(ghl_sync_status=SYNC_PENDING, ghl_sync_error=error, updated_at=_now())
            )
            session.execute(stmt)
            session.commit()

    def mark_contact_synced(self, contact_id: str, ghl_contact_id: str, synced_at: datetime | None = None) -> None:
        if not ghl_contact_id:
            raise ValueError("A synced contact needs the external CRM id")
        with get_session() as session:
            stmt = (
                update(Contact)
                .where(Contact.id == contact_id)
                .values(
                    ghl_sync_status=SYNC_SYNCED,
                    ghl_contact_id=ghl_contact_id,
                    ghl_synced_at=synced_at or _now(),
                    ghl_sync_error=None,
                    updated_at=_now(),
                )
            )
            session.execute(stmt)
            session.commit()

    def mark_contact_failed(self, contact_id: str, error: str) -> None:
        with get_session() as session:
            stmt = (
                update(Contact)
                .where(Contact.id == contact_id)
                .values(ghl_sync_status=SYNC_FAILED, ghl_sync_error=error, updated_at=_now())
            )
            session.execute(stmt)
            session.commit()

    # -------------------------- sync logs --------------------------
    def add_sync_log(
        self,
        contact_id: str,
        *,
        sync_type: str,
        status: str,
        request_payload: dict | None = None,
        response_payload: dict | None = None,
        error_message: str | None = None,
    ) -> SyncLog:
        entity = SyncLog(
            contact_id=contact_id,
            sync_type=sync_type,
            status=status,
            request_payload=request_payload,
            response_payload=response_payload,
            error_message=error_message,
            created_at=_now(),
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def list_sync_logs(self, contact_id: str) -> list[SyncLog]:
        with get_session() as session:
            stmt = select(SyncLog).where(SyncLog.contact_id == contact_id).order_by(SyncLog.created_at)
            return session.execute(stmt).scalars().all()
