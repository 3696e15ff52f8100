"""SQLAlchemy models for card profiles, captured contacts and CRM sync logs."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False)
    username = Column(String(64), unique=True, nullable=True)
    full_name = Column(String(255), nullable=False, default="")
    photo_url = Column(Text, nullable=True)
    job_title = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String(64), nullable=True)
    email_public = Column(String(255), nullable=True)
    website = Column(Text, nullable=True)
    linkedin_url = Column(Text, nullable=True)
    instagram_url = Column(Text, nullable=True)
    facebook_url = Column(Text, nullable=True)
    youtube_channel_url = Column(Text, nullable=True)
    calendar_url = Column(Text, nullable=True)
    # ordered [{"title": ..., "url": ...}], capped by domain.profiles.normalize_resources
    resources = Column(JSON, nullable=False, default=list)
    ghl_api_key = Column(Text, nullable=True)
    ghl_location_id = Column(String(255), nullable=True)
    ghl_connected = Column(Boolean, default=False, nullable=False)
    ghl_auto_sync = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    contacts = relationship("Contact", back_populates="profile", cascade="all,delete-orphan")


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_uuid)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True)
    company = Column(String(255), nullable=True)
    job_title = Column(String(255), nullable=True)
    interest_type = Column(String(64), nullable=False)
    message = Column(Text, nullable=True)
    source = Column(String(32), default="direct_link", nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    ghl_sync_status = Column(String(16), default="pending", nullable=False)
    ghl_contact_id = Column(String(255), nullable=True)
    ghl_synced_at = Column(DateTime(timezone=True), nullable=True)
    ghl_sync_attempts = Column(Integer, default=0, nullable=False)
    ghl_sync_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="contacts")
    sync_logs = relationship("SyncLog", back_populates="contact", cascade="all,delete-orphan")


class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
    sync_type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False)
    request_payload = Column(JSON, nullable=True)
    response_payload = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    contact = relationship("Contact", back_populates="sync_logs")
