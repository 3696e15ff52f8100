"""Domain helpers for captured contacts (interest types, sources, sync states)."""
from __future__ import annotations

import re
from enum import Enum


class InterestType(str, Enum):
    NETWORKING = "networking"
    CONTRATAR_SERVICIOS = "contratar_servicios"
    PODCAST = "podcast"
    COLABORACION = "colaboracion"
    OPORTUNIDADES_NEGOCIO = "oportunidades_negocio"
    OFRECER_SERVICIOS = "ofrecer_servicios"


INTEREST_LABELS = {
    InterestType.NETWORKING.value: "Networking",
    InterestType.CONTRATAR_SERVICIOS.value: "Contratar Servicios",
    InterestType.PODCAST.value: "Podcast",
    InterestType.COLABORACION.value: "Colaboración",
    InterestType.OPORTUNIDADES_NEGOCIO.value: "Oportunidades de Negocio",
    InterestType.OFRECER_SERVICIOS.value: "Ofrecer Servicios",
}

CONTACT_SOURCES = {"qr_scan", "nfc_tap", "direct_link", "share"}
DEFAULT_CONTACT_SOURCE = "direct_link"

SYNC_PENDING = "pending"
SYNC_SYNCED = "synced"
SYNC_FAILED = "failed"

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def interest_label(value: str | None) -> str:
    """Readable label for an interest type; unknown values pass through unchanged."""
    raw = value or ""
    return INTEREST_LABELS.get(raw, raw)


def is_valid_interest(value: str | None) -> bool:
    return bool(value) and value in INTEREST_LABELS


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))


def split_full_name(full_name: str | None) -> tuple[str, str]:
    """
    Split on the first space: the first token is the first name, everything
    after it is the last name.
    """
    first, _, last = (full_name or "").partition(" ")
    return first, last
