"""
vCard 3.0 encoder.

The output targets the iPhone/Android contact importers:
- VERSION must be 3.0 (iOS rejects 4.0 files opened from Safari)
- PHOTO is embedded as base64, never as a URL
- lines are joined with CRLF and long lines are folded at 75 characters
- labeled links use the itemN.URL / itemN.X-ABLabel grouping so iOS
  Contacts shows them with their label

Everything here is pure: the same VCardData always renders the same text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .contacts import split_full_name
from .profiles import ResourceLink, resource_links

CRLF = "\r\n"
FOLD_WIDTH = 75
NOTE_MAX_LENGTH = 2000

_PHONE_NOISE = re.compile(r"[\s()-]")
_FILENAME_NOISE = re.compile(r"[^a-z0-9]+")


class VCardError(ValueError):
    """Raised when a profile cannot produce a valid vCard."""


@dataclass(frozen=True)
class LinkSlot:
    label: str
    url: str


@dataclass
class VCardData:
    full_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = None
    photo_base64: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    youtube: Optional[str] = None
    calendar: Optional[str] = None
    resources: list[ResourceLink] = field(default_factory=list)

    def social_links(self) -> list[LinkSlot]:
        pairs = [
            ("LinkedIn", self.linkedin),
            ("Instagram", self.instagram),
            ("Facebook", self.facebook),
            ("YouTube", self.youtube),
            ("Calendar", self.calendar),
        ]
        return [LinkSlot(label, url) for label, url in pairs if url]

    def labeled_links(self) -> list[LinkSlot]:
        """Social links in fixed order followed by resources in stored order."""
        links = self.social_links()
        links.extend(LinkSlot(r.title, r.url) for r in self.resources)
        return links


def escape_value(value: str) -> str:
    """Backslash-escape \\ ; , and newline for a vCard text value. CRLF and CR count as newlines."""
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def unescape_value(value: str) -> str:
    """Inverse of escape_value."""
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            out.append("\n" if nxt in ("n", "N") else nxt)
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def fold_line(line: str) -> str:
    """
    Fold a logical line: the first physical line keeps 75 characters, each
    continuation starts with one space followed by up to 74 characters.
    """
    if len(line) <= FOLD_WIDTH:
        return line
    chunks = [line[:FOLD_WIDTH]]
    rest = line[FOLD_WIDTH:]
    step = FOLD_WIDTH - 1
    while rest:
        chunks.append(" " + rest[:step])
        rest = rest[step:]
    return CRLF.join(chunks)


def normalize_phone(phone: str) -> str:
    return _PHONE_NOISE.sub("", phone)


def generate_vcf(data: VCardData) -> str:
    """Render VCardData as vCard 3.0 text (CRLF line endings)."""
    full_name = data.full_name or ""
    if not full_name.strip():
        raise VCardError("full_name is required to build a vCard")

    split_first, split_last = split_full_name(full_name)
    first_name = data.first_name or split_first
    last_name = data.last_name or split_last

    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"FN:{escape_value(full_name)}",
        f"N:{escape_value(last_name)};{escape_value(first_name)};;;",
    ]

    if data.company:
        lines.append(f"ORG:{escape_value(data.company)}")
    if data.title:
        lines.append(f"TITLE:{escape_value(data.title)}")
    if data.email:
        lines.append(f"EMAIL;TYPE=INTERNET:{data.email}")
    if data.phone:
        lines.append(f"TEL;TYPE=CELL:{normalize_phone(data.phone)}")
    if data.website:
        lines.append(f"URL;TYPE=WORK:{data.website}")
    if data.location:
        lines.append(f"ADR;TYPE=WORK:;;{escape_value(data.location)};;;;")

    for index, link in enumerate(data.labeled_links(), start=1):
        lines.append(f"item{index}.URL:{link.url}")
        lines.append(f"item{index}.X-ABLabel:{escape_value(link.label)}")

    if data.photo_base64:
        lines.append(fold_line(f"PHOTO;ENCODING=b;TYPE=JPEG:{data.photo_base64}"))

    if data.bio:
        note = data.bio[:NOTE_MAX_LENGTH]
        lines.append(fold_line(f"NOTE:{escape_value(note)}"))

    lines.append("END:VCARD")
    return CRLF.join(lines)


def generate_vcard_qr_data(data: VCardData) -> str:
    """
    Compact vCard for QR codes scanned by a phone camera: no photo, no note,
    only the first two social links, LF line endings.
    """
    if not (data.full_name or "").strip():
        raise VCardError("full_name is required to build a vCard")
    lines = ["BEGIN:VCARD", "VERSION:3.0", f"FN:{data.full_name}"]
    if data.company:
        lines.append(f"ORG:{data.company}")
    if data.title:
        lines.append(f"TITLE:{data.title}")
    if data.email:
        lines.append(f"EMAIL:{data.email}")
    if data.phone:
        lines.append(f"TEL:{normalize_phone(data.phone)}")
    if data.website:
        lines.append(f"URL:{data.website}")
    if data.location:
        lines.append(f"ADR:;;{data.location};;;;")
    qr_links = [slot for slot in data.social_links() if slot.label in ("LinkedIn", "Instagram")]
    for index, link in enumerate(qr_links, start=1):
        lines.append(f"item{index}.URL:{link.url}")
        lines.append(f"item{index}.X-ABLabel:{link.label}")
    lines.append("END:VCARD")
    return "\n".join(lines)


def generate_vcf_filename(full_name: str) -> str:
    """
    "Ana María López" -> "ana_mar_a_l_pez.vcf". Characters outside [a-z0-9]
    after lowercasing are replaced, not transliterated.
    """
    slug = _FILENAME_NOISE.sub("_", (full_name or "").lower()).strip("_")
    return f"{slug}.vcf"


def _attr(profile: Any, name: str) -> Any:
    if isinstance(profile, dict):
        return profile.get(name)
    return getattr(profile, name, None)


def vcard_data_from_profile(profile: Any, photo_base64: Optional[str] = None) -> VCardData:
    """Build VCardData from a profile row or a plain dict snapshot."""
    return VCardData(
        full_name=_attr(profile, "full_name") or "",
        company=_attr(profile, "company") or None,
        title=_attr(profile, "job_title") or None,
        email=_attr(profile, "email_public") or _attr(profile, "email") or None,
        phone=_attr(profile, "phone") or None,
        website=_attr(profile, "website") or None,
        bio=_attr(profile, "bio") or None,
        photo_base64=photo_base64 or None,
        location=_attr(profile, "location") or None,
        linkedin=_attr(profile, "linkedin_url") or None,
        instagram=_attr(profile, "instagram_url") or None,
        facebook=_attr(profile, "facebook_url") or None,
        youtube=_attr(profile, "youtube_channel_url") or None,
        calendar=_attr(profile, "calendar_url") or None,
        resources=resource_links(_attr(profile, "resources")),
    )
