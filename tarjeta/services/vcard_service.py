"""vCard download use cases (profile lookup, photo embedding, QR rendering)."""

from __future__ import annotations

import base64
import io
from typing import Optional, Tuple

import httpx
import qrcode
import structlog

from tarjeta.core.config import get_settings
from tarjeta.core.utils import absolute_url
from tarjeta.domain.vcard import (
    generate_vcard_qr_data,
    generate_vcf,
    generate_vcf_filename,
    vcard_data_from_profile,
)
from tarjeta.repositories.sql_repository import SQLRepository

logger = structlog.get_logger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no profile owns the requested username."""


def fetch_photo_base64(
    photo_url: str | None,
    *,
    timeout: float | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Optional[str]:
    """
    Download a profile photo and return it base64-encoded.
    Best effort: any failure returns None so the vCard is still served.
    """
    url = (photo_url or "").strip()
    if not url:
        return None
    settings = get_settings()
    try:
        with httpx.Client(
            timeout=timeout if timeout is not None else settings.photo_fetch_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = client.get(absolute_url(url))
            response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("vcard.photo_fetch_failed", photo_url=url, error=str(exc))
        return None
    if not response.content:
        return None
    return base64.b64encode(response.content).decode("ascii")


class VCardService:
    """Builds the downloadable vCard and its QR code for a public profile."""

    def __init__(self, repository: SQLRepository | None = None, photo_fetcher=fetch_photo_base64) -> None:
        self.repository = repository or SQLRepository()
        self.photo_fetcher = photo_fetcher

    def _profile(self, username: str):
        profile = self.repository.get_profile_by_username(username)
        if not profile:
            raise ProfileNotFoundError(f"Profile {username} not found")
        return profile

    def render(self, username: str) -> Tuple[str, str]:
        """Return (vcf_text, filename); raises VCardError when the profile has no name."""
        profile = self._profile(username)
        photo_b64 = self.photo_fetcher(profile.photo_url) if profile.photo_url else None
        content = generate_vcf(vcard_data_from_profile(profile, photo_b64))
        return content, generate_vcf_filename(profile.full_name)

    def render_qr_png(self, username: str) -> bytes:
        profile = self._profile(username)
        payload = generate_vcard_qr_data(vcard_data_from_profile(profile))
        qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=8, border=4)
        qr.add_data(payload)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
