from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from tarjeta.core.config import get_settings
from tarjeta.core.rate_limiter import rate_limit_ip, request_ip
from tarjeta.services.contact_service import (
    ContactService,
    ContactSubmission,
    InvalidContactError,
    ProfileNotFoundError,
)

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


def _get_contact_service(request: Request) -> ContactService:
    svc = getattr(getattr(request.app, "state", None), "contact_service", None)
    if not svc:
        raise RuntimeError("ContactService not configured")
    return svc


def _text(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    return str(value) if value is not None else None


@router.post("")
def create_contact(payload: dict, request: Request):
    settings = get_settings()
    rate_limit_ip(
        request,
        "contacts",
        limit=settings.contact_rate_limit,
        window_seconds=settings.contact_rate_window_seconds,
    )
    submission = ContactSubmission(
        profile_id=_text(payload, "profile_id") or "",
        full_name=_text(payload, "full_name") or "",
        email=_text(payload, "email") or "",
        interest_type=_text(payload, "interest_type") or "",
        phone=_text(payload, "phone"),
        company=_text(payload, "company"),
        message=_text(payload, "message"),
        source=_text(payload, "source"),
    )
    svc = _get_contact_service(request)
    try:
        result = svc.submit(
            submission,
            ip_address=request_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
    except InvalidContactError as exc:
        raise HTTPException(400, str(exc))
    except ProfileNotFoundError:
        raise HTTPException(404, "Profile not found")
    return result.to_dict()
