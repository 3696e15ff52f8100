from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from tarjeta.services.settings_service import SettingsError, SettingsService
from tarjeta.services.sync_service import (
    ContactNotFoundError,
    ContactSyncService,
    ProfileNotFoundError,
)

router = APIRouter(prefix="/api", tags=["ghl"])


def _state_service(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} not configured")
    return svc


@router.post("/ghl/sync")
def sync_contact(payload: dict, request: Request):
    contact_id = str(payload.get("contact_id") or "").strip()
    if not contact_id:
        raise HTTPException(400, "Missing contact_id")
    svc: ContactSyncService = _state_service(request, "sync_service")
    try:
        outcome = svc.sync_contact(contact_id)
    except ContactNotFoundError:
        raise HTTPException(404, "Contact not found")
    except ProfileNotFoundError:
        raise HTTPException(404, "Profile not found")
    return outcome.to_dict()


@router.post("/settings/ghl/test")
def test_ghl_connection(payload: dict, request: Request):
    svc: SettingsService = _state_service(request, "settings_service")
    try:
        result = svc.test_connection(payload.get("ghl_api_key"), payload.get("ghl_location_id"))
    except SettingsError as exc:
        raise HTTPException(400, str(exc))
    if not result.success:
        raise HTTPException(400, result.error or "Connection failed. Please check your credentials.")
    return {"success": True, "message": "Connection successful!"}
