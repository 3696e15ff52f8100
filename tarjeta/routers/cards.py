from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from tarjeta.domain.vcard import VCardError
from tarjeta.services.vcard_service import ProfileNotFoundError, VCardService

router = APIRouter(prefix="/c", tags=["cards"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _get_vcard_service(request: Request) -> VCardService:
    svc = getattr(getattr(request.app, "state", None), "vcard_service", None)
    if not svc:
        raise RuntimeError("VCardService not configured")
    return svc


@router.get("/{username}/vcard")
def download_vcard(username: str, request: Request):
    svc = _get_vcard_service(request)
    try:
        content, filename = svc.render(username)
    except ProfileNotFoundError:
        raise HTTPException(404, "Profile not found")
    except VCardError as exc:
        raise HTTPException(422, str(exc))
    headers = {"Content-Disposition": f'attachment; filename="{filename}"', **NO_CACHE_HEADERS}
    return Response(content, media_type="text/vcard; charset=utf-8", headers=headers)


@router.get("/{username}/qr.png")
def vcard_qr(username: str, request: Request):
    svc = _get_vcard_service(request)
    try:
        png = svc.render_qr_png(username)
    except ProfileNotFoundError:
        raise HTTPException(404, "Profile not found")
    except VCardError as exc:
        raise HTTPException(422, str(exc))
    return Response(png, media_type="image/png")
