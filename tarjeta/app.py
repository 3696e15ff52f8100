from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from tarjeta.core.config import get_settings
from tarjeta.core.logging import configure_logging
from tarjeta.routers import cards as cards_router
from tarjeta.routers import contacts as contacts_router
from tarjeta.routers import ghl as ghl_router
from tarjeta.repositories.sql_repository import SQLRepository
from tarjeta.services.contact_service import ContactService
from tarjeta.services.settings_service import SettingsService
from tarjeta.services.sync_service import ContactSyncService
from tarjeta.services.vcard_service import VCardService


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (--factory)."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(title="Tarjeta Digital API")

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    repository = SQLRepository()
    sync_service = ContactSyncService(repository)
    app.state.sync_service = sync_service
    app.state.contact_service = ContactService(repository, sync_service)
    app.state.vcard_service = VCardService(repository)
    app.state.settings_service = SettingsService(repository)

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(cards_router.router)
    app.include_router(contacts_router.router)
    app.include_router(ghl_router.router)
    return app
