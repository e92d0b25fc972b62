# attendance_api/main.py
"""
FastAPI application entry point.
Includes session + security middleware, the error envelope handlers, and all routers.
"""

import os
import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from attendance_api.config import Settings, settings as default_settings
from attendance_api.database import CouchConnector
from attendance_api.exceptions import AppError
from attendance_api.routers import auth, dashboard, event_types, events, health, qr, users
from attendance_api.services.session_bridge import SessionBridge
from attendance_api.services.session_store import InMemorySessionRepository, SessionRepository
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; img-src 'self' data:; script-src 'self'; "
                               "style-src 'self' 'unsafe-inline'; connect-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def create_app(settings: Settings = None, sessions: SessionRepository = None, transport=None) -> FastAPI:
    """
    Build the application. Tests pass their own settings, session repository
    and an httpx transport standing in for CouchDB.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="LAN Attendance API",
        description="QR attendance events backed by CouchDB sessions.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.sessions = sessions if sessions is not None else InMemorySessionRepository()
    app.state.couch = CouchConnector(settings.COUCH_URL, settings.COUCH_TIMEOUT_SECONDS, transport)
    app.state.bridge = SessionBridge(app.state.couch, app.state.sessions, settings.SESSION_TTL_SECONDS)

    # ── Session cookie (holds only the repository key) ────────────────────
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE,
        max_age=settings.SESSION_TTL_SECONDS,
        same_site="lax",
        https_only=False,
    )

    # ── Request Timing + Security Headers ─────────────────────────────────
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        duration = round((time.time() - start) * 1000, 2)
        logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
        return response

    # ── Error envelope ────────────────────────────────────────────────────
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path}: {exc.message} {exc.extra or ''}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "message": "invalid_request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "message": "internal_error"},
        )

    # ── Routers ───────────────────────────────────────────────────────────
    app.include_router(auth.router,        tags=["🔑 Session"])
    app.include_router(events.router,      prefix="/api", tags=["📋 Events"])
    app.include_router(event_types.router, prefix="/api", tags=["🏷️  Event Types"])
    app.include_router(users.router,       prefix="/api", tags=["👥 Users"])
    app.include_router(dashboard.router,   prefix="/api", tags=["📊 Dashboard"])
    app.include_router(qr.router,          prefix="/api", tags=["🔳 QR Badges"])
    app.include_router(health.router,      prefix="/api", tags=["💚 Health"])

    # ── Startup / Shutdown ────────────────────────────────────────────────
    @app.on_event("startup")
    async def startup():
        logger.info("🚀 Attendance API starting up...")
        logger.info(f"🗄️  CouchDB: {settings.COUCH_URL} / db={settings.PRIMARY_DB}")
        if not settings.HAS_ADMIN_CREDENTIAL:
            logger.warning("⚠️  No COUCH_ADMIN_USER/COUCH_ADMIN_PASS — user admin and user counts disabled")
        logger.info("📖 API docs at /docs")

    @app.on_event("shutdown")
    async def shutdown():
        logger.info("🛑 Attendance API shutting down...")
        await app.state.couch.close()

    return app


app = create_app()


def run_server():
    """Console entry point: serves HTTPS when enabled and key/cert exist, HTTP otherwise."""
    import uvicorn

    s = default_settings
    tls = s.HTTPS_ENABLED and s.TLS_KEY and s.TLS_CERT and os.path.exists(s.TLS_KEY) and os.path.exists(s.TLS_CERT)
    if s.HTTPS_ENABLED and not tls:
        logger.warning("HTTPS enabled but TLS_KEY/TLS_CERT missing — serving HTTP only.")

    if tls:
        logger.info(f"🌐 Listening on https://{s.HOST}:{s.HTTPS_PORT}")
        uvicorn.run(app, host=s.HOST, port=s.HTTPS_PORT, ssl_keyfile=s.TLS_KEY, ssl_certfile=s.TLS_CERT)
    else:
        logger.info(f"🌐 Listening on http://{s.HOST}:{s.PORT}")
        uvicorn.run(app, host=s.HOST, port=s.PORT)


if __name__ == "__main__":
    run_server()
