"""InternHub API — FastAPI application factory."""


import logging
import secrets
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from internhub.core.config import Settings
from internhub.core.exceptions import register_exception_handlers
from internhub.db.base import build_engine, build_session_factory
from internhub.middleware.session import AdminSessionMiddleware
from internhub.schemas.common import HealthResponse

# v1 routers
from internhub.routers.v1.audit_logs import router as audit_logs_v1_router
from internhub.routers.v1.auth import router as auth_v1_router
from internhub.routers.v1.candidates import router as candidates_v1_router
from internhub.routers.v1.dashboard import router as dashboard_v1_router
from internhub.routers.v1.domain_preferences import router as domain_preferences_v1_router
from internhub.routers.v1.interns import router as interns_v1_router
from internhub.routers.v1.offers import router as offers_v1_router
from internhub.routers.v1.respond import router as respond_v1_router
from internhub.routers.v1.sync import router as sync_v1_router

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _session_secret(settings: Settings) -> str:
    """Signing key for the admin cookie; required outside development and test."""
    if settings.session_secret:
        return settings.session_secret
    if settings.app_env not in ("development", "test"):
        raise RuntimeError(f"ADMIN_SESSION_SECRET must be set when APP_ENV is {settings.app_env!r}")
    logger.warning("ADMIN_SESSION_SECRET is not set; using a per-process key")
    return secrets.token_urlsafe(32)


def create_app(
    settings: Settings | None = None,
    *,
    mail_transport: httpx.AsyncBaseTransport | None = None,
    sheets_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app. Tests pass their own settings and stub HTTP transports."""
    settings = settings or Settings()
    _configure_logging(settings)
    session_secret = _session_secret(settings)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.mail_transport = mail_transport
    app.state.sheets_transport = sheets_transport

    if settings.admin_password is None:
        logger.warning("ADMIN_PASSWORD is not set; admin login is disabled")

    # --- Admin gate (runs inside the session middleware) ---
    app.add_middleware(AdminSessionMiddleware)

    # --- Signed cookie session ---
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.session_cookie_secure,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(auth_v1_router, prefix="/api/v1")
    app.include_router(respond_v1_router, prefix="/api/v1")
    app.include_router(offers_v1_router, prefix="/api/v1")
    app.include_router(candidates_v1_router, prefix="/api/v1")
    app.include_router(domain_preferences_v1_router, prefix="/api/v1")
    app.include_router(interns_v1_router, prefix="/api/v1")
    app.include_router(audit_logs_v1_router, prefix="/api/v1")
    app.include_router(dashboard_v1_router, prefix="/api/v1")
    app.include_router(sync_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"], include_in_schema=False)
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
