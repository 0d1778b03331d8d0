"""
NoteSync Backend - FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires the data store, the identity provider and the
       services onto app.state, then registers middleware, exception
       handlers and routers.
Who:   uvicorn (`uvicorn app.main:app`), the `notesync-api` script and tests.
When:  Once at server startup; tests build their own instance per test.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → CORS                │
    │                                                          │
    │  Routes:      /health  /profile  /notes  /shared  /share │
    │                                                          │
    │  app.state:   store, identity_provider, token_verifier,  │
    │               note_service, sharing_service              │
    │                                                          │
    │  Exception Handlers:                                     │
    │    NoteSyncError → its status_code  (400/401/403/404/503)│
    │    RequestValidationError → 400                          │
    │    Exception → 500                                       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  setup logging, validate configuration, log readiness
    Shutdown: close the identity provider client and the data store
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.dependencies import build_identity_provider, build_store
from app.exceptions import (
    IdentityProviderUnavailableError,
    NoteSyncError,
    StoreError,
    UnauthenticatedError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, notes, profile, sharing
from app.services.identity_base import IdentityProvider
from app.services.note_service import NoteService
from app.services.sharing_service import SharingService
from app.services.store_base import DataStore
from app.services.token_verifier import TokenVerifier

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Third-party loggers that log every operation are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check, readiness log line.
    Shutdown: release the provider's HTTP client and the store's connections.

    A configuration error is logged but does not stop the server, so the
    health endpoints keep answering and report the problem.
    """
    setup_logging()
    logger.info("NoteSync Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info(
        "Store backend: %s | ownership checks: %s",
        type(app.state.store).__name__,
        "on" if app.state.note_service.enforce_ownership else "off",
    )
    logger.info("API up on port %d", settings.port)

    yield

    logger.info("NoteSync Backend shutting down...")
    await app.state.identity_provider.close()
    await app.state.store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(exc: NoteSyncError, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "code": exc.code,
            "request_id": request_id_var.get(""),
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        UnauthenticatedError              → 401 + WWW-Authenticate: Bearer
        IdentityProviderUnavailableError  → 503 (logged at error level)
        StoreError                        → 400 with the store's message
        NoteSyncError (base)              → exc.status_code
        RequestValidationError            → 400 invalid_request
        Exception (fallback)              → 500, details only in the log
    """

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return _error_response(exc, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(IdentityProviderUnavailableError)
    async def handle_provider_unavailable(request: Request, exc: IdentityProviderUnavailableError):
        logger.error(
            "[%s] Identity provider unavailable | Context: %s",
            request_id_var.get(""), exc.context,
        )
        return _error_response(exc, headers={"Retry-After": "30"})

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.warning(
            "[%s] Store error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(exc)

    @app.exception_handler(NoteSyncError)
    async def handle_app_error(request: Request, exc: NoteSyncError):
        logger.info("[%s] %s: %s", request_id_var.get(""), exc.code, exc.message)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request",
                "code": "invalid_request",
                "request_id": request_id_var.get(""),
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in the outermost error middleware, after RequestIDMiddleware has
        # reset the ContextVar; the id is still on request.state
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred. Please try again later.",
                "code": "internal_error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    store: Optional[DataStore] = None,
    identity_provider: Optional[IdentityProvider] = None,
    enforce_ownership: Optional[bool] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store:             Data store; built from STORE_BACKEND when omitted
        identity_provider: Token → user resolver; Supabase Auth when omitted
        enforce_ownership: Overrides settings.enforce_ownership when given

    Returns:
        Fully configured FastAPI instance.
    """
    app = FastAPI(
        title="NoteSync API",
        description=(
            "Note sync backend: bearer-token authenticated profile, note and "
            "note-sharing operations over a Postgres data store."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    store = store if store is not None else build_store(settings)
    identity_provider = (
        identity_provider if identity_provider is not None
        else build_identity_provider(settings)
    )
    if enforce_ownership is None:
        enforce_ownership = settings.enforce_ownership

    app.state.store = store
    app.state.identity_provider = identity_provider
    app.state.token_verifier = TokenVerifier(identity_provider)
    app.state.note_service = NoteService(store, enforce_ownership=enforce_ownership)
    app.state.sharing_service = SharingService(store)

    # ── Middleware (last added runs first) ────────────────────────────────
    allow_origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(profile.router)
    app.include_router(notes.router)
    app.include_router(sharing.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


# uvicorn expects `app.main:app` to be importable
app = create_app()
