"""
Snippetbox — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       Stores, session manager, template cache and settings are attached
       to `app.state`; nothing request-facing is a module-level singleton.
Who:   uvicorn (`snippetbox.main:app`, or `snippetbox` / run() below) and
       the test suite, which passes in-memory stores.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain (outer → inner):                       │
    │  Recover → Access log → Security headers                 │
    │          → Session → CSRF → Authenticate                 │
    │                                                          │
    │  Routes:                                                 │
    │  /  /about  /snippet/*  /user/*  /account/*  /ping       │
    │  /static/* (StaticFiles)                                 │
    │                                                          │
    │  Exception Handlers:                                     │
    │  NotFound→404 │ BadRequest→400 │ AuthRequired→303        │
    │  Database/Configuration→500                              │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create tables when running on SQLite (PostgreSQL uses Alembic)
    3. Start the expired-session purge task

    Shutdown:
    1. Cancel the purge task
    2. Dispose database engine (close all connections)
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippetbox import __version__
from snippetbox.config import Settings
from snippetbox.config import settings as default_settings
from snippetbox.database import (
    build_engine,
    build_session_factory,
    create_schema,
    dispose_engine,
)
from snippetbox.exceptions import (
    AuthenticationRequiredError,
    BadRequestError,
    ConfigurationError,
    DatabaseError,
    NotFoundError,
)
from snippetbox.middleware.authenticate import AuthenticateMiddleware
from snippetbox.middleware.csrf import CSRFMiddleware
from snippetbox.middleware.logging import RequestLoggingMiddleware
from snippetbox.middleware.recovery import RecoverPanicMiddleware
from snippetbox.middleware.security_headers import SecurityHeadersMiddleware
from snippetbox.middleware.session import SessionMiddleware
from snippetbox.render import new_template_cache
from snippetbox.routes import account, health, pages
from snippetbox.routes import snippets as snippet_routes
from snippetbox.routes import users as user_routes
from snippetbox.services.base import SnippetStore, UserStore
from snippetbox.services.session_store import (
    SessionManager,
    SessionStore,
    SqlSessionStore,
    purge_expired_sessions,
)
from snippetbox.services.snippet_service import SqlSnippetStore
from snippetbox.services.user_service import SqlUserStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # snippetbox.access replaces uvicorn's own access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("Snippetbox %s starting up...", __version__)

    engine = app.state.engine
    if engine is not None and settings.uses_sqlite:
        await create_schema(engine)
        logger.info("SQLite schema ensured")

    cleanup = asyncio.create_task(
        purge_expired_sessions(
            app.state.sessions.store, settings.session_cleanup_interval_seconds
        )
    )

    logger.info("Serving on %s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Snippetbox shutting down...")
    cleanup.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup
    if engine is not None:
        await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to plain-text responses.

    Handler hierarchy:
        NotFoundError               → 404 Not Found
        BadRequestError             → 400 Bad Request
        AuthenticationRequiredError → 303 See Other → /user/login
        DatabaseError               → 500 Internal Server Error
        ConfigurationError          → 500 Internal Server Error
        Starlette HTTPException     → its own status (unknown path, 405)

    Anything else propagates to RecoverPanicMiddleware.

    Security: responses never include exception messages or context; those
    go to the server log only.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse("Not Found", status_code=404)

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError):
        logger.warning(
            "Bad request: %s %s | Context: %s", request.method, request.url.path, exc.context
        )
        return PlainTextResponse("Bad Request", status_code=400)

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(
        request: Request, exc: AuthenticationRequiredError
    ):
        return RedirectResponse("/user/login", status_code=303)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "Database error: %s | method=%s uri=%s | Context: %s",
            exc.message,
            request.method,
            request.url.path,
            exc.context,
            exc_info=exc,
        )
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error(
            "Configuration error: %s | method=%s uri=%s",
            exc.message,
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail), status_code=exc.status_code, headers=exc.headers
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    *,
    snippets: Optional[SnippetStore] = None,
    users: Optional[UserStore] = None,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Any store not passed in is built on a database engine created from
    `settings.database_url`; tests pass in-memory stores for all three and
    no engine is created.
    """
    settings = settings or default_settings

    engine = None
    if snippets is None or users is None or session_store is None:
        engine = build_engine(settings)
        session_factory = build_session_factory(engine)
        if snippets is None:
            snippets = SqlSnippetStore(session_factory)
        if users is None:
            users = SqlUserStore(session_factory, cost=settings.bcrypt_cost)
        if session_store is None:
            session_store = SqlSessionStore(session_factory)

    session_manager = SessionManager(
        session_store,
        lifetime=timedelta(hours=settings.session_lifetime_hours),
    )

    app = FastAPI(
        title="Snippetbox",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.snippets = snippets
    app.state.users = users
    app.state.sessions = session_manager
    app.state.templates = new_template_cache(settings.template_dir)

    # ── Register Middleware ───────────────────────────────────────────────
    # Starlette executes middleware in REVERSE order of addition, so the
    # innermost (Authenticate) is added first and Recover last.
    app.add_middleware(AuthenticateMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        SessionMiddleware,
        manager=session_manager,
        cookie_name=settings.session_cookie_name,
        secure=settings.session_cookie_secure,
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        content_security_policy=settings.content_security_policy,
        server_header=settings.server_header,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RecoverPanicMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")
    app.include_router(pages.router)
    app.include_router(snippet_routes.router)
    app.include_router(snippet_routes.protected)
    app.include_router(user_routes.router)
    app.include_router(account.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Serve the app with uvicorn, over TLS when a certificate is configured."""
    settings = default_settings
    setup_logging(settings.log_level)
    uvicorn.run(
        "snippetbox.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        ssl_certfile=settings.tls_cert_file,
        ssl_keyfile=settings.tls_key_file,
        server_header=False,
        access_log=False,
        log_config=None,
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `snippetbox.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    run()
