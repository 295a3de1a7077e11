"""FastAPI application factory and lifespan management."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from cms.config import Settings
from cms.content.store import ContentStore
from cms.errors import BadRequest, ContentError
from cms.middleware.auth import AuthGate, BearerAuthMiddleware, load_token_file
from cms.middleware.cors import configure_cors
from cms.middleware.logging import RequestLoggingMiddleware
from cms.routes import directories, health, pages, search, uploads
from cms.search.engine import SearchEngine

logger = structlog.get_logger()

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log application startup and shutdown.

    All components are built by create_app, so nothing is started here.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info(
        "api_startup",
        host=settings.host,
        port=settings.port,
        storage=str(app.state.store.root),
        tokens=len(app.state.auth_gate),
    )
    try:
        yield
    finally:
        logger.info("api_shutdown")


def prepare_storage(storage_path: Path) -> Path:
    """Make the storage root absolute and create it if missing.

    Only the last path component is created; a missing parent is an error.

    Args:
        storage_path: Configured storage directory.

    Returns:
        Absolute, normalized storage root.
    """
    root = Path(os.path.abspath(storage_path))
    root.mkdir(exist_ok=True)
    return root


def load_auth_gate(settings: Settings) -> AuthGate:
    """Build the token gate from the configured token file.

    Args:
        settings: Configuration instance.

    Returns:
        Gate holding every token from the file, or none if no file is set.
    """
    if settings.auth_tokens_file is None:
        logger.warning("no_auth_tokens_configured")
        return AuthGate(frozenset())

    tokens = load_token_file(settings.auth_tokens_file)
    logger.info(
        "auth_tokens_loaded",
        path=str(settings.auth_tokens_file),
        count=len(tokens),
    )
    return AuthGate(tokens)


async def content_error_handler(
    request: Request, exc: ContentError
) -> PlainTextResponse:
    """Render a domain error as a plain-text response with its status."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "content_error",
        kind=exc.kind.value,
        status=exc.status_code,
        path=exc.path,
        error=exc.message,
        cause=str(exc.__cause__) if exc.__cause__ else None,
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    """Render request validation failures as BadRequest."""
    error = BadRequest("Invalid request parameters or body")
    logger.warning(
        "content_error",
        kind=error.kind.value,
        status=error.status_code,
        path=request.url.path,
        errors=[e.get("msg") for e in exc.errors()],
    )
    return PlainTextResponse(error.message, status_code=error.status_code)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Storage root and token set are resolved once here and handed to the
    components; nothing is read from module state afterwards.

    Args:
        settings: Configuration instance. Creates default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    root = prepare_storage(settings.storage_path)
    auth_gate = load_auth_gate(settings)

    app = FastAPI(
        title="Docs CMS",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=f"{API_PREFIX}/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url=f"{API_PREFIX}/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.auth_gate = auth_gate
    app.state.store = ContentStore(root)
    app.state.search_engine = SearchEngine(root, settings.page_extensions)

    app.add_exception_handler(ContentError, content_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

    app.add_middleware(BearerAuthMiddleware, gate=auth_gate, prefix=API_PREFIX)
    app.add_middleware(RequestLoggingMiddleware, api_prefix=API_PREFIX)
    configure_cors(app, settings.cors_origins)

    app.include_router(health.router, prefix=API_PREFIX)
    app.include_router(pages.router, prefix=API_PREFIX)
    app.include_router(directories.router, prefix=API_PREFIX)
    app.include_router(uploads.router, prefix=API_PREFIX)
    app.include_router(search.router, prefix=API_PREFIX)

    static_dir = settings.static_dir
    if static_dir is not None and static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.debug("static_site_mounted", path=str(static_dir))

    return app
