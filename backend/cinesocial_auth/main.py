"""FastAPI application entry point.

REST API for passwordless sign-in with consistent error handling.

This module creates and configures the FastAPI application, including:
- Lifespan-managed database engine (created at startup, disposed at shutdown)
- Exception handlers for API errors
- Auth router mounting and avatar static files
- Health check endpoint
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cinesocial_auth.api.router import router as api_router
from cinesocial_auth.core.config import settings
from cinesocial_auth.core.database import (
    create_engine,
    create_schema,
    create_session_factory,
)
from cinesocial_auth.core.errors import APIError, InternalError
from cinesocial_auth.core.logging import configure_logging
from cinesocial_auth.core.responses import ErrorDetail, ErrorResponse
from cinesocial_auth.core.storage import AvatarStorage

logger = structlog.get_logger()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses.

    Headers added:
    - X-Frame-Options: Prevents clickjacking attacks
    - X-Content-Type-Options: Prevents MIME sniffing (avatars included)
    - Referrer-Policy: Controls referrer information leakage
    - Cache-Control: Prevents caching of auth responses (tokens, codes)
    - Strict-Transport-Security: Forces HTTPS (production only)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Session tokens must never land in a shared cache
        if request.url.path.startswith("/auth/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        # HSTS only in production (assumes HTTPS via reverse proxy)
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors.

    Args:
        request: The incoming request.
        exc: The APIError that was raised.

    Returns:
        JSONResponse with error envelope and appropriate status code.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors from FastAPI.

    Converts FastAPI's 422 validation errors to a 400 in our standard format.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with generic error message (500).
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    error = InternalError()
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=error.code, message=error.message)
        ).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the database engine for the lifetime of the process."""
    configure_logging()
    engine = create_engine(
        settings.database_url, echo=settings.environment == "development"
    )
    await create_schema(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.avatar_storage.ensure_root()
    logger.info("Startup complete", database=engine.url.render_as_string())

    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    The database engine is not created here; the lifespan owns it.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="CineSocial Auth API",
        version="1.0.0",
        description="Passwordless email-code authentication",
        lifespan=lifespan,
    )

    # Middleware order: Starlette uses LIFO, so the LAST added runs FIRST.
    # CORS must run first to handle preflight requests, so add it last.
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
    )

    # Register exception handlers
    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(api_router)

    # Avatars: written by AvatarStorage, served read-only from the same dir
    avatar_storage = AvatarStorage(
        Path(settings.avatar_storage_dir).resolve(), settings.avatar_url_prefix
    )
    app.state.avatar_storage = avatar_storage
    app.mount(
        settings.avatar_url_prefix,
        StaticFiles(directory=avatar_storage.root, check_dir=False),
        name="avatars",
    )

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Create the application instance
# Used by uvicorn: uvicorn cinesocial_auth.main:app
app = create_app()
