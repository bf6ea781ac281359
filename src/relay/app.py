"""
FastAPI Application
===================
Relay application factory, error translation and server entry point.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from connectors import (
    ConnectorError,
    CRMConnector,
    GoogleWorkspaceConnector,
    HubSpotConnector,
    WorkspaceConnector,
)

from .config import RelayConfig
from .errors import ConfigurationError, RelayError, error_response
from .logging import configure_logging
from .middleware.auth import BearerAuthMiddleware, SharedSecretVerifier
from .middleware.rate_limit import (
    CounterStore,
    RateGovernor,
    RateLimitMiddleware,
    create_counter_store,
)
from .middleware.request_context import ErrorHandler, RequestContextMiddleware
from .middleware.security_headers import SecurityHeadersMiddleware
from .models import FIELD_ERROR_TYPE, ApiResponse, ErrorCode, HealthStatus
from .routes import google_router, hubspot_router


logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    config: Optional[RelayConfig] = None,
    workspace: Optional[WorkspaceConnector] = None,
    crm: Optional[CRMConnector] = None,
    counter_store: Optional[CounterStore] = None,
) -> FastAPI:
    """
    Create the relay application.

    Args:
        config: Relay configuration. Read from the environment if not provided.
        workspace: Google Workspace connector. Built from config if not provided.
        crm: CRM connector. Built from config if not provided.
        counter_store: Rate limit counter store shared by both tiers.

    Returns:
        Configured FastAPI application.
    """
    config = config or RelayConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s on port %s (%s)",
            config.title, config.port, config.environment.value,
        )
        yield
        logger.info("Shutting down %s", config.title)

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        docs_url=config.docs_url,
        redoc_url=None,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
    )

    store = counter_store or create_counter_store(config.rate_limits.redis_url)

    app.state.config = config
    app.state.started_at = time.monotonic()
    app.state.general_governor = RateGovernor(store, config.rate_limits.general)
    app.state.write_governor = RateGovernor(store, config.rate_limits.write)
    app.state.workspace = workspace or GoogleWorkspaceConnector(
        client_id=config.google.client_id,
        client_secret=config.google.client_secret,
        refresh_token=config.google.refresh_token,
        token_uri=config.google.token_uri,
    )
    app.state.crm = crm or HubSpotConnector(access_token=config.hubspot.access_token)

    error_handler = make_unhandled_exception_handler(config)

    _setup_middleware(app, config, error_handler)
    _setup_exception_handlers(app, error_handler)
    _setup_routes(app, config)

    return app


def _setup_middleware(
    app: FastAPI,
    config: RelayConfig,
    error_handler: ErrorHandler,
) -> None:
    """
    Configure middleware stack.

    Each add wraps the previous ones, so the last added runs first:
    CORS, security headers, request context, general rate tier, auth gate.
    """
    app.add_middleware(
        BearerAuthMiddleware,
        verifier=SharedSecretVerifier(config.api_key),
        protected_prefix=config.api_prefix,
    )

    app.add_middleware(
        RateLimitMiddleware,
        governor=app.state.general_governor,
        protected_prefix=config.api_prefix,
        trust_proxy=config.rate_limits.trust_proxy,
    )

    app.add_middleware(
        RequestContextMiddleware,
        trust_proxy=config.rate_limits.trust_proxy,
        error_handler=error_handler,
    )

    app.add_middleware(
        SecurityHeadersMiddleware,
        enable_hsts=config.environment.is_production_like,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=config.cors.allow_methods,
        allow_headers=config.cors.allow_headers,
        max_age=config.cors.max_age,
    )


def format_validation_errors(errors: Iterable[dict[str, Any]]) -> str:
    """
    Join validation complaints into one message.

    Complaints that already name their field are kept verbatim; the rest are
    prefixed with the offending field.
    """
    parts = []
    for error in errors:
        error_type = error.get("type")
        if error_type == FIELD_ERROR_TYPE:
            parts.append(error["msg"])
            continue
        if error_type == "json_invalid":
            parts.append("Request body is not valid JSON")
            continue

        field = ".".join(
            str(loc) for loc in error.get("loc", ())
            if loc not in ("body", "query", "path")
        )
        if not field and error_type == "missing":
            parts.append("Request body is required")
        elif field:
            parts.append(f"{field}: {error['msg']}")
        else:
            parts.append(error["msg"])

    return ", ".join(parts)


def _status_to_error_code(status_code: int) -> ErrorCode:
    """Convert HTTP status code to error code."""
    mapping = {
        400: ErrorCode.VALIDATION_ERROR,
        401: ErrorCode.UNAUTHORIZED,
        404: ErrorCode.NOT_FOUND,
        405: ErrorCode.METHOD_NOT_ALLOWED,
        422: ErrorCode.VALIDATION_ERROR,
        429: ErrorCode.RATE_LIMIT_EXCEEDED,
    }
    return mapping.get(status_code, ErrorCode.INTERNAL_SERVER_ERROR)


def make_unhandled_exception_handler(config: RelayConfig) -> ErrorHandler:
    """Terminal handler: log the failure, hide details in production."""

    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "-")

        logger.exception(
            "Unhandled exception in request %s %s (%s): %s",
            request.method, request.url.path, request_id, exc,
            exc_info=exc,
        )

        message = str(exc) if config.expose_error_details else GENERIC_ERROR_MESSAGE

        return error_response(
            ErrorCode.INTERNAL_SERVER_ERROR,
            message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return unhandled_exception_handler


def _setup_exception_handlers(app: FastAPI, error_handler: ErrorHandler) -> None:
    """Configure global exception handlers."""

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        return error_response(exc.code, exc.message, exc.status_code, headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Handle routing misses and other HTTP exceptions."""
        return error_response(
            _status_to_error_code(exc.status_code),
            str(exc.detail),
            exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        return error_response(
            ErrorCode.VALIDATION_ERROR,
            format_validation_errors(exc.errors()),
            status.HTTP_400_BAD_REQUEST,
        )

    app.add_exception_handler(ConnectorError, error_handler)
    app.add_exception_handler(Exception, error_handler)


def _setup_routes(app: FastAPI, config: RelayConfig) -> None:
    """Configure health, static files and relayed API routes."""

    @app.get(
        "/health",
        response_model=ApiResponse[HealthStatus],
        response_model_exclude_none=True,
        tags=["Health"],
    )
    async def health_check() -> ApiResponse[HealthStatus]:
        """Liveness probe. Does not contact upstream services."""
        return ApiResponse.ok(
            HealthStatus(
                status="healthy",
                timestamp=datetime.now(timezone.utc),
                version=config.version,
                uptime=round(time.monotonic() - app.state.started_at, 3),
            ),
            "Workspace relay is running",
        )

    public_dir = Path(config.public_dir)
    if public_dir.is_dir():
        app.mount(config.public_url, StaticFiles(directory=public_dir), name="public")
    else:
        logger.info("Static directory %s not found; %s is not served", public_dir, config.public_url)

    app.include_router(google_router, prefix=config.api_prefix)
    app.include_router(hubspot_router, prefix=config.api_prefix)


# =============================================================================
# CLI Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point for running the relay."""
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Workspace Relay")
    parser.add_argument("--host", default=None, help="Host to bind to (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (overrides PORT)")
    args = parser.parse_args()

    try:
        config = RelayConfig.from_env()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical("Invalid configuration: %s", e)
        raise SystemExit(1) from e

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    configure_logging(config.logging)

    try:
        config.validate_credentials()
    except ConfigurationError as e:
        logger.critical("%s", e)
        raise SystemExit(1) from e

    app = create_app(config)

    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
