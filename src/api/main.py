"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the Ledgerly API application.
It handles:
- Application lifecycle management (startup/shutdown)
- Construction of the security services kept on ``app.state``
- Middleware registration in the correct order
- Exception handler registration
- Health check and monitoring endpoints
- OpenTelemetry instrumentation

Middleware are executed in reverse order of registration, so the last one
added is the first to see a request.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from src.api.dependencies import AppSettings, AuthGate
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routes import api_router
from src.api.utils.responses import ORJSONResponse, success_response
from src.core.config import Settings, get_settings
from src.core.logging import handle_loop_exception, setup_logging
from src.core.observability import instrument_app, instrument_engine, setup_tracing
from src.core.security import PasswordHasher, TokenService
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_engine,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)

    is_healthy, error_msg = await check_database_connection()

    if is_healthy:
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    instrument_engine(get_engine(), app_instance.state.settings)

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await close_database()
    logger.info("Application shutdown complete")


def create_limiter(settings: Settings) -> Limiter:
    """Per-client-address rate limiter applied to every route by default."""
    config = settings.rate_limit_config
    return Limiter(
        key_func=get_remote_address,
        default_limits=[config.default_limit],
        storage_uri=config.storage_uri,
        enabled=config.enabled,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    auth = settings.auth_config
    tokens = TokenService(
        secret=cast("str", auth.jwt_secret),
        expire_seconds=auth.token_expire_seconds,
        algorithm=auth.jwt_algorithm,
    )
    limiter = create_limiter(settings)

    application.state.settings = settings
    application.state.token_service = tokens
    application.state.password_hasher = PasswordHasher(rounds=auth.bcrypt_rounds)
    application.state.auth_gate = AuthGate(tokens, cookie_name=auth.cookie_name)
    application.state.limiter = limiter

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 5. Rate limiting (innermost, so rejections are logged and carry IDs)
    application.add_middleware(SlowAPIMiddleware)

    # 4. Request logging middleware (logs requests/responses)
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.environment == "production",
    )

    # 3. Request context middleware (creates correlation and request IDs)
    application.add_middleware(RequestContextMiddleware)

    # 2. Security headers middleware (adds security headers to all responses)
    application.add_middleware(SecurityHeadersMiddleware)

    # 1. CORS (answers preflight requests before anything else runs)
    origins = (
        ["*"]
        if settings.is_development or settings.cors_config.allowed_origin is None
        else [settings.cors_config.allowed_origin]
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=settings.cors_config.allowed_methods,
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Correlation-ID"],
    )

    application.include_router(api_router)

    async def root() -> Response:
        """Root endpoint returning a welcome message."""
        return success_response({"message": f"Hello from {settings.app_name}!"})

    async def health() -> Response:
        """Health check endpoint for monitoring and container orchestration.

        Reports ``degraded`` rather than failing when the database is
        unreachable.
        """
        health_status: dict[str, object] = {"status": "healthy", "database": False}

        is_healthy, error_msg = await check_database_connection()
        health_status["database"] = is_healthy

        if is_healthy and not settings.database_config.is_sqlite:
            pool = get_engine().pool
            logger.bind(
                metric_type="db.pool.health",
                checked_out=cast("Any", pool).checkedout(),
                size=cast("Any", pool).size(),
                overflow=cast("Any", pool).overflow(),
            ).info("Database pool health check")

        if not is_healthy:
            logger.warning("Database health check failed: {}", error_msg)
            health_status["status"] = "degraded"

        return success_response(health_status)

    async def info(request: Request, app_settings: AppSettings) -> Response:
        """Get application information."""
        return success_response(
            {
                "app_name": app_settings.app_name,
                "version": app_settings.app_version,
                "environment": app_settings.environment,
                "debug": app_settings.debug,
                "docs_url": app_settings.docs_url,
                "client": get_remote_address(request),
            }
        )

    # System routes stay reachable when a client is rate limited
    for path, endpoint in (("/", root), ("/health", health), ("/info", info)):
        limiter.exempt(endpoint)
        application.add_api_route(path, endpoint, methods=["GET"], tags=["system"])

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
