# demo_mailer/main.py
from __future__ import annotations

import time
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from demo_mailer.core.config import settings
from demo_mailer.core.exceptions import BaseAPIException, TransportError
from demo_mailer.core.logging import configure_structlog, get_structlog_logger
from demo_mailer.dependencies import get_smtp_config
from demo_mailer.middleware.logging import LoggingMiddleware
from demo_mailer.middleware.request_id import RequestIdMiddleware
from demo_mailer.routes import demo_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger = get_structlog_logger(__name__)

    logger.info("application.starting", environment=settings.environment)

    smtp_config = get_smtp_config()
    if smtp_config is None:
        logger.warning("smtp.config_missing")
    else:
        logger.info(
            "smtp.configured",
            host=smtp_config.host,
            port=smtp_config.port,
            secure=smtp_config.secure,
            require_tls=smtp_config.require_tls,
        )

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            integrations=[
                FastApiIntegration(),
                StarletteIntegration(),
            ],
            traces_sample_rate=1.0 if settings.is_development else 0.1,
            send_default_pii=False,
        )
        logger.info("sentry.initialized")

    logger.info("application.started")
    yield
    logger.info("application.shutdown_complete")


# Configure logging before creating app
configure_structlog()
logger = get_structlog_logger(__name__)

app = FastAPI(
    title="Demo Request Mailer",
    version="1.0.0",
    description="Relays demo-request form submissions to support and the requester by email",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
)

# The last middleware added runs first
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins(),
    allow_credentials=False,
    allow_methods=settings.methods(),
    allow_headers=settings.allowed_headers.split(","),
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(BaseAPIException)
async def api_exception_handler(request: Request, exc: BaseAPIException):
    """Render domain errors as ``{"ok": false, "message": ...}``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "api.exception",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        path=request.url.path,
        method=request.method,
        **exc.details,
    )
    if isinstance(exc, TransportError):
        sentry_sdk.capture_exception(exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle bodies that are not a JSON object."""
    errors = []
    for error in exc.errors():
        errors.append({
            "loc": list(error.get("loc", [])),
            "msg": error.get("msg", "Validation error"),
            "type": error.get("type", "value_error"),
        })

    logger.warning(
        "validation.error",
        path=request.url.path,
        method=request.method,
        errors=errors,
    )

    return JSONResponse(
        status_code=422,
        content={
            "ok": False,
            "message": "Request validation failed",
            "code": "validation_error",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    error_id = f"err_{int(time.time())}_{hash(str(exc)) % 10000:04d}"

    logger.error(
        "unhandled.exception",
        error_id=error_id,
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )

    message = f"Internal server error: {exc}" if settings.is_development else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "message": message, "code": "internal_error"},
        headers={"X-Error-ID": error_id},
    )


app.include_router(health_router)
app.include_router(demo_router, tags=["demo"])

if not settings.is_testing:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


logger.info("application.configured", environment=settings.environment)
