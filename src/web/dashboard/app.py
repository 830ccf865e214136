from __future__ import annotations
# ruff: noqa: I001

import logging
import logging.handlers
import os
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse

from src.config.feed_settings import FeedSettings
from src.engine.refresher import ExpiryRefresher
from src.error_handling import ErrorCategory, ErrorSeverity, get_error_handler
from src.feeds.registry import build_feed
from src.metrics.feed_metrics import FeedMetrics, get_feed_metrics
from src.utils.logging_utils import JsonFormatter
from src.version import get_version
from .core.config import AUTOSTART_REFRESHER, CORS_ALL as _CORS_ALL, CORS_ORIGINS as _CORS_ORIGINS, LOG_DIR as _LOG_DIR
from .routes.expiries import router as expiries_router
from .routes.system import router as system_router


# --------------------------- Structured Access Log (JSON) ---------------------------
_logger = logging.getLogger("expiry_board.webapi")
if not _logger.handlers and _LOG_DIR:
    try:
        os.makedirs(_LOG_DIR, exist_ok=True)
        _h = logging.handlers.RotatingFileHandler(
            os.path.join(_LOG_DIR, "webapi.json.log"), maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        _h.setFormatter(JsonFormatter())
        _logger.addHandler(_h)
    except OSError as e:
        _logger.warning("JSON access log disabled (%s): %s", _LOG_DIR, e)


def build_refresher(settings: FeedSettings, metrics: FeedMetrics | None = None) -> ExpiryRefresher:
    return ExpiryRefresher(
        build_feed(settings),
        settings.symbols,
        interval=float(settings.refresh_interval),
        retain_on_error=settings.retain_on_error,
        metrics=metrics if metrics is not None else get_feed_metrics(),
    )


def create_app(
    settings: FeedSettings | None = None,
    refresher: ExpiryRefresher | None = None,
    *,
    autostart: bool = AUTOSTART_REFRESHER,
    metrics_registry=None,
) -> FastAPI:
    settings = settings or FeedSettings.from_env()
    refresher = refresher or build_refresher(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        if autostart:
            refresher.start()
        yield
        # Shutdown: stop the timer before the result sink goes away
        refresher.stop()

    app = FastAPI(title="Expiry Board", version=get_version(), lifespan=lifespan,
                  default_response_class=ORJSONResponse)
    app.state.settings = settings
    app.state.refresher = refresher
    app.state.metrics_registry = metrics_registry

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    if _CORS_ALL in ("1", "true", "True"):
        # Development fallback: allow any origin (no credentials)
        origins = ["*"]
    else:
        origins = _CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=300,
    )

    app.include_router(expiries_router)
    app.include_router(system_router)
    _install_middleware(app)
    _install_exception_handlers(app)
    return app


# --------------------------- Correlation ID & Access Log Middleware ---------------------------
def _install_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def _access_log_middleware(request: Request, call_next):
        cid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.correlation_id = cid
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = getattr(response, "status_code", 200)
        except Exception:
            _logger.exception(
                "request_error",
                extra={"cid": cid, "path": str(request.url.path), "method": request.method},
            )
            raise
        finally:
            dur_ms = (time.perf_counter() - start) * 1000.0
            _logger.info(
                "access",
                extra={
                    "cid": cid,
                    "path": str(request.url.path),
                    "method": request.method,
                    "status": status,
                    "dur_ms": round(dur_ms, 2),
                },
            )
        response.headers["X-Request-ID"] = cid
        return response


# --------------------------- Global Exception Handlers ---------------------------
def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        # Only route 5xx to central handler to avoid noise for expected 4xx
        if exc.status_code >= 500:
            get_error_handler().handle_error(
                exc,
                category=ErrorCategory.RESOURCE,
                severity=ErrorSeverity.MEDIUM,
                component="web.dashboard.app",
                function_name=str(request.url.path),
                message=f"HTTPException {exc.status_code}",
                should_log=False,
            )
        return JSONResponse({"error": str(exc.detail), "status_code": exc.status_code}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        get_error_handler().handle_error(
            exc,
            category=ErrorCategory.DATA_VALIDATION,
            severity=ErrorSeverity.LOW,
            component="web.dashboard.app",
            function_name=str(request.url.path),
            message="Request validation failed",
            should_log=False,
        )
        return JSONResponse({"error": "validation_failed", "detail": exc.errors()}, status_code=422)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        get_error_handler().handle_error(
            exc,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.HIGH,
            component="web.dashboard.app",
            function_name=str(request.url.path),
            message="Unhandled server error",
        )
        return JSONResponse({"error": "internal_error"}, status_code=500)


app = create_app()
