from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.config.env_config import is_metrics_enabled
from src.error_handling import get_error_handler
from src.version import get_version

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    refresher = getattr(request.app.state, "refresher", None)
    snap = refresher.snapshot() if refresher else None
    if snap is None or snap.last_refresh is None:
        status = "error" if (snap and snap.last_error) else "empty"
    else:
        status = "error" if snap.last_error else "ok"
    return {
        "status": status,
        "running": bool(refresher and refresher.running),
        "last_refresh": snap.last_refresh if snap else None,
        "last_error": snap.last_error if snap else None,
    }


@router.get("/healthz")
async def healthz(request: Request) -> Response:
    """Ultra-light probe: 204 once a result has been published, else 503."""
    refresher = getattr(request.app.state, "refresher", None)
    snap = refresher.snapshot() if refresher else None
    if snap is None or snap.last_refresh is None:
        return Response(status_code=503)
    return Response(status_code=204)


@router.get("/api/info")
async def api_info(request: Request) -> JSONResponse:
    """Basic runtime info and the active feed configuration (no secrets)."""
    settings = getattr(request.app.state, "settings", None)
    return JSONResponse({
        "version": get_version(),
        "settings": settings.as_dict() if settings else None,
    })


@router.get("/api/errors")
async def api_errors(limit: int = Query(20, ge=1, le=500)) -> JSONResponse:
    """Handled-error counters plus the most recent entries (newest last)."""
    handler = get_error_handler()
    return JSONResponse({
        "summary": handler.get_error_summary(),
        "recent": [e.to_dict() for e in handler.get_recent_errors(limit)],
    })


@router.get("/api/version")
async def api_version() -> JSONResponse:
    return JSONResponse({"version": get_version()})


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    if not is_metrics_enabled():
        return Response(status_code=404)
    registry = getattr(request.app.state, "metrics_registry", None)
    data = generate_latest(registry) if registry is not None else generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
