from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.engine.refresher import ExpiryRefresher, RefreshOutcome
from src.errors import ErrorCategory, ErrorSeverity, get_error_handler_lazy
from src.utils.exceptions import FeedError, FeedStructureError

router = APIRouter()


def _refresher(request: Request) -> ExpiryRefresher:
    return request.app.state.refresher


@router.get("/api/expiries")
def expiries(request: Request) -> dict[str, Any]:
    """Current next-expiry rows plus fetching / error state."""
    return _refresher(request).snapshot().to_dict()


@router.post("/api/refresh")
def refresh(request: Request) -> JSONResponse:
    """Manual trigger. Coalesced into the in-flight run when one exists (202)."""
    refresher = _refresher(request)
    outcome = refresher.refresh_now()
    body = {"outcome": outcome.value, **refresher.snapshot().to_dict()}
    status = 202 if outcome is RefreshOutcome.COALESCED else 200
    return JSONResponse(body, status_code=status)


@router.get("/api/records")
def records(request: Request) -> JSONResponse:
    """Raw instrument records of the active feed (no filtering, no aggregation).

    For the spreadsheet feed missing credentials yield an empty list.
    """
    feed = _refresher(request).feed
    try:
        parsed = feed.run(strict=True)
    except FeedError as e:
        get_error_handler_lazy().handle_error(
            e,
            category=ErrorCategory.DATA_VALIDATION if isinstance(e, FeedStructureError) else ErrorCategory.NETWORK,
            severity=ErrorSeverity.LOW,
            component="web.routes.expiries",
            function_name="records",
            context={"feed": feed.name},
        )
        return JSONResponse({"error": str(e), "outcome": e.outcome}, status_code=502)
    return JSONResponse([r.to_dict() for r in parsed.records])
