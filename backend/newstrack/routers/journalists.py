"""Journalist extraction and store API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request

from ..db.cache import clear_cached_results
from ..db.journalist_store import (
    clear_all,
    delete_outlet,
    get_journalists,
    get_stats,
    list_outlets,
)
from ..models.schemas import (
    DatabaseStats,
    ErrorResponse,
    JournalistRecord,
    LocateResponse,
    OutletResult,
    OutletSummary,
    ScrapeRequest,
)
from ..services.browser import BrowserPool
from ..services.errors import (
    EmptyResult,
    InputError,
    NewsTrackError,
    PersistenceUnavailable,
    UpstreamUnreachable,
)
from ..services.locator import locate
from ..services.pipeline import scrape


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["journalists"])

ERROR_STATUS = (
    (InputError, 400),
    (EmptyResult, 404),
    (UpstreamUnreachable, 502),
    (PersistenceUnavailable, 503),
)


def http_error(error: NewsTrackError) -> HTTPException:
    """Translate a pipeline error into an HTTP error with a suggestion."""
    status = 500
    for error_type, code in ERROR_STATUS:
        if isinstance(error, error_type):
            status = code
            break
    return HTTPException(
        status_code=status,
        detail=ErrorResponse(error=str(error), suggestion=error.suggestion).model_dump(),
    )


def _browser_pool(request: Request) -> Optional[BrowserPool]:
    return getattr(request.app.state, "browser_pool", None)


@router.get("/health")
async def health(request: Request):
    """Liveness check."""
    pool = _browser_pool(request)
    return {
        "status": "OK",
        "message": "NewsTrack API is running",
        "rendering": bool(pool and pool.started),
    }


@router.post("/scrape", response_model=OutletResult)
async def scrape_outlet(body: ScrapeRequest, request: Request, refresh: bool = False):
    """Extract journalists from a website URL or outlet name.

    Fresh cached results are served unless refresh=true.
    """
    target = body.url or body.outlet
    try:
        return await scrape(target, pool=_browser_pool(request), refresh=refresh)
    except NewsTrackError as e:
        logger.info("Scrape of %r failed: %s", target, e)
        raise http_error(e)


@router.get("/locate", response_model=LocateResponse)
async def locate_outlet(outlet: str):
    """Detect an outlet's official website without scraping it."""
    outlet = outlet.strip()
    if not outlet:
        raise http_error(InputError("Outlet name is required"))
    website = await locate(outlet)
    if not website:
        raise http_error(
            UpstreamUnreachable(
                f"Could not find an official website for '{outlet}'",
                suggestion="Enter the outlet's website URL directly.",
            )
        )
    return LocateResponse(outlet=outlet, website=website)


@router.get("/journalists/{outlet}", response_model=List[JournalistRecord])
async def stored_journalists(outlet: str):
    """Journalists stored for an outlet host (e.g. thehindu.com)."""
    try:
        return get_journalists(outlet)
    except PersistenceUnavailable as e:
        raise http_error(e)


@router.get("/outlets", response_model=List[OutletSummary])
async def stored_outlets():
    """Every outlet in the store with its journalist count."""
    try:
        return list_outlets()
    except PersistenceUnavailable as e:
        raise http_error(e)


@router.delete("/outlets/{outlet}")
async def remove_outlet(outlet: str):
    """Delete an outlet's stored journalists."""
    try:
        deleted = delete_outlet(outlet)
    except PersistenceUnavailable as e:
        raise http_error(e)
    clear_cached_results()
    if not deleted:
        raise HTTPException(status_code=404, detail={"error": f"No stored journalists for {outlet}"})
    return {"outlet": outlet, "deleted": deleted}


@router.delete("/journalists")
async def remove_all_journalists():
    """Clear the whole store."""
    try:
        deleted = clear_all()
    except PersistenceUnavailable as e:
        raise http_error(e)
    clear_cached_results()
    return {"deleted": deleted}


@router.get("/stats", response_model=DatabaseStats)
async def database_stats():
    """Row counts across the store."""
    try:
        return get_stats()
    except PersistenceUnavailable as e:
        raise http_error(e)
