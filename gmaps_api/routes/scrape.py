"""
Scrape route: runs a live Google Maps scrape and stores the results.
"""
import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from gmaps_scraper.core import run_scrape

from ..config import config
from ..database import save_places
from ..models import ErrorOut, PlaceOut, ScrapeResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["scrape"])


def resolve_limit(raw: Optional[str]) -> int:
    """Missing, non-numeric or zero means the default; anything else is clamped."""
    try:
        n = int(raw) if raw is not None else 0
    except ValueError:
        n = 0
    if n == 0:
        return config.DEFAULT_LIMIT
    return max(1, min(config.MAX_LIMIT, n))


@router.get(
    "/scrape",
    response_model=ScrapeResponse,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def scrape(query: Optional[str] = None, limit: Optional[str] = None):
    """Scrape up to `limit` places for `query`, upsert them and return them."""
    if not query or not query.strip():
        return JSONResponse(
            status_code=400,
            content={"error": "query param required, e.g. ?query=coffee+shop+London"},
        )

    effective_limit = resolve_limit(limit)
    logger.info(f"Scrape requested: query='{query}', limit={effective_limit}")
    try:
        records = await run_scrape(
            query,
            effective_limit,
            headless=config.HEADLESS,
            user_agent=config.USER_AGENT,
        )
        new_places, updated_places = save_places(records)
        logger.info(f"Stored {len(records)} places ({new_places} new, {updated_places} updated)")
    except Exception as e:
        logger.error(f"Scrape failed for '{query}': {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "scrape-failed"})

    return ScrapeResponse(
        query=query,
        count=len(records),
        results=[PlaceOut(**r.to_dict()) for r in records],
    )
