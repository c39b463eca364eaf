"""
API route handlers for stored places.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from gmaps_scraper.export import records_to_frame, to_csv_text

from ..config import config
from ..database import get_place_by_key, get_places, get_places_count
from ..models import PlacesResponse, StoredPlaceOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["places"])


@router.get("/places", response_model=PlacesResponse)
async def get_api_places(
    q: Optional[str] = None,
    limit: int = Query(config.DEFAULT_API_LIMIT, ge=1, le=config.MAX_API_LIMIT),
    offset: int = Query(0, ge=0)
):
    """Get stored places with text filtering and pagination."""
    try:
        total = get_places_count(q)
        items = [StoredPlaceOut(**row) for row in get_places(q, limit, offset)]
        return PlacesResponse(total=total, items=items)

    except Exception as e:
        logger.error(f"Error fetching places: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/places/{place_key:path}", response_model=StoredPlaceOut)
async def get_api_place(place_key: str):
    """Get a stored place by maps URL (or name)."""
    try:
        row = get_place_by_key(place_key)
        if not row:
            raise HTTPException(status_code=404, detail="Place not found")
        return StoredPlaceOut(**row)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching place {place_key}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/export/csv")
async def export_places_csv(q: Optional[str] = None):
    """Export stored places as CSV in the viewer's column order."""
    try:
        rows = get_places(q, limit=10000, offset=0)
        for row in rows:
            row["mapsUrl"] = row.pop("maps_url", "")
        csv_content = to_csv_text(records_to_frame(rows)).encode("utf-8")

        return StreamingResponse(
            iter([csv_content]),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="scraped_results.csv"'}
        )

    except Exception as e:
        logger.error(f"Error exporting CSV: {e}")
        raise HTTPException(status_code=500, detail="Error generating CSV export")
