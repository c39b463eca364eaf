"""
Pydantic models for API request/response serialization.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlaceOut(BaseModel):
    """One scraped place as returned to the viewer."""
    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[str] = None
    reviews: Optional[str] = None
    maps_url: str = Field("", alias="mapsUrl")
    scraped_at: Optional[str] = Field(None, alias="scrapedAt")


class ScrapeResponse(BaseModel):
    """Response model for a finished scrape."""
    query: str
    count: int
    results: List[PlaceOut]


class StoredPlaceOut(PlaceOut):
    """Stored place with persistence bookkeeping."""
    place_key: str
    first_seen: Optional[str] = None
    last_seen: Optional[str] = None


class PlacesResponse(BaseModel):
    """Response model for paginated stored places."""
    total: int
    items: List[StoredPlaceOut]


class ErrorOut(BaseModel):
    error: str
