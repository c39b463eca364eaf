"""
Data models for the Google Maps scraper.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class PlaceRecord:
    """One scraped Google Maps place. Missing fields are None."""

    query: str
    maps_url: str
    scraped_at: str

    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[str] = None
    reviews: Optional[str] = None

    @property
    def key(self) -> str:
        """Upsert key: the detail URL, or the name when there is no URL."""
        return self.maps_url or (self.name or "")

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Wire representation used by the API and the viewer."""
        return {
            "query": self.query,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "rating": self.rating,
            "reviews": self.reviews,
            "mapsUrl": self.maps_url,
            "scrapedAt": self.scraped_at,
        }


@dataclass
class ScrollPolicy:
    """Termination and pacing knobs for the results feed scroller."""

    max_stagnation: int = 50
    scroll_step: int = 1000
    poll_base_ms: int = 1000
    poll_jitter_ms: int = 400
    feed_selector: str = 'div[role="feed"]'
    anchor_selector: str = "a.hfpxzc"


@dataclass
class PacingPolicy:
    """Delays and timeouts used around navigations."""

    after_search_ms: int = 3000
    after_search_jitter_ms: int = 0
    per_listing_base_ms: int = 1000
    per_listing_jitter_ms: int = 1200
    heading_timeout_ms: int = 4000
    navigation_timeout_ms: int = 60_000


@dataclass
class CollectionState:
    """Mutable state of a single feed collection pass."""

    # dict keeps insertion order, used as an ordered set
    seen: Dict[str, None] = field(default_factory=dict)
    previous_extent: int = 0
    stagnation: int = 0

    def add(self, href: Optional[str]) -> bool:
        if not href or href in self.seen:
            return False
        self.seen[href] = None
        return True

    def record_extent(self, extent: int) -> None:
        if extent == self.previous_extent:
            self.stagnation += 1
        else:
            self.stagnation = 0
        self.previous_extent = extent
