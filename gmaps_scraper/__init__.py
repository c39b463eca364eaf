"""
Google Maps Places Scraper Package
"""
from .models import PlaceRecord, ScrollPolicy, PacingPolicy, CollectionState
from .core import run_scrape, scrape_page
from .scraper import scroll_and_collect, extract_place_details
from .database import (
    db_connect,
    db_init,
    upsert_place,
    upsert_places,
    db_get_place
)
from .export import (
    export_new_since_run,
    save_output_rows
)
from .exceptions import ScraperError, SessionError, ExtractionError
from .utils import init_logger, now_iso, pause

__version__ = "1.0.0"

__all__ = [
    "PlaceRecord",
    "ScrollPolicy",
    "PacingPolicy",
    "CollectionState",
    "run_scrape",
    "scrape_page",
    "scroll_and_collect",
    "extract_place_details",
    "db_connect",
    "db_init",
    "upsert_place",
    "upsert_places",
    "db_get_place",
    "export_new_since_run",
    "save_output_rows",
    "ScraperError",
    "SessionError",
    "ExtractionError",
    "init_logger",
    "now_iso",
    "pause"
]
