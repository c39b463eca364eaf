"""
Route package initialization.
"""
from .places import router as places_router
from .scrape import router as scrape_router
from .ui import router as ui_router

__all__ = ["places_router", "scrape_router", "ui_router"]
