"""
Database operations and connection management.
"""
import sqlite3
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from gmaps_scraper.database import db_init, upsert_places
from gmaps_scraper.models import PlaceRecord

from .config import config

logger = logging.getLogger(__name__)


@contextmanager
def get_db_connection():
    """Get a database connection with proper error handling."""
    conn = None
    try:
        if not config.DB_PATH:
            raise ValueError("Database path not configured")

        conn = sqlite3.connect(config.DB_PATH)
        conn.row_factory = sqlite3.Row  # Enable dict-like access
        yield conn
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        raise
    finally:
        if conn is not None:
            conn.close()


def init_schema() -> None:
    """Create tables and indexes if they do not exist yet."""
    with get_db_connection() as conn:
        db_init(conn)


def save_places(records: List[PlaceRecord]) -> Tuple[int, int]:
    """Upsert scraped places; returns (new, updated) counts."""
    if not records:
        return 0, 0
    with get_db_connection() as conn:
        db_init(conn)
        return upsert_places(conn, records)


def build_where_clause(q: Optional[str]) -> Tuple[str, List[Any]]:
    """Build WHERE clause and parameters for a free-text filter."""
    if not q:
        return "", []
    search_term = f"%{q.lower()}%"
    where = " WHERE (lower(name) LIKE ? OR lower(address) LIKE ? OR lower(query) LIKE ?)"
    return where, [search_term, search_term, search_term]


def get_places_count(q: Optional[str] = None) -> int:
    """Get total count of places matching the filter."""
    with get_db_connection() as conn:
        where_clause, parameters = build_where_clause(q)
        result = conn.execute(f"SELECT COUNT(*) FROM places {where_clause}", parameters).fetchone()
        return result[0] if result else 0


def get_places(q: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Dict]:
    """Get stored places, most recently seen first."""
    with get_db_connection() as conn:
        where_clause, parameters = build_where_clause(q)
        sql = f"SELECT * FROM places {where_clause} ORDER BY last_seen DESC LIMIT ? OFFSET ?"
        parameters.extend([limit, offset])
        cursor = conn.execute(sql, parameters)
        return [dict(row) for row in cursor.fetchall()]


def get_place_by_key(place_key: str) -> Optional[Dict]:
    """Get a single place by its maps URL (or name)."""
    with get_db_connection() as conn:
        row = conn.execute("SELECT * FROM places WHERE place_key = ?", (place_key,)).fetchone()
        return dict(row) if row else None
