"""
Database operations for the Google Maps scraper.
"""
import sqlite3
from typing import Dict, Iterable, Optional, Tuple

from .models import PlaceRecord
from .utils import now_iso


# Schema definitions
DDL_PLACES = """
CREATE TABLE IF NOT EXISTS places (
  place_key TEXT PRIMARY KEY,
  query TEXT,
  name TEXT,
  address TEXT,
  phone TEXT,
  website TEXT,
  rating TEXT,
  reviews TEXT,
  maps_url TEXT,
  scraped_at TEXT,
  first_seen TEXT,
  last_seen TEXT
);
"""

DDL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_places_last_seen ON places(last_seen);",
    "CREATE INDEX IF NOT EXISTS idx_places_query ON places(query);",
]


def db_connect(path: str) -> sqlite3.Connection:
    """Create database connection with optimized settings."""
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    return conn


def db_init(conn: sqlite3.Connection):
    """Initialize database schema with tables and indexes."""
    conn.execute(DDL_PLACES)
    for ddl in DDL_INDEXES:
        conn.execute(ddl)
    conn.commit()


def row_to_dict(cur, row):
    """Convert sqlite3.Row to dictionary."""
    return {desc[0]: row[i] for i, desc in enumerate(cur.description)}


def db_get_place(conn: sqlite3.Connection, place_key: str) -> Optional[Dict]:
    """Retrieve an existing place by its upsert key."""
    cur = conn.cursor()
    cur.execute("SELECT * FROM places WHERE place_key = ?", (place_key,))
    r = cur.fetchone()
    if not r:
        return None
    return row_to_dict(cur, r)


def db_insert_place(conn: sqlite3.Connection, rec: PlaceRecord):
    """Insert new place into database."""
    ts = now_iso()
    conn.execute("""
    INSERT INTO places (
      place_key,query,name,address,phone,website,rating,reviews,
      maps_url,scraped_at,first_seen,last_seen
    ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?)
    """, (
        rec.key, rec.query, rec.name, rec.address, rec.phone, rec.website,
        rec.rating, rec.reviews, rec.maps_url, rec.scraped_at, ts, ts
    ))


def db_update_place(conn: sqlite3.Connection, rec: PlaceRecord):
    """Replace every scraped field of an existing place."""
    conn.execute("""
    UPDATE places SET
      query=?, name=?, address=?, phone=?, website=?, rating=?, reviews=?,
      maps_url=?, scraped_at=?, last_seen=?
    WHERE place_key=?
    """, (
        rec.query, rec.name, rec.address, rec.phone, rec.website, rec.rating,
        rec.reviews, rec.maps_url, rec.scraped_at, now_iso(), rec.key
    ))


def upsert_place(conn: sqlite3.Connection, rec: PlaceRecord) -> bool:
    """
    Insert or replace a place keyed by its maps URL (name as fallback).

    Returns:
        True if the place was not stored before.
    """
    if not rec.key:
        raise ValueError("place has neither maps_url nor name")
    existing = db_get_place(conn, rec.key)
    if existing is None:
        db_insert_place(conn, rec)
    else:
        db_update_place(conn, rec)
    conn.commit()
    return existing is None


def upsert_places(conn: sqlite3.Connection, records: Iterable[PlaceRecord]) -> Tuple[int, int]:
    """
    Upsert a batch of places.

    Returns:
        Tuple of (new_places, updated_places)
    """
    new_count = updated_count = 0
    for rec in records:
        if upsert_place(conn, rec):
            new_count += 1
        else:
            updated_count += 1
    return new_count, updated_count
