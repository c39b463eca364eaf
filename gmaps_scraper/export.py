"""
Export utilities for the Google Maps scraper.
"""
import csv
import logging
import sqlite3
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .models import PlaceRecord

log = logging.getLogger(__name__)

EXPORT_COLUMNS = ["query", "name", "address", "phone", "website", "rating", "reviews", "mapsUrl"]


def records_to_frame(rows: Iterable[Dict]) -> pd.DataFrame:
    """Frame with the viewer's column order; missing values become empty strings."""
    df = pd.DataFrame(list(rows), columns=EXPORT_COLUMNS)
    return df.fillna("")


def places_to_frame(records: List[PlaceRecord]) -> pd.DataFrame:
    return records_to_frame(r.to_dict() for r in records)


def to_csv_text(df: pd.DataFrame) -> str:
    """CSV with every field quoted."""
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL)


def export_new_since_run(conn: sqlite3.Connection, run_started_iso: str) -> pd.DataFrame:
    """Export places that were first seen since the given timestamp."""
    q = """
    SELECT query, name, address, phone, website, rating, reviews, maps_url AS mapsUrl
    FROM places
    WHERE first_seen >= ?
    ORDER BY first_seen DESC
    """
    df = pd.read_sql_query(q, conn, params=(run_started_iso,))
    return records_to_frame(df.to_dict("records"))


def save_frame(df: pd.DataFrame, out_path: str):
    if out_path.lower().endswith(".xlsx"):
        df.to_excel(out_path, index=False)
    else:
        df.to_csv(out_path, index=False, quoting=csv.QUOTE_ALL)


def save_output_rows(records: List[PlaceRecord], out_path: str, logger: Optional[logging.Logger] = None):
    """Save places to CSV or Excel file."""
    logger = logger or log
    df = places_to_frame(records)
    save_frame(df, out_path)
    logger.info(f">>> Saved {len(df)} rows to {out_path}")
