"""
Utility functions for logging, pacing, text cleanup and field matching.
"""
import asyncio
import logging
import random
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote, unquote

MAPS_SEARCH_BASE = "https://www.google.com/maps/search"

PHONE_RE = re.compile(r"\+?\d[\d\-\s().]{6,}")
RATING_LABEL_RE = re.compile(r"(\d+(?:\.\d+)?)\s*stars?", re.I)
RATING_TEXT_RE = re.compile(r"\d+(?:\.\d+)?")
REVIEWS_RE = re.compile(r"(\d[\d,]*)\s*reviews?\b", re.I)
TEL_SCHEME_RE = re.compile(r"^tel:", re.I)


def init_logger(
    name: str = "gmaps",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "gmaps.log"
) -> logging.Logger:
    """Initialize logger with console and optional file handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


async def pause(base_ms: float, jitter_ms: float = 0) -> None:
    """Sleep for base_ms plus a random share of jitter_ms."""
    extra = random.uniform(0, jitter_ms) if jitter_ms > 0 else 0
    await asyncio.sleep(max(0.0, base_ms + extra) / 1000)


def build_search_url(query: str) -> str:
    """Build the Google Maps search URL for a free-text query."""
    q = quote(query.strip(), safe="!~*'()")
    return f"{MAPS_SEARCH_BASE}/{q}?ucbcb=1&hl=en&authuser=0"


def clean_text(s: Optional[str]) -> str:
    """Clean and normalize text by removing extra whitespace."""
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def text_or_none(s: Optional[str]) -> Optional[str]:
    """Cleaned text, or None when nothing is left."""
    return clean_text(s) or None


def count_digits(s: Optional[str]) -> int:
    return sum(ch.isdigit() for ch in s or "")


def looks_like_phone(text: Optional[str]) -> bool:
    """
    True for text shaped like a phone number.

    An optional leading "+", then a digit-led run of digits and separators
    holding at least seven digits.
    """
    if not text:
        return False
    for m in PHONE_RE.finditer(text):
        if count_digits(m.group(0)) >= 7:
            return True
    return False


def looks_like_domain(text: Optional[str]) -> bool:
    """True for a single dotted token that is not a phone number."""
    t = clean_text(text)
    if "." not in t or " " in t:
        return False
    return not looks_like_phone(t)


def strip_tel_scheme(href: Optional[str]) -> str:
    """'tel:+1%20555' -> '+1 555'"""
    if not href:
        return ""
    return clean_text(unquote(TEL_SCHEME_RE.sub("", href.strip())))


def parse_rating(label: Optional[str], text: Optional[str] = None) -> Optional[str]:
    """
    Extract a rating like "4.6".

    The aria-label ("4.6 stars") is tried first, then the visible text.
    """
    if label:
        m = RATING_LABEL_RE.search(label)
        if m:
            return m.group(1)
    if text:
        m = RATING_TEXT_RE.search(text)
        if m:
            return m.group(0)
    return None


def parse_review_count(text: Optional[str]) -> Optional[str]:
    """'1,234 reviews' -> '1234'"""
    if not text:
        return None
    m = REVIEWS_RE.search(text)
    if not m:
        return None
    return m.group(1).replace(",", "") or None
