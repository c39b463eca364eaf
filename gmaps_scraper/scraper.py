"""
Playwright-based scraping logic for Google Maps.

Two stages: the results feed is scrolled until enough place links are
discovered, then every place page is visited and its fields are resolved
through ordered fallback strategies.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError

from .exceptions import ExtractionError
from .models import CollectionState, PacingPolicy, PlaceRecord, ScrollPolicy
from .utils import (
    looks_like_domain,
    looks_like_phone,
    now_iso,
    parse_rating,
    parse_review_count,
    pause,
    strip_tel_scheme,
    text_or_none,
)

log = logging.getLogger(__name__)

# Place page selectors. Class names are obfuscated and change often.
NAME_PRIMARY_SEL = "h1.DUwDvf.lfPIob"
NAME_LEGACY_SEL = "h2.section-hero-header-title-title"
CONTENT_BLOCK_SEL = "div.Io6YTe.fontBodyMedium.kR99db.fdkmkc"
META_ADDRESS_SEL = 'meta[itemprop="address"]'
TEL_LINK_SEL = 'a[href^="tel:"]'
PHONE_CANDIDATES_SEL = f"{CONTENT_BLOCK_SEL}, {TEL_LINK_SEL}, span[jsaction]"
LINK_OR_BUTTON_SEL = "a, button"
RATING_SEL = 'div[aria-label*="stars"], span[class*="rating"]'
RATING_IMG_SEL = '[role="img"][aria-label*="stars"]'
REVIEWS_SEL = "button, span"

ANCHOR_HREFS_JS = "els => els.map(e => e.href)"

SCROLL_FEED_JS = """
([selector, step]) => {
    const container = document.querySelector(selector);
    if (!container) return 0;
    const extent = container.scrollHeight;
    container.scrollBy(0, step);
    return extent;
}
"""

SNAPSHOT_JS = """
(selector) => Array.from(document.querySelectorAll(selector)).map(el => ({
    text: (el.innerText || '').trim(),
    href: (typeof el.href === 'string' ? el.href : el.getAttribute('href')) || null,
    label: el.getAttribute('aria-label'),
    content: el.getAttribute('content'),
}))
"""

Strategy = Callable[[object], Awaitable[Optional[str]]]


async def scroll_and_collect(
    page,
    limit: int,
    policy: Optional[ScrollPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Scroll the results feed and collect unique place URLs.

    Stops once `limit` links are known or the feed height stayed the same
    for `policy.max_stagnation` consecutive scrolls. A missing feed reads as
    zero height, so the pass ends with whatever was found.
    """
    policy = policy or ScrollPolicy()
    logger = logger or log
    if limit <= 0:
        return []

    state = CollectionState()
    iterations = 0
    while len(state.seen) < limit and state.stagnation < policy.max_stagnation:
        try:
            hrefs = await page.eval_on_selector_all(policy.anchor_selector, ANCHOR_HREFS_JS)
            added = sum(state.add(h) for h in hrefs or [])
            extent = await page.evaluate(
                SCROLL_FEED_JS, [policy.feed_selector, policy.scroll_step]
            )
        except PlaywrightError as e:
            # page crashed or navigated away; keep what we have
            logger.warning(f">>> Feed scrolling stopped: {e}")
            break

        state.record_extent(int(extent or 0))
        iterations += 1
        logger.debug(
            f">>> Scroll {iterations}: +{added} links, {len(state.seen)} total, "
            f"extent={state.previous_extent}, stagnation={state.stagnation}"
        )
        await pause(policy.poll_base_ms, policy.poll_jitter_ms)

    return list(state.seen)[:limit]


async def query_elements(page, selector: str) -> List[Dict]:
    """Read-only snapshot of every element matching selector."""
    return await page.evaluate(SNAPSHOT_JS, selector) or []


TARGET_CLOSED_MARKER = "has been closed"


async def first_match(
    page,
    strategies: List[Strategy],
    logger: Optional[logging.Logger] = None,
    errors: Optional[List[Exception]] = None,
) -> Optional[str]:
    """
    Run strategies in order and return the first non-empty result.

    A strategy that raises counts as a miss and its exception is appended
    to `errors` when given. A closed page, context or browser is not a miss:
    it raises ExtractionError because no later strategy can succeed.
    """
    logger = logger or log
    for strategy in strategies:
        try:
            value = await strategy(page)
        except Exception as e:
            if isinstance(e, PlaywrightError) and TARGET_CLOSED_MARKER in str(e):
                raise ExtractionError(f"page closed during extraction: {e}") from e
            logger.debug(f"Strategy {strategy.__name__} failed: {e}")
            if errors is not None:
                errors.append(e)
            continue
        value = text_or_none(value)
        if value:
            return value
    return None


def text_of(selector: str) -> Strategy:
    """Visible text of the first element matching selector."""
    async def strategy(page) -> Optional[str]:
        elements = await query_elements(page, selector)
        return elements[0].get("text") if elements else None
    strategy.__name__ = f"text_of({selector})"
    return strategy


def content_of(selector: str) -> Strategy:
    """`content` attribute of the first element matching selector."""
    async def strategy(page) -> Optional[str]:
        elements = await query_elements(page, selector)
        return elements[0].get("content") if elements else None
    strategy.__name__ = f"content_of({selector})"
    return strategy


async def phone_in_candidates(page) -> Optional[str]:
    for el in await query_elements(page, PHONE_CANDIDATES_SEL):
        if looks_like_phone(el.get("text")):
            return el["text"]
    return None


async def phone_from_tel_link(page) -> Optional[str]:
    elements = await query_elements(page, TEL_LINK_SEL)
    if not elements:
        return None
    tel = elements[0]
    for candidate in (tel.get("text"), strip_tel_scheme(tel.get("href"))):
        if looks_like_phone(candidate):
            return candidate
    return None


async def domain_in_blocks(page) -> Optional[str]:
    # phone-shaped blocks were already claimed by the phone field
    for el in await query_elements(page, CONTENT_BLOCK_SEL):
        if looks_like_domain(el.get("text")):
            return el["text"]
    return None


async def website_link(page) -> Optional[str]:
    for el in await query_elements(page, LINK_OR_BUTTON_SEL):
        label = f"{el.get('text') or ''} {el.get('label') or ''}".lower()
        if "website" in label and el.get("href"):
            return el["href"]
    return None


async def rating_element(page) -> Optional[str]:
    elements = await query_elements(page, RATING_SEL)
    if not elements:
        elements = await query_elements(page, RATING_IMG_SEL)
    if not elements:
        return None
    el = elements[0]
    return parse_rating(el.get("label"), el.get("text"))


async def review_count(page) -> Optional[str]:
    for el in await query_elements(page, REVIEWS_SEL):
        count = parse_review_count(el.get("text")) or parse_review_count(el.get("label"))
        if count:
            return count
    return None


FIELD_STRATEGIES: Dict[str, List[Strategy]] = {
    "name": [text_of(NAME_PRIMARY_SEL), text_of(NAME_LEGACY_SEL)],
    "address": [text_of(CONTENT_BLOCK_SEL), content_of(META_ADDRESS_SEL)],
    "phone": [phone_in_candidates, phone_from_tel_link],
    "website": [domain_in_blocks, website_link],
    "rating": [rating_element],
    "reviews": [review_count],
}


async def extract_place_details(
    page,
    maps_url: str,
    query: str,
    pacing: Optional[PacingPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> PlaceRecord:
    """
    Open a place page and extract its fields.

    Raises ExtractionError when navigation fails, the page closes, or no
    strategy could read the page at all. Every field that cannot be found
    is None.
    """
    pacing = pacing or PacingPolicy()
    logger = logger or log

    try:
        await page.goto(
            maps_url, wait_until="domcontentloaded", timeout=pacing.navigation_timeout_ms
        )
    except PlaywrightError as e:
        raise ExtractionError(f"navigation failed: {e}") from e

    try:
        await page.wait_for_selector(NAME_PRIMARY_SEL, timeout=pacing.heading_timeout_ms)
    except PlaywrightError:
        logger.debug(f">>> Heading not rendered in time, extracting anyway: {maps_url}")

    fields = {}
    errors: List[Exception] = []
    for field_name, strategies in FIELD_STRATEGIES.items():
        fields[field_name] = await first_match(page, strategies, logger, errors)

    if len(errors) == sum(len(s) for s in FIELD_STRATEGIES.values()):
        raise ExtractionError(f"every field strategy failed, last error: {errors[-1]}")

    return PlaceRecord(query=query, maps_url=maps_url, scraped_at=now_iso(), **fields)
