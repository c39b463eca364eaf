"""
Core scraping orchestration and browser management.
"""
import logging
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .exceptions import SessionError
from .models import PacingPolicy, PlaceRecord, ScrollPolicy
from .scraper import extract_place_details, scroll_and_collect
from .utils import build_search_url, pause

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36"
BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font", "media"}

# Replace the geolocation API so Maps does not center results on the host
GEOLOCATION_STUB_JS = """
Object.defineProperty(navigator, "geolocation", {
    value: {
        getCurrentPosition: () => {},
        watchPosition: () => {},
        clearWatch: () => {},
    }
});
"""


async def block_resources(route) -> None:
    """Abort images, stylesheets, fonts and media; let everything else through."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def scrape_page(
    page,
    query: str,
    limit: int,
    scroll_policy: Optional[ScrollPolicy] = None,
    pacing: Optional[PacingPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> List[PlaceRecord]:
    """
    Run one search on an already configured page.

    A search page that fails to load aborts the run with SessionError.
    Places that fail individually are logged and left out.
    """
    pacing = pacing or PacingPolicy()
    logger = logger or log

    url = build_search_url(query)
    logger.info(f">>> Opening search: {url}")
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=pacing.navigation_timeout_ms)
    except PlaywrightError as e:
        raise SessionError(f"search page failed to load: {e}") from e

    await pause(pacing.after_search_ms, pacing.after_search_jitter_ms)

    links = await scroll_and_collect(page, limit, scroll_policy, logger)
    logger.info(f">>> Collected {len(links)} place links for '{query}'")

    results: List[PlaceRecord] = []
    for i, link in enumerate(links, 1):
        logger.info(f">>> Scraping item {i}/{len(links)}: {link}")
        try:
            record = await extract_place_details(page, link, query, pacing, logger)
        except Exception as e:
            logger.error(f"Error scraping item {link}: {e}")
        else:
            results.append(record)
        await pause(pacing.per_listing_base_ms, pacing.per_listing_jitter_ms)

    logger.info(f">>> Scraped {len(results)}/{len(links)} places for '{query}'")
    return results


async def run_scrape(
    query: str,
    limit: int,
    headless: bool = True,
    user_agent: str = DEFAULT_USER_AGENT,
    scroll_policy: Optional[ScrollPolicy] = None,
    pacing: Optional[PacingPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> List[PlaceRecord]:
    """
    Main scraping orchestration function.

    Launches a dedicated browser for this run, configures the page and
    always closes the browser, whatever happens during scraping.
    """
    pacing = pacing or PacingPolicy()
    logger = logger or log

    launch_args = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-geolocation",
    ]

    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=headless, args=launch_args)
        except PlaywrightError as e:
            raise SessionError(f"browser launch failed: {e}") from e
        logger.info(f">>> Browser started (headless={headless})")

        try:
            context = await browser.new_context(
                viewport={"width": 1200, "height": 900},
                user_agent=user_agent,
                locale="en-US",
                extra_http_headers={"X-Geo": "0 0"},
            )
            await context.add_init_script(GEOLOCATION_STUB_JS)
            context.set_default_timeout(pacing.navigation_timeout_ms)
            context.set_default_navigation_timeout(pacing.navigation_timeout_ms)

            page = await context.new_page()
            await page.route("**/*", block_resources)

            return await scrape_page(page, query, limit, scroll_policy, pacing, logger)
        finally:
            await browser.close()
            logger.info(">>> Browser closed")
