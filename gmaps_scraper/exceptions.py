"""Custom exceptions for the Google Maps scraper."""


class ScraperError(Exception):
    """Base exception for scraper-related errors."""
    pass


class SessionError(ScraperError):
    """The browser session could not be started or the search page failed to load."""
    pass


class ExtractionError(ScraperError):
    """A single listing could not be scraped."""
    pass
