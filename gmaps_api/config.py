"""
API configuration and settings management.
"""
import os

from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Database
    DB_PATH: str = os.getenv("GMAPS_DB", "./data/gmaps_scraper.db")

    # Browser
    HEADLESS: bool = _env_bool("HEADLESS", "true")
    USER_AGENT: str = os.getenv("USER_AGENT", "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36")

    # API settings
    API_TITLE: str = "Google Maps Scraper API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Scrape Google Maps places and query the stored results"
    PORT: int = int(os.getenv("PORT", "3000"))

    # CORS settings
    CORS_ORIGINS: list = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]

    # Scrape limits
    DEFAULT_LIMIT: int = 20
    MAX_LIMIT: int = 1000

    # Stored places pagination
    DEFAULT_API_LIMIT: int = 50
    MAX_API_LIMIT: int = 500

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("API_LOG_FILE", "api.log")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration on startup."""
        if not cls.DB_PATH:
            raise ValueError("Database path not configured")
        os.makedirs(os.path.dirname(cls.DB_PATH) or ".", exist_ok=True)


# Global config instance
config = Config()
