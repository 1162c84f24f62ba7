"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Resolve .env from the project root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./realyield.db"

    # Listing provider
    listing_search_url: str = "https://realyield.app.n8n.cloud/webhook/search-listings"
    listing_detail_url: str = "https://realyield.app.n8n.cloud/webhook/propertyfinder"
    gateway_user_agent: str = "RealYieldAgent/1.0"
    gateway_timeout_seconds: float = 30.0
    max_listings: int = 5

    # Detail fetch retry policy
    detail_max_attempts: int = 3
    detail_backoff_base_ms: int = 1000
    detail_backoff_cap_ms: int = 5000

    # Startup connectivity probe
    connectivity_probe_link: str = "https://www.propertyfinder.ae/en/test-only-connectivity-check"
    check_gateway_on_startup: bool = True

    # CORS
    cors_origins: str = "http://localhost:3000"

    # General
    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list.

        In debug mode, returns ["*"] to allow any origin.
        """
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
