"""Application configuration with structured settings groups."""
import logging
from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared.cache.ttl_cache import CacheSettings
from src.shared.resilience.retry import RetrySettings

logger = logging.getLogger(__name__)


# =============================================================================
# Nested Settings Models
# =============================================================================


class ClientSearchSettings(BaseModel):
    """
    Client search and list settings.

    default_limit / max_limit: Result count bounds for the search endpoint.
    debounce_seconds: Quiet period before a typed query is sent.
    min_query_length: Shortest query the list view filters on; shorter
        queries mean "type more", not "no results".
    """

    default_limit: int = 10
    max_limit: int = 100
    debounce_seconds: float = 0.3
    min_query_length: int = 2


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Application settings with nested configuration groups.

    ``database_url`` has no default: starting without it is a configuration
    error. Credentials travel inside the URL.

    Environment variables use double underscore as delimiter for nested values.
    Example: CACHE__LIST_TTL_SECONDS=60, RETRY__MAX_ATTEMPTS=5
    """

    # Application metadata
    app_name: str = "Koravi CRM API"
    app_version: str = "1.0.0"

    # Database
    database_url: str

    # Nested settings groups
    cache: CacheSettings = CacheSettings()
    retry: RetrySettings = RetrySettings()
    search: ClientSearchSettings = ClientSearchSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
