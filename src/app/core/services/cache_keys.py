"""Cache key builders for client data."""
import json
from uuid import UUID

from src.app.core.domain.models import ClientFilter

CLIENTS_PREFIX = "clients:"
CLIENT_PREFIX = "client:"
STATS_KEY = "client-stats"
SEARCH_PREFIX = "search:"


class CacheKeys:
    """
    Key layout for the client cache.

    List, search and stats keys use distinct prefixes so that a write can drop
    all of them with three pattern invalidations while leaving per-client entries
    for other ids alone.
    """

    @staticmethod
    def clients(client_filter: ClientFilter | None = None) -> str:
        options = client_filter.model_dump(mode="json", exclude_none=True) if client_filter else {}
        return CLIENTS_PREFIX + json.dumps(options, sort_keys=True, separators=(",", ":"))

    @staticmethod
    def client(client_id: UUID | str) -> str:
        return f"{CLIENT_PREFIX}{client_id}"

    @staticmethod
    def client_stats() -> str:
        return STATS_KEY

    @staticmethod
    def search(query: str, limit: int) -> str:
        return f"{SEARCH_PREFIX}{query}:{limit}"

    @staticmethod
    def collection_patterns() -> tuple[str, ...]:
        """Patterns covering every entry a write can make stale, except per-client ones."""
        return CLIENTS_PREFIX, SEARCH_PREFIX, STATS_KEY
