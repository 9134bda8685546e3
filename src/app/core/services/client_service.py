"""Data-access service for client records."""
import logging
from datetime import UTC, datetime
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from src.app.core.domain.models import (
    Client,
    ClientDraft,
    ClientFilter,
    ClientPatch,
    ClientStats,
)
from src.app.core.services.cache_keys import CacheKeys
from src.app.infrastructure.client_repository import ClientRepository
from src.shared.cache.ttl_cache import CacheSettings, TTLCache
from src.shared.exceptions import DataAccessError, EntityNotFound
from src.shared.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(UTC)


class ClientService:
    """
    Service for handling Client reads and writes.

    Every backend call goes through the retry policy. Reads are cached; writes
    invalidate the affected entries. Backend failures always surface as
    DataAccessError, except that a missing client is ``None`` on ``get_client``.
    """

    def __init__(
        self,
        repository: ClientRepository,
        cache: TTLCache,
        retry_policy: RetryPolicy,
        cache_settings: CacheSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.cache = cache
        self.retry_policy = retry_policy
        self.cache_settings = cache_settings or CacheSettings()
        self.clock = clock

    async def _call(self, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Run a backend operation under the retry policy and normalize failures."""
        try:
            return await self.retry_policy.run(operation)
        except DataAccessError as e:
            logger.error("Failed to %s: %s (code=%s)", action, e.message, e.code)
            raise
        except Exception as e:
            logger.exception("Unexpected error while trying to %s", action)
            raise DataAccessError(f"Unexpected error while trying to {action}: {e}", details=e) from e

    def _invalidate_collections(self) -> None:
        for pattern in CacheKeys.collection_patterns():
            self.cache.invalidate_by_pattern(pattern)

    async def list_clients(self, client_filter: ClientFilter | None = None) -> list[Client]:
        """
        List clients, most recently updated first.

        Results are cached per filter; listings with a text search expire sooner
        than plain browse listings.
        """
        client_filter = client_filter or ClientFilter()
        ttl = (
            self.cache_settings.search_list_ttl_seconds
            if client_filter.has_text_search
            else self.cache_settings.list_ttl_seconds
        )
        clients = await self.cache.with_cache(
            CacheKeys.clients(client_filter),
            lambda: self._call("fetch clients", lambda: self.repository.select_clients(client_filter)),
            ttl,
        )
        # Callers get their own list; the cached one stays untouched
        return list(clients)

    async def get_client(self, client_id: UUID) -> Client | None:
        """
        Get a client by ID, or None if it does not exist.

        Misses are not cached. A read still in flight when the client is
        updated or deleted does not store its result.
        """
        return await self.cache.with_cache(
            CacheKeys.client(client_id),
            lambda: self._call("fetch client", lambda: self.repository.get_by_id(client_id)),
            self.cache_settings.client_ttl_seconds,
            cache_none=False,
        )

    async def create_client(self, draft: ClientDraft) -> Client:
        """
        Create a new client.

        Labels default to an empty list and counters to zero. Both timestamps
        are set to the same instant.
        """
        now = self.clock()
        client = Client(
            **draft.model_dump(exclude={"labels", "total_visits", "lifetime_value"}),
            labels=draft.labels or [],
            total_visits=draft.total_visits or 0,
            lifetime_value=draft.lifetime_value or 0,
            created_at=now,
            updated_at=now,
        )

        created = await self._call("create client", lambda: self.repository.insert(client))

        self._invalidate_collections()
        logger.info("Created client %s", created.id)
        return created

    async def update_client(self, client_id: UUID, patch: ClientPatch) -> Client:
        """
        Apply a partial update and refresh ``updated_at``.

        Raises:
            EntityNotFound: If no client has this ID
            DataAccessError: If the backend fails
        """
        updated_at = self.clock()
        updated = await self._call(
            "update client",
            lambda: self.repository.update_by_id(client_id, patch, updated_at),
        )
        if updated is None:
            raise EntityNotFound("Client", client_id)

        self.cache.delete(CacheKeys.client(client_id))
        self._invalidate_collections()
        logger.info("Updated client %s (%s)", client_id, ", ".join(sorted(patch.changes())) or "timestamp only")
        return updated

    async def delete_client(self, client_id: UUID) -> None:
        """Hard-delete a client. Deleting an unknown ID succeeds."""
        deleted = await self._call("delete client", lambda: self.repository.delete_by_id(client_id))

        self.cache.delete(CacheKeys.client(client_id))
        self._invalidate_collections()
        if deleted:
            logger.info("Deleted client %s", client_id)
        else:
            logger.info("Delete requested for unknown client %s", client_id)

    async def search_clients(self, query: str, limit: int = 10) -> list[Client]:
        """
        Free-text search across names, email, phone, occupation and labels.

        A blank query returns no results rather than every client.
        """
        if not query or not query.strip():
            return []

        query = query.strip()
        clients = await self.cache.with_cache(
            CacheKeys.search(query, limit),
            lambda: self._call("search clients", lambda: self.repository.search(query, limit)),
            self.cache_settings.search_ttl_seconds,
        )
        return list(clients)

    async def get_stats(self) -> ClientStats:
        """Client counts per status."""
        return await self.cache.with_cache(
            CacheKeys.client_stats(),
            self._fetch_stats,
            self.cache_settings.stats_ttl_seconds,
        )

    async def _fetch_stats(self) -> ClientStats:
        try:
            counts = await self._call("fetch client statistics", self.repository.count_by_status)
            return ClientStats.from_counts(counts)
        except DataAccessError as e:
            if e.retryable:
                raise
            logger.warning("Status aggregate unavailable (%s), tallying statuses instead", e.message)

        statuses = await self._call("fetch client statuses", self.repository.list_statuses)
        return ClientStats.tally(statuses)

    async def warm_cache(self) -> None:
        """Preload statistics and the most recently updated clients. Never raises."""
        try:
            await self.get_stats()
            await self.list_clients(ClientFilter(limit=self.cache_settings.warm_recent_limit))
            logger.info("Warmed cache with initial data")
        except DataAccessError as e:
            logger.warning("Failed to warm cache: %s", e.message)
