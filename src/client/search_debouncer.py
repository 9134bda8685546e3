"""Debounced, race-free search for search-as-you-type inputs."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from src.app.config import ClientSearchSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebouncedSearch(Generic[T]):
    """
    Sends a search only after typing has paused.

    Every ``submit`` resets the single pending timer; the search runs once no
    new query has arrived for ``delay`` seconds. Each dispatched search gets a
    sequence number, and only the most recently issued one may publish its
    results or error. A superseded request is not aborted once sent, its
    outcome is discarded.

    Args:
        search: Async callable performing the search for a query
        delay: Quiet period in seconds
        on_results: Optional callback invoked with the results that were kept
    """

    def __init__(
        self,
        search: Callable[[str], Awaitable[list[T]]],
        delay: float = 0.3,
        on_results: Callable[[list[T]], Any] | None = None,
    ):
        self._search = search
        self.delay = delay
        self._on_results = on_results
        self._pending: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._issued = 0

        self.query = ""
        self.results: list[T] = []
        self.error: Exception | None = None
        self.loading = False

    @classmethod
    def from_settings(
        cls,
        search: Callable[[str], Awaitable[list[T]]],
        settings: ClientSearchSettings,
        on_results: Callable[[list[T]], Any] | None = None,
    ) -> "DebouncedSearch[T]":
        return cls(search, delay=settings.debounce_seconds, on_results=on_results)

    @property
    def has_query(self) -> bool:
        return bool(self.query.strip())

    def submit(self, query: str) -> None:
        """Record a new query and restart the quiet-period timer."""
        self.query = query
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.ensure_future(self._fire_after_delay(query))

    async def _fire_after_delay(self, query: str) -> None:
        await asyncio.sleep(self.delay)
        dispatch = asyncio.ensure_future(self._dispatch(query))
        self._in_flight.add(dispatch)
        dispatch.add_done_callback(self._in_flight.discard)

    async def _dispatch(self, query: str) -> None:
        self._issued += 1
        sequence = self._issued

        if not query.strip():
            self._publish(sequence, [], None)
            return

        self.loading = True
        try:
            results = await self._search(query)
        except Exception as e:
            logger.warning("Search for '%s' failed: %s", query, e)
            self._publish(sequence, None, e)
        else:
            self._publish(sequence, results, None)

    def _publish(self, sequence: int, results: list[T] | None, error: Exception | None) -> None:
        if sequence != self._issued:
            logger.debug("Discarding stale search result #%d (latest is #%d)", sequence, self._issued)
            return

        self.loading = False
        self.error = error
        if error is None:
            self.results = results or []
            if self._on_results is not None:
                self._on_results(self.results)

    async def flush(self) -> None:
        """Wait until the pending timer and every dispatched search have finished."""
        if self._pending is not None and not self._pending.done():
            await asyncio.wait({self._pending})
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def cancel(self) -> None:
        """Drop the pending timer; searches already sent are left to finish."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
