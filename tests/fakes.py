"""In-memory stand-ins for persistence collaborators."""
from collections import Counter
from datetime import datetime
from uuid import UUID

from src.app.core.domain.models import Client, ClientFilter, ClientPatch, ClientStatus


def _matches(client: Client, query: str) -> bool:
    haystack = [
        client.first_name,
        client.last_name,
        client.email,
        client.phone,
        client.occupation,
        " ".join(client.labels),
    ]
    return all(
        any(token.lower() in value.lower() for value in haystack if value)
        for token in query.split()
    )


class InMemoryClientRepository:
    """Dictionary-backed repository with the same contract as ClientRepository."""

    def __init__(self):
        self.rows: dict[UUID, Client] = {}
        self.calls: Counter[str] = Counter()
        self._sequence = 0

    async def get_by_id(self, client_id: UUID) -> Client | None:
        self.calls["get_by_id"] += 1
        row = self.rows.get(client_id)
        return row.model_copy(deep=True) if row else None

    async def select_clients(self, client_filter: ClientFilter) -> list[Client]:
        self.calls["select_clients"] += 1
        rows = list(self.rows.values())
        if client_filter.has_text_search:
            rows = [r for r in rows if _matches(r, client_filter.search)]
        if client_filter.status is not None:
            rows = [r for r in rows if r.status == client_filter.status]
        if client_filter.labels:
            rows = [r for r in rows if set(r.labels) & set(client_filter.labels)]
        rows.sort(key=lambda r: r.updated_at, reverse=True)
        if client_filter.offset:
            rows = rows[client_filter.offset:client_filter.offset + (client_filter.limit or 10)]
        elif client_filter.limit:
            rows = rows[:client_filter.limit]
        return [r.model_copy(deep=True) for r in rows]

    async def search(self, query: str, limit: int) -> list[Client]:
        self.calls["search"] += 1
        if not query.strip():
            return []
        rows = sorted(
            (r for r in self.rows.values() if _matches(r, query)),
            key=lambda r: r.updated_at,
            reverse=True,
        )
        return [r.model_copy(deep=True) for r in rows[:limit]]

    async def insert(self, client: Client) -> Client:
        self.calls["insert"] += 1
        self._sequence += 1
        row = client.model_copy(update={"client_id": self._sequence}, deep=True)
        self.rows[row.id] = row
        return row.model_copy(deep=True)

    async def update_by_id(self, client_id: UUID, patch: ClientPatch, updated_at: datetime) -> Client | None:
        self.calls["update_by_id"] += 1
        row = self.rows.get(client_id)
        if row is None:
            return None
        updated = row.model_copy(update={**patch.changes(), "updated_at": updated_at}, deep=True)
        self.rows[client_id] = updated
        return updated.model_copy(deep=True)

    async def delete_by_id(self, client_id: UUID) -> bool:
        self.calls["delete_by_id"] += 1
        return self.rows.pop(client_id, None) is not None

    async def count_by_status(self) -> dict[ClientStatus, int]:
        self.calls["count_by_status"] += 1
        return dict(Counter(r.status for r in self.rows.values()))

    async def list_statuses(self) -> list[ClientStatus]:
        self.calls["list_statuses"] += 1
        return [r.status for r in self.rows.values()]

    async def ping(self) -> None:
        self.calls["ping"] += 1


class ManualClock:
    """Clock whose time only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
