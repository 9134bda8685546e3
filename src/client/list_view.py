"""
Client list view-model.

Combines a loaded client collection with a free-text query, a status filter,
a label filter and a sortable column into the rows that are displayed. Rows are
derived on demand from the current state; nothing here talks to the backend
and nothing here raises on valid in-memory data.

Works with any client-shaped object (domain ``Client`` or API ``ClientResponse``).
"""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any, Callable, Protocol

from src.app.config import ClientSearchSettings
from src.app.core.domain.models import ClientStats, ClientStatus

MIN_QUERY_LENGTH = 2
ALL_STATUSES: frozenset[str] = frozenset(status.value for status in ClientStatus)


class ClientLike(Protocol):
    first_name: str
    last_name: str
    email: Any
    phone: Any
    status: Any
    labels: list[str]


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SortColumn(StrEnum):
    CLIENT_NAME = "client_name"
    EMAIL = "email"
    CLIENT_ID = "client_id"
    STATUS = "status"
    TOTAL_VISITS = "total_visits"
    LIFETIME_VALUE = "lifetime_value"
    LAST_VISIT = "last_visit"


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction; both None when unsorted."""
    column: SortColumn | None = None
    direction: SortDirection | None = None

    @property
    def is_active(self) -> bool:
        return self.column is not None and self.direction is not None

    def cycle(self, column: SortColumn | str) -> "SortState":
        """
        Next state after clicking a column's sort control.

        Same column: ascending -> descending -> unsorted. A different column
        always starts ascending.
        """
        column = SortColumn(column)
        if self.column != column or self.direction is None:
            return SortState(column, SortDirection.ASC)
        if self.direction == SortDirection.ASC:
            return SortState(column, SortDirection.DESC)
        return SortState()


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


def _lower(value: str | None) -> str:
    return value.lower() if value else ""


_SORT_KEYS: dict[SortColumn, Callable[[Any], Any]] = {
    SortColumn.CLIENT_NAME: lambda c: f"{c.first_name} {c.last_name}".lower(),
    SortColumn.EMAIL: lambda c: _lower(c.email),
    SortColumn.CLIENT_ID: lambda c: c.client_id or 0,
    SortColumn.STATUS: lambda c: _status_value(c.status),
    SortColumn.TOTAL_VISITS: lambda c: c.total_visits,
    SortColumn.LIFETIME_VALUE: lambda c: c.lifetime_value,
    SortColumn.LAST_VISIT: lambda c: c.last_visit or date.min,
}


def matches_query(client: ClientLike, query: str) -> bool:
    """Case-insensitive substring match on names, email, phone and labels."""
    needle = query.lower()
    fields = [client.first_name, client.last_name, client.email, client.phone, *(client.labels or [])]
    return any(needle in value.lower() for value in fields if value)


def filter_clients(
    clients: Sequence[ClientLike],
    query: str = "",
    statuses: Iterable[str] = ALL_STATUSES,
    labels: Iterable[str] = (),
    min_query_length: int = MIN_QUERY_LENGTH,
) -> list[ClientLike]:
    """
    Apply the status, label and text filters, keeping the input order.

    - Status: applied only when at least one status is excluded.
    - Labels: when any are selected, a client needs at least one of them.
    - Text: applied only when the trimmed query has at least
      ``min_query_length`` characters.
    """
    statuses = {_status_value(s) for s in statuses}
    labels = set(labels)
    query = (query or "").strip()

    rows = list(clients)
    if not ALL_STATUSES <= statuses:
        rows = [c for c in rows if _status_value(c.status) in statuses]
    if labels:
        rows = [c for c in rows if any(label in labels for label in c.labels or [])]
    if len(query) >= min_query_length:
        rows = [c for c in rows if matches_query(c, query)]
    return rows


def sort_clients(clients: Sequence[ClientLike], sort: SortState) -> list[ClientLike]:
    """Stable sort by the active column; the input order is kept when unsorted."""
    if not sort.is_active:
        return list(clients)
    return sorted(
        clients,
        key=_SORT_KEYS[sort.column],
        reverse=sort.direction == SortDirection.DESC,
    )


@dataclass
class ClientListView:
    """State of the client list screen."""
    clients: list[Any] = field(default_factory=list)
    query: str = ""
    status_filters: set[str] = field(default_factory=lambda: set(ALL_STATUSES))
    label_filters: set[str] = field(default_factory=set)
    sort: SortState = field(default_factory=SortState)
    min_query_length: int = MIN_QUERY_LENGTH

    @classmethod
    def from_settings(cls, settings: ClientSearchSettings) -> "ClientListView":
        return cls(min_query_length=settings.min_query_length)

    def load(self, clients: Iterable[Any]) -> None:
        self.clients = list(clients)

    def set_query(self, query: str) -> None:
        self.query = query

    def set_status_filter(self, status: ClientStatus | str, checked: bool) -> None:
        value = ClientStatus(_status_value(status)).value
        if checked:
            self.status_filters.add(value)
        else:
            self.status_filters.discard(value)

    def set_label_filter(self, label: str, checked: bool) -> None:
        if checked:
            self.label_filters.add(label)
        else:
            self.label_filters.discard(label)

    def cycle_sort(self, column: SortColumn | str) -> SortState:
        self.sort = self.sort.cycle(column)
        return self.sort

    @property
    def rows(self) -> list[Any]:
        filtered = filter_clients(
            self.clients, self.query, self.status_filters, self.label_filters, self.min_query_length
        )
        return sort_clients(filtered, self.sort)

    @property
    def available_labels(self) -> list[str]:
        """Every label used by a loaded client, de-duplicated and sorted."""
        return sorted({label for c in self.clients for label in c.labels or []})

    @property
    def highlight_query(self) -> str:
        """Query to highlight in rendered rows; empty until it is long enough to filter on."""
        query = self.query.strip()
        return query if len(query) >= self.min_query_length else ""

    @property
    def needs_longer_query(self) -> bool:
        """True while a query has been typed that is too short to filter on."""
        return 0 < len(self.query.strip()) < self.min_query_length

    def status_counts(self) -> ClientStats:
        """Per-status counts over the loaded clients."""
        return ClientStats.tally(_status_value(c.status) for c in self.clients)
