from datetime import datetime
from uuid import UUID
from typing import Optional

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.sql.elements import ColumnElement

from src.app.core.domain.models import Client, ClientFilter, ClientPatch, ClientStatus
from src.shared.database.base_repo import BaseRepository
from src.shared.database.database import Database
from src.shared.database.errors import translate_errors

from src.app.infrastructure.entities.client_entity import ClientEntity
from src.app.infrastructure.mappers.client_mapper import ClientMapper


# Page size used when an offset is requested without a limit
DEFAULT_PAGE_SIZE = 10


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def text_search_condition(query: str) -> ColumnElement[bool]:
    """
    Build the free-text search condition.

    The query is split on whitespace; every token must appear, case-insensitively,
    in at least one of first name, last name, email, phone, occupation or labels.
    """
    conditions = []
    for token in query.split():
        pattern = f"%{_escape_like(token)}%"
        conditions.append(
            or_(
                ClientEntity.first_name.ilike(pattern, escape="\\"),
                ClientEntity.last_name.ilike(pattern, escape="\\"),
                ClientEntity.email.ilike(pattern, escape="\\"),
                ClientEntity.phone.ilike(pattern, escape="\\"),
                ClientEntity.occupation.ilike(pattern, escape="\\"),
                func.array_to_string(ClientEntity.labels, " ").ilike(pattern, escape="\\"),
            )
        )
    return and_(*conditions)


class ClientRepository(BaseRepository[ClientEntity, Client]):
    """Repository for Client operations."""

    def __init__(self, db: Database, mapper: ClientMapper):
        super().__init__(db, mapper)
        self.mapper: ClientMapper = mapper

    async def get_by_id(self, client_id: UUID) -> Optional[Client]:
        """Get a client by ID."""
        return await self.find_one(
            select(ClientEntity).where(ClientEntity.id == client_id),
            action="fetch client",
        )

    async def select_clients(self, client_filter: ClientFilter) -> list[Client]:
        """
        List clients matching a filter, most recently updated first.

        Filters are applied in this order: text search, status equality,
        label overlap (match any), limit, then offset-based range.
        """
        stmt = select(ClientEntity)

        if client_filter.has_text_search:
            stmt = stmt.where(text_search_condition(client_filter.search))

        if client_filter.status is not None:
            stmt = stmt.where(ClientEntity.status == client_filter.status.value)

        if client_filter.labels:
            stmt = stmt.where(ClientEntity.labels.overlap(client_filter.labels))

        stmt = stmt.order_by(ClientEntity.updated_at.desc())

        if client_filter.offset:
            stmt = stmt.offset(client_filter.offset).limit(client_filter.limit or DEFAULT_PAGE_SIZE)
        elif client_filter.limit:
            stmt = stmt.limit(client_filter.limit)

        return await self.find_all(stmt, action="fetch clients")

    async def search(self, query: str, limit: int) -> list[Client]:
        """
        Search clients by free text, most recently updated first.

        Returns:
            Up to ``limit`` matching clients; an empty list for a blank query
        """
        if not query or not query.strip():
            return []

        stmt = (
            select(ClientEntity)
            .where(text_search_condition(query))
            .order_by(ClientEntity.updated_at.desc())
            .limit(limit)
        )
        return await self.find_all(stmt, action="search clients")

    async def insert(self, client: Client) -> Client:
        """Insert a new client and return the persisted row."""
        async with translate_errors("create client"):
            async with self.db.session_maker() as session:
                async with session.begin():
                    entity = self.mapper.to_entity(client)
                    session.add(entity)
                    await session.flush()
                    await session.refresh(entity)
                return self.mapper.to_model(entity)

    async def update_by_id(
        self, client_id: UUID, patch: ClientPatch, updated_at: datetime
    ) -> Optional[Client]:
        """
        Apply a partial update.

        Returns:
            The updated client, or None when no row has this ID
        """
        values = self.mapper.to_update_values(patch)
        values["updated_at"] = updated_at
        stmt = (
            update(ClientEntity)
            .where(ClientEntity.id == client_id)
            .values(**values)
            .returning(ClientEntity)
            .execution_options(synchronize_session=False)
        )
        return await self.write_one(stmt, action="update client")

    async def delete_by_id(self, client_id: UUID) -> bool:
        """
        Delete a client.

        Returns:
            True if a row was deleted, False if none matched
        """
        stmt = (
            delete(ClientEntity)
            .where(ClientEntity.id == client_id)
            .execution_options(synchronize_session=False)
        )
        return await self.write(stmt, action="delete client") > 0

    async def count_by_status(self) -> dict[ClientStatus, int]:
        """Aggregate client counts per status on the server."""
        stmt = select(ClientEntity.status, func.count()).group_by(ClientEntity.status)
        rows = await self.find_rows(stmt, action="fetch client statistics")
        return {ClientStatus(status): count for status, count in rows}

    async def list_statuses(self) -> list[ClientStatus]:
        """Fetch the status of every client."""
        values = await self.find_values(select(ClientEntity.status), action="fetch client statuses")
        return [ClientStatus(value) for value in values]

    async def ping(self) -> None:
        """Run a trivial query against the clients table."""
        await self.find_values(select(ClientEntity.id).limit(1), action="check connection")
