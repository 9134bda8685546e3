import abc
from typing import Any, Generic, TypeVar, Optional

from sqlalchemy import Executable

from src.shared.database.base_mapper import BaseEntityMapper
from src.shared.database.database import Database
from src.shared.database.errors import translate_errors


TEntity = TypeVar("TEntity")
TModel = TypeVar("TModel")


class BaseRepository(abc.ABC, Generic[TEntity, TModel]):
    """
    Base class for repositories.

    Every statement runs in its own session, and any persistence failure leaves
    the repository as a DataAccessError.
    """

    def __init__(self, db: Database, mapper: BaseEntityMapper[TModel, TEntity]):
        self.db = db
        self.mapper = mapper

    async def find_one(self, statement: Executable, action: str = "fetch record") -> Optional[TModel]:
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                result = await session.execute(statement)
                entity = result.scalar_one_or_none()
                if entity is None:
                    return None
                return self.mapper.to_model(entity)

    async def find_all(self, statement: Executable, action: str = "fetch records") -> list[TModel]:
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                result = await session.execute(statement)
                return self.mapper.to_models(result.scalars().all())

    async def find_values(self, statement: Executable, action: str = "fetch values") -> list[Any]:
        """Execute a single-column select and return the raw column values."""
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                result = await session.execute(statement)
                return list(result.scalars().all())

    async def find_rows(self, statement: Executable, action: str = "fetch rows") -> list[tuple]:
        """Execute a multi-column select (e.g. an aggregate) and return plain tuples."""
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                result = await session.execute(statement)
                return [tuple(row) for row in result.all()]

    async def write_one(self, statement: Executable, action: str = "write record") -> Optional[TModel]:
        """
        Execute a write statement with a RETURNING clause in its own transaction.

        Returns:
            The mapped row, or None when the statement matched nothing
        """
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                async with session.begin():
                    result = await session.execute(statement)
                    entity = result.scalar_one_or_none()
                if entity is None:
                    return None
                return self.mapper.to_model(entity)

    async def write(self, statement: Executable, action: str = "write records") -> int:
        """
        Execute a write statement in its own transaction.

        Returns:
            Number of rows affected
        """
        async with translate_errors(action):
            async with self.db.session_maker() as session:
                async with session.begin():
                    result = await session.execute(statement)
                return result.rowcount
