import logging

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


class DatabaseSettings(BaseModel):
    db_url: str
    # Checkout-time liveness check; a dropped connection surfaces as a retryable error
    pool_pre_ping: bool = True
    echo: bool = False


class Database:
    def __init__(self, db_settings: DatabaseSettings) -> None:
        self._engine = create_async_engine(
            db_settings.db_url,
            pool_pre_ping=db_settings.pool_pre_ping,
            echo=db_settings.echo,
        )
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(self._engine, expire_on_commit=False)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
        logger.info("Database engine disposed")
