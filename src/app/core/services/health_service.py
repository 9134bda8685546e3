"""Backend connectivity check."""
import logging
from enum import StrEnum

from pydantic import BaseModel

from src.app.infrastructure.client_repository import ClientRepository
from src.shared.database.errors import UNDEFINED_TABLE
from src.shared.exceptions import DataAccessError

logger = logging.getLogger(__name__)


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthReport(BaseModel):
    status: HealthStatus
    connected: bool
    message: str


class HealthService:
    """
    Reports whether the clients table is reachable.

    A reachable database without the clients table (a fresh setup) is degraded
    rather than unhealthy: it recovers once the schema is created.
    """

    def __init__(self, repository: ClientRepository):
        self.repository = repository

    async def check(self) -> HealthReport:
        try:
            await self.repository.ping()
        except DataAccessError as e:
            if e.code == UNDEFINED_TABLE:
                return HealthReport(
                    status=HealthStatus.DEGRADED,
                    connected=True,
                    message="Connected to database, but clients table not yet created",
                )
            logger.warning("Health check failed: %s", e.message)
            return HealthReport(
                status=HealthStatus.UNHEALTHY,
                connected=False,
                message=f"Database error: {e.message}",
            )

        return HealthReport(
            status=HealthStatus.HEALTHY,
            connected=True,
            message="Successfully connected to database",
        )
