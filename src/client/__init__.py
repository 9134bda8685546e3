"""Client-side SDK and view helpers for the Koravi CRM API."""
from src.client.koravi_client import KoraviClient
from src.client.schemas import (
    ClientResponse,
    ClientStatsResponse,
    ClientStatusEnum,
    CreateClientRequest,
    HealthResponse,
    UpdateClientRequest,
)

__all__ = [
    "KoraviClient",
    "ClientResponse",
    "ClientStatsResponse",
    "ClientStatusEnum",
    "CreateClientRequest",
    "HealthResponse",
    "UpdateClientRequest",
]
