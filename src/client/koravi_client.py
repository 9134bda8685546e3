"""Koravi HTTP Client for consuming the Koravi CRM API."""
from uuid import UUID
from typing import Optional
from httpx import AsyncClient, Response, codes

from src.client.schemas import (
    ClientResponse,
    ClientStatsResponse,
    ClientStatusEnum,
    CreateClientRequest,
    HealthResponse,
    UpdateClientRequest,
)


class KoraviClient:
    """HTTP client for interacting with the Koravi CRM API."""

    def __init__(self, base_url: str, client: Optional[AsyncClient] = None):
        """
        Initialize the Koravi client.

        Args:
            base_url: Base URL of the Koravi API (e.g., "http://localhost:8000")
            client: Optional httpx.AsyncClient instance. If not provided, a new one will be created.
        """
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._owns_client:
            self._client = AsyncClient(base_url=self.base_url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self._client:
            await self._client.aclose()

    @property
    def client(self) -> AsyncClient:
        """Get the underlying httpx client."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async context manager.")
        return self._client

    async def create_client(self, request: CreateClientRequest) -> ClientResponse:
        """
        Create a new client.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.post(
            "/api/v1/clients/",
            json=request.model_dump(mode="json")
        )
        response.raise_for_status()
        return ClientResponse(**response.json())

    async def get_client(self, client_id: UUID) -> ClientResponse | None:
        """
        Get a client by ID.

        Returns:
            The client, or None if it does not exist

        Raises:
            httpx.HTTPStatusError: If the request fails for any other reason
        """
        response: Response = await self.client.get(f"/api/v1/clients/{client_id}")
        if response.status_code == codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return ClientResponse(**response.json())

    async def update_client(self, client_id: UUID, request: UpdateClientRequest) -> ClientResponse:
        """
        Partially update a client. Only fields set on the request are sent.

        Raises:
            httpx.HTTPStatusError: If the request fails (404 if the client does not exist)
        """
        response: Response = await self.client.patch(
            f"/api/v1/clients/{client_id}",
            json=request.model_dump(mode="json", exclude_unset=True),
        )
        response.raise_for_status()
        return ClientResponse(**response.json())

    async def delete_client(self, client_id: UUID) -> None:
        """
        Delete a client. Deleting an unknown client succeeds.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.delete(f"/api/v1/clients/{client_id}")
        response.raise_for_status()

    async def list_clients(
        self,
        search: str | None = None,
        status: ClientStatusEnum | None = None,
        labels: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ClientResponse]:
        """
        List clients, most recently updated first.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        params: dict = {}
        if search:
            params["search"] = search
        if status is not None:
            params["status"] = ClientStatusEnum(status).value
        if labels:
            params["labels"] = labels
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset

        response: Response = await self.client.get("/api/v1/clients/", params=params)
        response.raise_for_status()
        return [ClientResponse(**item) for item in response.json()]

    async def search_clients(self, query: str, limit: int = 10) -> list[ClientResponse]:
        """
        Free-text search over clients.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.get(
            "/api/v1/clients/search",
            params={"q": query, "limit": limit},
        )
        response.raise_for_status()
        return [ClientResponse(**item) for item in response.json()]

    async def get_stats(self) -> ClientStatsResponse:
        """
        Get client counts per status.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.get("/api/v1/clients/stats")
        response.raise_for_status()
        return ClientStatsResponse(**response.json())

    async def health(self) -> HealthResponse:
        """Get the backend health report. Does not raise on an unhealthy backend."""
        response: Response = await self.client.get("/health")
        return HealthResponse(**response.json())
