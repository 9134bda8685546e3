"""Client API endpoints: CRUD, listing, search and statistics."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from dependency_injector.wiring import Provide, inject

from src.app.containers import Container
from src.app.config import Settings
from src.app.core.domain.models import ClientFilter, ClientStatus
from src.app.core.services.client_service import ClientService
from src.client.schemas import (
    ClientResponse,
    ClientStatsResponse,
    CreateClientRequest,
    UpdateClientRequest,
)
from src.app.api.mappers import (
    to_client_draft,
    to_client_patch,
    to_client_response,
    to_stats_response,
)
from src.shared.exceptions import DataAccessError, EntityNotFound
from src.app.logging import get_logger

router = APIRouter(prefix="/clients", tags=["clients"])
logger = get_logger(__name__)

INTEGRITY_CODES = {"integrity_error", "23505", "23502", "23514", "23503"}


def to_http_exception(error: DataAccessError) -> HTTPException:
    """Map a normalized backend error onto an HTTP error."""
    if error.retryable:
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=error.message)
    if error.code in INTEGRITY_CODES:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


@router.get("/", response_model=list[ClientResponse])
@inject
async def list_clients(
    search: Annotated[str | None, Query(description="Free-text search")] = None,
    client_status: Annotated[ClientStatus | None, Query(alias="status")] = None,
    labels: Annotated[list[str] | None, Query(description="Match clients having any of these labels")] = None,
    limit: Annotated[int | None, Query(gt=0, le=1000)] = None,
    offset: Annotated[int | None, Query(ge=0)] = None,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> list[ClientResponse]:
    """List clients, most recently updated first."""
    client_filter = ClientFilter(
        search=search,
        status=client_status,
        labels=labels,
        limit=limit,
        offset=offset,
    )
    try:
        clients = await service.list_clients(client_filter)
    except DataAccessError as e:
        logger.error(f"Failed to list clients: {e}")
        raise to_http_exception(e)
    return [to_client_response(client) for client in clients]


@router.get("/search", response_model=list[ClientResponse])
@inject
async def search_clients(
    q: Annotated[str, Query(description="Search query string")] = "",
    limit: Annotated[int | None, Query(gt=0, description="Maximum number of results")] = None,
    service: ClientService = Depends(Provide[Container.client_service]),
    config: Settings = Depends(Provide[Container.config]),
) -> list[ClientResponse]:
    """
    Search clients by name, email, phone, occupation or label.

    An empty query returns an empty list.
    """
    effective_limit = min(limit or config.search.default_limit, config.search.max_limit)
    try:
        clients = await service.search_clients(q, effective_limit)
    except DataAccessError as e:
        logger.error(f"Failed to search clients: {e}")
        raise to_http_exception(e)
    return [to_client_response(client) for client in clients]


@router.get("/stats", response_model=ClientStatsResponse)
@inject
async def get_stats(
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientStatsResponse:
    """Client counts per status."""
    try:
        stats = await service.get_stats()
    except DataAccessError as e:
        logger.error(f"Failed to fetch client statistics: {e}")
        raise to_http_exception(e)
    return to_stats_response(stats)


@router.post("/", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
@inject
async def create_client(
    request: CreateClientRequest,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientResponse:
    """Create a new client."""
    try:
        client = await service.create_client(to_client_draft(request))
    except DataAccessError as e:
        logger.error(f"Failed to create client: {e}")
        raise to_http_exception(e)
    return to_client_response(client)


@router.get("/{client_id}", response_model=ClientResponse)
@inject
async def get_client(
    client_id: UUID,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientResponse:
    """Get a client by ID."""
    try:
        client = await service.get_client(client_id)
    except DataAccessError as e:
        logger.error(f"Failed to fetch client {client_id}: {e}")
        raise to_http_exception(e)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client with ID {client_id} not found")
    return to_client_response(client)


@router.patch("/{client_id}", response_model=ClientResponse)
@inject
async def update_client(
    client_id: UUID,
    request: UpdateClientRequest,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientResponse:
    """Partially update a client."""
    try:
        client = await service.update_client(client_id, to_client_patch(request))
    except EntityNotFound as e:
        logger.error(f"Client not found: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        logger.error(f"Failed to update client due to validation error: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DataAccessError as e:
        logger.error(f"Failed to update client {client_id}: {e}")
        raise to_http_exception(e)
    return to_client_response(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
async def delete_client(
    client_id: UUID,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> Response:
    """Delete a client. Deleting an unknown client is not an error."""
    try:
        await service.delete_client(client_id)
    except DataAccessError as e:
        logger.error(f"Failed to delete client {client_id}: {e}")
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
