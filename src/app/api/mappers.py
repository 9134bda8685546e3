"""Mappers for converting between API schemas and domain models."""
from src.app.core.domain.models import Client, ClientDraft, ClientPatch, ClientStats
from src.app.core.services.health_service import HealthReport
from src.client.schemas import (
    ClientResponse,
    ClientStatsResponse,
    CreateClientRequest,
    HealthResponse,
    UpdateClientRequest,
)


def to_client_draft(request: CreateClientRequest) -> ClientDraft:
    """Convert a validated create request into a domain draft."""
    return ClientDraft.model_validate(request.model_dump())


def to_client_patch(request: UpdateClientRequest) -> ClientPatch:
    """Convert an update request into a patch carrying only the fields that were sent."""
    return ClientPatch.model_validate(request.model_dump(exclude_unset=True))


def to_client_response(client: Client) -> ClientResponse:
    """Convert a Client domain model to a ClientResponse."""
    return ClientResponse.model_validate(client.model_dump())


def to_stats_response(stats: ClientStats) -> ClientStatsResponse:
    return ClientStatsResponse.model_validate(stats.model_dump())


def to_health_response(report: HealthReport) -> HealthResponse:
    return HealthResponse(
        status=report.status.value,
        connected=report.connected,
        message=report.message,
    )
