"""Health endpoint reporting backend connectivity."""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from dependency_injector.wiring import Provide, inject

from src.app.containers import Container
from src.app.core.services.health_service import HealthService, HealthStatus
from src.app.api.mappers import to_health_response

router = APIRouter(tags=["health"])


@router.get("/health")
@inject
async def health(
    service: HealthService = Depends(Provide[Container.health_service]),
) -> JSONResponse:
    """
    Report whether the clients table is reachable.

    Healthy and degraded answer 200; unhealthy answers 503 with the same body.
    """
    report = await service.check()
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if report.status == HealthStatus.UNHEALTHY
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=status_code, content=to_health_response(report).model_dump())
