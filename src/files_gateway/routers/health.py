from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from files_gateway.config.settings import Settings
from files_gateway.dependencies import get_app_settings, get_gateway
from files_gateway.errors import GatewayError
from files_gateway.schemas import HealthResponse
from files_gateway.services.gateway import GatewayService

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    gateway: GatewayService = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Health check endpoint for monitoring API status and storage reachability.

    Returns status of the API and the object store along with deployment mode.
    """
    components = {
        "api": "ready",
        "storage": "ready",
    }
    status = "ok"

    try:
        await run_in_threadpool(gateway.check_storage, settings.s3_bucket_name)
    except GatewayError as e:
        components["storage"] = f"error: {e.kind}: {e.message}"
        status = "degraded"

    return HealthResponse(
        status=status,
        deployment_mode=settings.deployment_mode,
        components=components,
        ready=all(value == "ready" for value in components.values()),
    )
