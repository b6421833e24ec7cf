from fastapi import APIRouter, Request

from clone_api.schemas import PingResponse
from clone_api.utils.clock import now_ms

router = APIRouter()

COMPONENTS = {
    "blob_store": "blob_store",
    "status_store": "status_store",
    "queue": "job_queue",
}


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Liveness probe carrying the server clock in epoch milliseconds."""
    return PingResponse(ts=now_ms())


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns which adapters are wired up along with the deployment mode.
    """
    settings = request.app.state.settings

    health_status = {
        "ok": True,
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {"api": "ready"},
    }

    for component, state_attr in COMPONENTS.items():
        adapter = getattr(request.app.state, state_attr, None)
        if adapter is None:
            health_status["components"][component] = "missing"
            health_status["status"] = "degraded"
        else:
            health_status["components"][component] = type(adapter).__name__

    return health_status
