import time

from fastapi import APIRouter, Request

from vdesk.configs.settings import settings
from vdesk.schemas.response import HealthCheck

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheck)
async def health(request: Request):
    started_at = getattr(request.app.state, "started_at", None)
    store_status = "healthy"
    if settings.STORE_BACKEND == "mongo":
        from vdesk.databases.mongodb import mongodb
        if not await mongodb.ping():
            store_status = "degraded"
    return HealthCheck(
        status=store_status,
        version=request.app.version,
        store=settings.STORE_BACKEND,
        uptime=round(time.monotonic() - started_at, 3) if started_at is not None else None,
    )


@router.get("/api/test")
async def api_test():
    return {"status": "success", "message": "API is working!"}
