import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.dependencies import DatabaseProbeDep, SettingsDep, SystemMetricsDep
from app.exceptions.custom import StoreError
from app.schemas.health import (
    DatabaseHealth,
    DetailedHealthResponse,
    HealthResponse,
    ProcessPerformance,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health(
    probe: DatabaseProbeDep,
    system: SystemMetricsDep,
    settings: SettingsDep,
) -> JSONResponse:
    connected = await probe.ping()
    collections = 0
    if connected:
        try:
            collections = await probe.count_collections()
        except StoreError as exc:
            logger.warning("Could not list collections: %s", exc.message)
            connected = False

    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        uptime=round(system.uptime()),
        database=DatabaseHealth(
            status="connected" if connected else "disconnected",
            collections=collections,
            name=probe.name,
        ),
        memory=system.memory(),
        environment=settings.environment,
        version=settings.app_version,
    )
    return JSONResponse(
        status_code=200 if connected else 503,
        content=body.model_dump(mode="json"),
    )


@router.get("/detailed", response_model=DetailedHealthResponse)
async def detailed_health(
    probe: DatabaseProbeDep,
    system: SystemMetricsDep,
) -> DetailedHealthResponse:
    connected = await probe.ping()
    return DetailedHealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        system=system.platform_info(),
        performance=ProcessPerformance(
            memory=system.raw_memory(),
            cpu=system.cpu(),
            uptime=round(system.uptime()),
        ),
        database=DatabaseHealth(
            status="connected" if connected else "disconnected",
            name=probe.name,
        ),
    )
