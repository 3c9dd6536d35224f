import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import InsightsError, StoreError

logger = logging.getLogger(__name__)


async def insights_error_handler(_request: Request, exc: InsightsError) -> JSONResponse:
    logger.error("Insights error computing %s: %s", exc.computation, exc.message)
    return JSONResponse(
        status_code=500,
        content={"error": f"Failed to fetch {exc.computation}", "message": exc.message},
    )


async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store error: %s (operation=%s)", exc.message, exc.operation)
    return JSONResponse(
        status_code=503,
        content={"detail": f"Database error: {exc.message}"},
    )
