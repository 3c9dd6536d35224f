import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo import AsyncMongoClient

from app.config import Settings
from app.exceptions.custom import InsightsError, StoreError
from app.exceptions.handlers import insights_error_handler, store_error_handler
from app.metrics import RequestMetrics, RequestMetricsMiddleware
from app.routers.health import router as health_router
from app.routers.insights import router as insights_router
from app.services.insights import InsightsService
from app.services.stores import BookingStore, DatabaseProbe, HotelStore, UserStore
from app.services.system_metrics import SystemMetricsService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    async with AsyncMongoClient(settings.mongodb_connection_string, tz_aware=True) as client:
        db = client[settings.mongodb_database]
        logger.info("Using database %s", db.name)

        system_metrics = SystemMetricsService()
        request_metrics = RequestMetrics()

        app.state.settings = settings
        app.state.system_metrics = system_metrics
        app.state.request_metrics = request_metrics
        app.state.database_probe = DatabaseProbe(db)
        app.state.insights_service = InsightsService(
            BookingStore(db),
            HotelStore(db),
            UserStore(db),
            system_metrics,
            request_metrics,
            tz=settings.tz,
        )

        yield


app = FastAPI(title="LodgeLogic Insights", lifespan=lifespan)

app.add_middleware(RequestMetricsMiddleware)

app.add_exception_handler(InsightsError, insights_error_handler)
app.add_exception_handler(StoreError, store_error_handler)

app.include_router(insights_router)
app.include_router(health_router)
