import logging

from fastapi import APIRouter

from app.dependencies import InsightsDep
from app.exceptions.custom import InsightsError
from app.schemas.insights import DashboardResponse, ForecastResponse, PerformanceResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/business-insights", tags=["Business Insights"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(service: InsightsDep) -> DashboardResponse:
    try:
        return await service.dashboard()
    except Exception as exc:
        logger.exception("Dashboard computation failed")
        raise InsightsError("dashboard data", str(exc)) from exc


@router.get("/forecast", response_model=ForecastResponse)
async def get_forecast(service: InsightsDep) -> ForecastResponse:
    try:
        return await service.forecast()
    except Exception as exc:
        logger.exception("Forecast computation failed")
        raise InsightsError("forecasts", str(exc)) from exc


@router.get("/performance", response_model=PerformanceResponse)
async def get_performance(service: InsightsDep) -> PerformanceResponse:
    try:
        return await service.performance()
    except Exception as exc:
        logger.exception("Performance computation failed")
        raise InsightsError("performance metrics", str(exc)) from exc
