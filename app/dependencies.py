from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from app.services.insights import InsightsService
from app.services.stores import DatabaseProbe
from app.services.system_metrics import SystemMetricsService


def get_insights_service(request: Request) -> InsightsService:
    return request.app.state.insights_service


def get_database_probe(request: Request) -> DatabaseProbe:
    return request.app.state.database_probe


def get_system_metrics(request: Request) -> SystemMetricsService:
    return request.app.state.system_metrics


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


InsightsDep = Annotated[InsightsService, Depends(get_insights_service)]
DatabaseProbeDep = Annotated[DatabaseProbe, Depends(get_database_probe)]
SystemMetricsDep = Annotated[SystemMetricsService, Depends(get_system_metrics)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
