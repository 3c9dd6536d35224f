from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from app.schemas.insights import CpuUsage, MemoryUsage


class DatabaseHealth(BaseModel):
    status: str  # "connected" | "disconnected"
    collections: int = 0
    name: str


class HealthResponse(BaseModel):
    status: str  # "healthy" | "unhealthy"
    timestamp: datetime
    uptime: int
    database: DatabaseHealth
    memory: MemoryUsage
    environment: str
    version: str


class PlatformInfo(BaseModel):
    platform: str
    arch: str
    pythonVersion: str
    pid: int


class ProcessPerformance(BaseModel):
    memory: dict[str, int]  # rss / vms in bytes
    cpu: CpuUsage
    uptime: int


class DetailedHealthResponse(BaseModel):
    status: str
    timestamp: datetime
    system: PlatformInfo
    performance: ProcessPerformance
    database: DatabaseHealth
