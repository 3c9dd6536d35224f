from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class DestinationBucket(BaseModel):
    city: str = Field(serialization_alias="_id")
    count: int
    totalRevenue: float
    avgPrice: float | None = None


class HotelBucket(BaseModel):
    hotelId: str
    name: str
    city: str
    starRating: float
    pricePerNight: float
    bookingCount: int
    totalRevenue: float


class DailyBucket(BaseModel):
    date: str  # YYYY-MM-DD
    bookings: int
    revenue: float


class WeeklyBucket(BaseModel):
    week: str  # YYYY-MM-DD of the Sunday starting the week
    bookings: int
    revenue: float


class ForecastPoint(BaseModel):
    week: str
    bookings: int
    revenue: float
    confidence: float


class Overview(BaseModel):
    totalHotels: int
    totalUsers: int
    totalBookings: int
    recentBookings: int
    totalRevenue: float
    recentRevenue: float
    revenueGrowth: float
    averageBookingValue: float
    cancellationRate: float


class Breakdown(BaseModel):
    byStatus: dict[str, int]
    byPaymentStatus: dict[str, int]


class DashboardResponse(BaseModel):
    overview: Overview
    breakdown: Breakdown
    popularDestinations: list[DestinationBucket]
    dailyBookings: list[DailyBucket]
    hotelPerformance: list[HotelBucket]
    lastUpdated: datetime


class TrendLabels(BaseModel):
    bookingTrend: str  # "increasing" | "decreasing" | "stable"
    revenueTrend: str


class ForecastResponse(BaseModel):
    historical: list[WeeklyBucket]
    forecasts: list[ForecastPoint]
    seasonalGrowth: float
    trends: TrendLabels
    lastUpdated: datetime


class MemoryUsage(BaseModel):
    used: int  # MB
    total: int  # MB
    percentage: float


class CpuUsage(BaseModel):
    user: float  # seconds
    system: float


class SystemMetrics(BaseModel):
    memory: MemoryUsage
    cpu: CpuUsage
    uptime: float


class DatabaseMetrics(BaseModel):
    collections: int
    totalHotels: int
    totalBookings: int
    totalRevenue: float


class ApplicationMetrics(BaseModel):
    avgResponseTime: float  # ms
    requestsPerMinute: int
    errorRate: float  # already a percentage (0-100), not a fraction
    todayBookings: int
    thisWeekBookings: int
    uptime: str  # process uptime, e.g. "3h 12m"
    source: str = "measured"


class PerformanceResponse(BaseModel):
    system: SystemMetrics
    database: DatabaseMetrics
    application: ApplicationMetrics
    lastUpdated: datetime
