import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

from app.analytics import aggregator, forecaster
from app.analytics.windows import UTC, days_ago, local_date, month_windows
from app.metrics import RequestMetrics
from app.schemas.insights import (
    ApplicationMetrics,
    Breakdown,
    DashboardResponse,
    DatabaseMetrics,
    ForecastResponse,
    Overview,
    PerformanceResponse,
    SystemMetrics,
    TrendLabels,
)
from app.services.stores import COLLECTIONS, BookingStore, HotelStore, UserStore
from app.services.system_metrics import SystemMetricsService, format_uptime

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
THIS_WEEK_DAYS = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InsightsService:
    """Builds the business-insight payloads from a fresh snapshot per call.

    Nothing is cached between calls: each payload re-reads the stores and
    recomputes every section, and a failed read fails the whole payload.
    """

    def __init__(
        self,
        bookings: BookingStore,
        hotels: HotelStore,
        users: UserStore,
        system: SystemMetricsService,
        request_metrics: RequestMetrics,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._bookings = bookings
        self._hotels = hotels
        self._users = users
        self._system = system
        self._request_metrics = request_metrics
        self._tz = tz
        self._clock = clock

    async def dashboard(self) -> DashboardResponse:
        now = self._clock()
        bookings, hotels, total_users = await asyncio.gather(
            self._bookings.list_bookings(),
            self._hotels.list_hotels(),
            self._users.count_users(),
        )

        overall = aggregator.totals(bookings)
        recent = aggregator.totals(aggregator.created_between(bookings, days_ago(now, RECENT_DAYS)))

        windows = month_windows(now, self._tz)
        current_month = aggregator.totals(
            aggregator.created_between(bookings, windows.current_start, now)
        )
        previous_month = aggregator.totals(
            aggregator.created_between(bookings, windows.previous_start, windows.current_start)
        )

        result = DashboardResponse(
            overview=Overview(
                totalHotels=len(hotels),
                totalUsers=total_users,
                totalBookings=overall.count,
                recentBookings=recent.count,
                totalRevenue=overall.revenue,
                recentRevenue=recent.revenue,
                revenueGrowth=aggregator.growth_rate(current_month.revenue, previous_month.revenue),
                averageBookingValue=aggregator.average_booking_value(bookings),
                cancellationRate=aggregator.cancellation_rate(bookings),
            ),
            breakdown=Breakdown(
                byStatus=aggregator.status_breakdown(bookings),
                byPaymentStatus=aggregator.payment_status_breakdown(bookings),
            ),
            popularDestinations=aggregator.popular_destinations(bookings, hotels),
            dailyBookings=aggregator.daily_bookings(bookings, self._tz),
            hotelPerformance=aggregator.hotel_performance(bookings, hotels),
            lastUpdated=now,
        )

        logger.info(
            "Dashboard: %d bookings, %d hotels, %d destinations, %d days, %d hotels ranked",
            overall.count,
            len(hotels),
            len(result.popularDestinations),
            len(result.dailyBookings),
            len(result.hotelPerformance),
        )
        return result

    async def forecast(self) -> ForecastResponse:
        now = self._clock()
        windows = month_windows(now, self._tz)
        since = min(days_ago(now, forecaster.HISTORY_DAYS), windows.previous_start)
        bookings = await self._bookings.list_bookings(since)

        weekly = forecaster.weekly_buckets(bookings, now, self._tz)
        booking_trend, revenue_trend = forecaster.fit_weekly(weekly)
        points = forecaster.forecast(
            weekly, now, tz=self._tz, trends=(booking_trend, revenue_trend)
        )

        result = ForecastResponse(
            historical=weekly,
            forecasts=points,
            seasonalGrowth=forecaster.seasonal_growth(bookings, now, self._tz),
            trends=TrendLabels(
                bookingTrend=forecaster.trend_label(booking_trend, len(weekly)),
                revenueTrend=forecaster.trend_label(revenue_trend, len(weekly)),
            ),
            lastUpdated=now,
        )

        logger.info(
            "Forecast: %d weeks of history, trends=%s/%s, seasonal growth %.2f%%",
            len(weekly),
            result.trends.bookingTrend,
            result.trends.revenueTrend,
            result.seasonalGrowth,
        )
        return result

    async def performance(self) -> PerformanceResponse:
        now = self._clock()
        bookings, hotels = await asyncio.gather(
            self._bookings.list_bookings(),
            self._hotels.list_hotels(),
        )

        overall = aggregator.totals(bookings)
        today = local_date(now, self._tz)
        today_count = sum(1 for b in bookings if local_date(b.createdAt, self._tz) == today)
        week_count = len(aggregator.created_between(bookings, days_ago(now, THIS_WEEK_DAYS)))
        stats = self._request_metrics.snapshot()
        uptime = self._system.uptime()

        result = PerformanceResponse(
            system=SystemMetrics(
                memory=self._system.memory(),
                cpu=self._system.cpu(),
                uptime=uptime,
            ),
            database=DatabaseMetrics(
                collections=len(COLLECTIONS),
                totalHotels=len(hotels),
                totalBookings=overall.count,
                totalRevenue=overall.revenue,
            ),
            application=ApplicationMetrics(
                avgResponseTime=stats.avg_response_ms,
                requestsPerMinute=stats.requests_per_minute,
                errorRate=stats.error_rate,
                todayBookings=today_count,
                thisWeekBookings=week_count,
                uptime=format_uptime(uptime),
            ),
            lastUpdated=now,
        )

        logger.info(
            "Performance: %d bookings today, %d this week, %d req/min",
            today_count,
            week_count,
            stats.requests_per_minute,
        )
        return result
