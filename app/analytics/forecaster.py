"""Weekly trend fitting and short-horizon forecasting.

No I/O, no side effects. Buckets are keyed by the Sunday that starts each
week; the fit is ordinary least squares against the bucket index.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from app.analytics.aggregator import created_between, growth_rate
from app.analytics.windows import UTC, days_ago, month_windows, round_half_up, round_money, week_start
from app.schemas.insights import ForecastPoint, WeeklyBucket
from app.schemas.records import BookingRecord

HISTORY_DAYS = 60
FORECAST_WEEKS = 4
MIN_CONFIDENCE = 0.6
CONFIDENCE_STEP = 0.1

# Single-observation fallback: scale by 0.9 + step * 0.1, never below these.
SINGLE_POINT_MIN_BOOKINGS = 1
SINGLE_POINT_MIN_REVENUE = 100


@dataclass(frozen=True)
class Trend:
    slope: float
    intercept: float

    def at(self, x: float) -> float:
        return self.slope * x + self.intercept


def weekly_buckets(
    bookings: Iterable[BookingRecord],
    now: datetime,
    tz: tzinfo = UTC,
    history_days: int = HISTORY_DAYS,
) -> list[WeeklyBucket]:
    counts: dict[str, int] = defaultdict(int)
    revenue: dict[str, float] = defaultdict(float)

    for booking in created_between(bookings, days_ago(now, history_days)):
        key = week_start(booking.createdAt, tz).isoformat()
        counts[key] += 1
        revenue[key] += booking.revenue

    return [
        WeeklyBucket(week=key, bookings=counts[key], revenue=round_money(revenue[key]))
        for key in sorted(counts)
    ]


def fit_trend(values: Sequence[float]) -> Trend:
    """Least-squares line through ``(i, values[i])``.

    Fewer than two points have no slope: the line is flat through the single
    value, or through zero for an empty series.
    """
    n = len(values)
    if n == 0:
        return Trend(0.0, 0.0)
    if n == 1:
        return Trend(0.0, float(values[0]))

    sum_x = n * (n - 1) / 2
    sum_xx = n * (n - 1) * (2 * n - 1) / 6
    sum_y = float(sum(values))
    sum_xy = float(sum(i * y for i, y in enumerate(values)))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return Trend(slope, intercept)


def fit_weekly(weekly: Sequence[WeeklyBucket]) -> tuple[Trend, Trend]:
    return fit_trend([w.bookings for w in weekly]), fit_trend([w.revenue for w in weekly])


def confidence(step: int) -> float:
    return round(max(MIN_CONFIDENCE, 1 - step * CONFIDENCE_STEP), 2)


def trend_label(trend: Trend, n: int) -> str:
    if n <= 1:
        return "stable"
    return "increasing" if trend.slope > 0 else "decreasing"


def forecast(
    weekly: Sequence[WeeklyBucket],
    now: datetime,
    horizon: int = FORECAST_WEEKS,
    tz: tzinfo = UTC,
    trends: tuple[Trend, Trend] | None = None,
) -> list[ForecastPoint]:
    """Project ``horizon`` weeks ahead.

    ``trends`` is the (bookings, revenue) fit of ``weekly`` when the caller
    already has it; otherwise both are fitted here.
    """
    n = len(weekly)
    booking_trend, revenue_trend = trends or fit_weekly(weekly)

    points: list[ForecastPoint] = []
    for step in range(1, horizon + 1):
        if n > 1:
            x = n + step - 1
            bookings = max(0, round_half_up(booking_trend.at(x)))
            revenue = max(0.0, revenue_trend.at(x))
        elif n == 1:
            scale = 0.9 + step * 0.1
            bookings = max(SINGLE_POINT_MIN_BOOKINGS, round_half_up(weekly[0].bookings * scale))
            revenue = max(SINGLE_POINT_MIN_REVENUE, round_half_up(weekly[0].revenue * scale))
        else:
            bookings, revenue = 0, 0.0

        label_day = (now + timedelta(weeks=step)).astimezone(tz).date()
        points.append(
            ForecastPoint(
                week=label_day.isoformat(),
                bookings=bookings,
                revenue=round_money(revenue),
                confidence=confidence(step),
            )
        )
    return points


def seasonal_growth(
    bookings: Iterable[BookingRecord], now: datetime, tz: tzinfo = UTC
) -> float:
    """Month-over-month growth in booking count, 0 on a zero base."""
    windows = month_windows(now, tz)
    bookings = list(bookings)
    current = len(created_between(bookings, windows.current_start, now))
    previous = len(created_between(bookings, windows.previous_start, windows.current_start))
    return growth_rate(current, previous)
