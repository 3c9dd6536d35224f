"""Calendar helpers shared by the aggregator and the forecaster.

No I/O. All boundaries are computed in an explicit report timezone so the
same snapshot gives the same buckets regardless of the server locale.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

UTC = timezone.utc


@dataclass(frozen=True)
class MonthWindows:
    current_start: datetime
    previous_start: datetime


def round_money(value: float) -> float:
    """Round half-up to 2 decimals (Python's round() is half-to-even)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def local_date(moment: datetime, tz: tzinfo = UTC) -> date:
    return moment.astimezone(tz).date()


def month_start(moment: datetime, tz: tzinfo = UTC) -> datetime:
    local = moment.astimezone(tz)
    return datetime(local.year, local.month, 1, tzinfo=tz)


def month_windows(now: datetime, tz: tzinfo = UTC) -> MonthWindows:
    current = month_start(now, tz)
    previous = month_start(current - timedelta(days=1), tz)
    return MonthWindows(current_start=current, previous_start=previous)


def week_start(moment: datetime, tz: tzinfo = UTC) -> date:
    """Sunday on or before the moment's local date."""
    day = local_date(moment, tz)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)
