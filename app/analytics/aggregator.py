"""Grouped statistics over an in-memory booking snapshot.

Pure functions: records in, buckets out. Grouped series rank by count,
then revenue; remaining ties keep first-seen order (``sorted`` is stable).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from app.analytics.windows import UTC, local_date, round_money
from app.schemas.insights import DailyBucket, DestinationBucket, HotelBucket
from app.schemas.records import BookingRecord, BookingStatus, HotelRecord, PaymentStatus

POPULAR_DESTINATIONS_LIMIT = 5
HOTEL_PERFORMANCE_LIMIT = 10
DAILY_BOOKINGS_LIMIT = 7

_CANCELLED = {BookingStatus.cancelled, BookingStatus.refunded}


@dataclass(frozen=True)
class Totals:
    count: int
    revenue: float


@dataclass
class _DestinationAcc:
    count: int = 0
    revenue: float = 0.0


@dataclass
class _HotelAcc:
    hotel: HotelRecord
    count: int = 0
    revenue: float = 0.0


def totals(bookings: Iterable[BookingRecord]) -> Totals:
    count = 0
    revenue = 0.0
    for booking in bookings:
        count += 1
        revenue += booking.revenue
    return Totals(count=count, revenue=round_money(revenue))


def created_between(
    bookings: Iterable[BookingRecord],
    start: datetime,
    end: datetime | None = None,
) -> list[BookingRecord]:
    """Bookings with ``start <= createdAt`` and, when given, ``createdAt < end``."""
    return [
        b for b in bookings
        if b.createdAt >= start and (end is None or b.createdAt < end)
    ]


def growth_rate(current: float, previous: float) -> float:
    """Percentage change; a zero base always reports 0."""
    if previous > 0:
        return round_money((current - previous) / previous * 100)
    return 0.0


def average_booking_value(bookings: list[BookingRecord]) -> float:
    if not bookings:
        return 0.0
    return round_money(sum(b.revenue for b in bookings) / len(bookings))


def cancellation_rate(bookings: list[BookingRecord]) -> float:
    if not bookings:
        return 0.0
    cancelled = sum(1 for b in bookings if b.status in _CANCELLED)
    return round_money(cancelled / len(bookings) * 100)


def status_breakdown(bookings: Iterable[BookingRecord]) -> dict[str, int]:
    counts = {status.value: 0 for status in BookingStatus}
    for booking in bookings:
        counts[booking.status.value] += 1
    return counts


def payment_status_breakdown(bookings: Iterable[BookingRecord]) -> dict[str, int]:
    counts = {status.value: 0 for status in PaymentStatus}
    for booking in bookings:
        counts[booking.paymentStatus.value] += 1
    return counts


# --- destination breakdown ---


def _destination_rank(bucket: DestinationBucket) -> tuple[int, float]:
    return bucket.count, bucket.totalRevenue


def group_by_destination(
    bookings: Iterable[BookingRecord], hotels: Iterable[HotelRecord]
) -> list[DestinationBucket]:
    """Join bookings to hotels and sum per city, sorted by count descending.

    Bookings whose hotel is not in ``hotels`` are dropped. ``avgPrice`` is
    the mean nightly price of the distinct booked hotels in the city.
    """
    by_id = {h.id: h for h in hotels}
    groups: dict[str, _DestinationAcc] = {}
    prices: dict[str, dict[str, float]] = {}

    for booking in bookings:
        hotel = by_id.get(booking.hotelId)
        if hotel is None:
            continue
        acc = groups.setdefault(hotel.city, _DestinationAcc())
        acc.count += 1
        acc.revenue += booking.revenue
        prices.setdefault(hotel.city, {})[hotel.id] = hotel.pricePerNight

    buckets = [
        DestinationBucket(
            city=city,
            count=acc.count,
            totalRevenue=round_money(acc.revenue),
            avgPrice=round_money(sum(prices[city].values()) / len(prices[city])),
        )
        for city, acc in groups.items()
    ]
    return sorted(buckets, key=_destination_rank, reverse=True)


def destinations_from_hotels(
    hotels: Iterable[HotelRecord], limit: int = POPULAR_DESTINATIONS_LIMIT
) -> list[DestinationBucket]:
    """Fallback built from the hotels' own counters.

    ``count`` is the number of hotels in the city and ``avgPrice`` is the
    first listed hotel's price there.
    """
    groups: dict[str, DestinationBucket] = {}
    for hotel in hotels:
        bucket = groups.get(hotel.city)
        if bucket is None:
            groups[hotel.city] = DestinationBucket(
                city=hotel.city,
                count=1,
                totalRevenue=hotel.totalRevenue,
                avgPrice=hotel.pricePerNight,
            )
        else:
            bucket.count += 1
            bucket.totalRevenue += hotel.totalRevenue

    for bucket in groups.values():
        bucket.totalRevenue = round_money(bucket.totalRevenue)

    ranked = sorted(groups.values(), key=_destination_rank, reverse=True)
    return ranked[:limit]


def popular_destinations(
    bookings: list[BookingRecord],
    hotels: list[HotelRecord],
    limit: int = POPULAR_DESTINATIONS_LIMIT,
) -> list[DestinationBucket]:
    grouped = group_by_destination(bookings, hotels)
    if not grouped:
        return destinations_from_hotels(hotels, limit)
    return grouped[:limit]


# --- hotel breakdown ---


def _hotel_rank(bucket: HotelBucket) -> tuple[int, float]:
    return bucket.bookingCount, bucket.totalRevenue


def group_by_hotel(
    bookings: Iterable[BookingRecord], hotels: Iterable[HotelRecord]
) -> list[HotelBucket]:
    by_id = {h.id: h for h in hotels}
    groups: dict[str, _HotelAcc] = {}

    for booking in bookings:
        hotel = by_id.get(booking.hotelId)
        if hotel is None:
            continue
        acc = groups.setdefault(hotel.id, _HotelAcc(hotel=hotel))
        acc.count += 1
        acc.revenue += booking.revenue

    buckets = [_hotel_bucket(acc.hotel, acc.count, acc.revenue) for acc in groups.values()]
    return sorted(buckets, key=_hotel_rank, reverse=True)


def performance_from_hotels(
    hotels: Iterable[HotelRecord], limit: int = HOTEL_PERFORMANCE_LIMIT
) -> list[HotelBucket]:
    buckets = [_hotel_bucket(h, h.totalBookings, h.totalRevenue) for h in hotels]
    return sorted(buckets, key=_hotel_rank, reverse=True)[:limit]


def hotel_performance(
    bookings: list[BookingRecord],
    hotels: list[HotelRecord],
    limit: int = HOTEL_PERFORMANCE_LIMIT,
) -> list[HotelBucket]:
    grouped = group_by_hotel(bookings, hotels)
    if not grouped:
        return performance_from_hotels(hotels, limit)
    return grouped[:limit]


def _hotel_bucket(hotel: HotelRecord, count: int, revenue: float) -> HotelBucket:
    return HotelBucket(
        hotelId=hotel.id,
        name=hotel.name,
        city=hotel.city,
        starRating=hotel.starRating,
        pricePerNight=hotel.pricePerNight,
        bookingCount=count,
        totalRevenue=round_money(revenue),
    )


# --- daily series ---


def group_by_day(
    bookings: Iterable[BookingRecord], tz: tzinfo = UTC
) -> list[DailyBucket]:
    counts: dict[str, int] = {}
    revenue: dict[str, float] = {}
    for booking in bookings:
        key = local_date(booking.createdAt, tz).isoformat()
        counts[key] = counts.get(key, 0) + 1
        revenue[key] = revenue.get(key, 0.0) + booking.revenue

    return [
        DailyBucket(date=key, bookings=counts[key], revenue=round_money(revenue[key]))
        for key in sorted(counts)
    ]


def daily_bookings(
    bookings: Iterable[BookingRecord],
    tz: tzinfo = UTC,
    limit: int = DAILY_BOOKINGS_LIMIT,
) -> list[DailyBucket]:
    """Most recent ``limit`` distinct creation dates, oldest first."""
    series = group_by_day(bookings, tz)
    return series[-limit:]
