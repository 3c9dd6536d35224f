"""Tests for the booking aggregations in aggregator.py."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.analytics.aggregator import (
    average_booking_value,
    cancellation_rate,
    created_between,
    daily_bookings,
    destinations_from_hotels,
    group_by_day,
    group_by_destination,
    group_by_hotel,
    growth_rate,
    hotel_performance,
    payment_status_breakdown,
    performance_from_hotels,
    popular_destinations,
    status_breakdown,
    totals,
)
from app.analytics.windows import month_windows
from app.schemas.records import BookingRecord, HotelRecord

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

_counter = iter(range(10_000))


def _booking(created: datetime, cost: float | None = 100.0, hotel_id: str = "h1", **kwargs) -> BookingRecord:
    return BookingRecord(
        id=f"b{next(_counter)}",
        userId="u1",
        hotelId=hotel_id,
        totalCost=cost,
        createdAt=created,
        **kwargs,
    )


def _hotel(hotel_id: str, city: str, price: float = 100.0, **kwargs) -> HotelRecord:
    return HotelRecord(id=hotel_id, name=f"Hotel {hotel_id}", city=city, pricePerNight=price, **kwargs)


# --- totals and windows ---


def test_totals_treats_missing_cost_as_zero():
    bookings = [_booking(NOW, 120.5), _booking(NOW, None), _booking(NOW, 79.5)]
    result = totals(bookings)
    assert result.count == 3
    assert result.revenue == 200.0


def test_totals_empty():
    result = totals([])
    assert result.count == 0
    assert result.revenue == 0.0


def test_created_between_start_inclusive_end_exclusive():
    start = datetime(2026, 10, 1, tzinfo=UTC)
    end = datetime(2026, 10, 10, tzinfo=UTC)
    at_start = _booking(start)
    inside = _booking(start + timedelta(days=3))
    at_end = _booking(end)
    before = _booking(start - timedelta(seconds=1))

    assert created_between([at_start, inside, at_end, before], start, end) == [at_start, inside]
    assert created_between([at_start, inside, at_end, before], start) == [at_start, inside, at_end]


def test_naive_created_at_is_read_as_utc():
    booking = _booking(datetime(2026, 10, 1, 0, 0))
    assert booking.createdAt.tzinfo is not None
    assert created_between([booking], datetime(2026, 10, 1, tzinfo=UTC)) == [booking]


# --- growth rate ---


@pytest.mark.parametrize("current", [0, 1, 50, 1000.5])
def test_growth_rate_zero_base_is_zero(current):
    assert growth_rate(current, 0) == 0


@pytest.mark.parametrize(
    "current,previous,expected",
    [(150, 100, 50.0), (50, 100, -50.0), (100, 100, 0.0), (1, 3, -66.67), (600, 100, 500.0)],
)
def test_growth_rate_percentage_change(current, previous, expected):
    assert growth_rate(current, previous) == expected


def test_month_over_month_revenue_scenario():
    """3 bookings this month (600) vs 2 last month (100) → 500% growth."""
    bookings = [
        _booking(datetime(2026, 10, 2, tzinfo=UTC), 100),
        _booking(datetime(2026, 10, 5, tzinfo=UTC), 200),
        _booking(datetime(2026, 10, 10, tzinfo=UTC), 300),
        _booking(datetime(2026, 9, 3, tzinfo=UTC), 50),
        _booking(datetime(2026, 9, 20, tzinfo=UTC), 50),
    ]
    windows = month_windows(NOW)
    current = totals(created_between(bookings, windows.current_start, NOW)).revenue
    previous = totals(created_between(bookings, windows.previous_start, windows.current_start)).revenue

    assert current == 600
    assert previous == 100
    assert growth_rate(current, previous) == 500


# --- status breakdowns ---


def test_status_breakdowns_include_every_member():
    bookings = [
        _booking(NOW, status="confirmed", paymentStatus="paid"),
        _booking(NOW, status="confirmed", paymentStatus="paid"),
        _booking(NOW, status="cancelled", paymentStatus="refunded"),
        _booking(NOW),
    ]
    assert status_breakdown(bookings) == {
        "pending": 1,
        "confirmed": 2,
        "cancelled": 1,
        "completed": 0,
        "refunded": 0,
    }
    assert payment_status_breakdown(bookings) == {
        "pending": 1,
        "paid": 2,
        "failed": 0,
        "refunded": 1,
    }


def test_cancellation_rate_counts_cancelled_and_refunded():
    bookings = [
        _booking(NOW, status="cancelled"),
        _booking(NOW, status="refunded"),
        _booking(NOW, status="completed"),
    ]
    assert cancellation_rate(bookings) == 66.67
    assert cancellation_rate([]) == 0.0


def test_average_booking_value():
    bookings = [_booking(NOW, 100), _booking(NOW, 250), _booking(NOW, None)]
    assert average_booking_value(bookings) == pytest.approx(116.67)
    assert average_booking_value([]) == 0.0


# --- destinations ---


def test_group_by_destination_joins_and_sorts():
    hotels = [_hotel("h1", "Lisbon", 100), _hotel("h2", "Porto", 80), _hotel("h3", "Lisbon", 200)]
    bookings = [
        _booking(NOW, 100, "h1"),
        _booking(NOW, 50, "h2"),
        _booking(NOW, 300, "h3"),
        _booking(NOW, 100, "h1"),
        _booking(NOW, 999, "missing"),
    ]
    result = group_by_destination(bookings, hotels)

    assert [d.city for d in result] == ["Lisbon", "Porto"]
    lisbon = result[0]
    assert lisbon.count == 3
    assert lisbon.totalRevenue == 500
    # Mean of the distinct booked hotels' prices, not weighted by bookings
    assert lisbon.avgPrice == 150
    assert result[1].count == 1


def test_popular_destinations_limited_to_five():
    hotels = [_hotel(f"h{i}", f"City {i}") for i in range(8)]
    bookings = [_booking(NOW, 10, f"h{i}") for i in range(8) for _ in range(i + 1)]

    result = popular_destinations(bookings, hotels)

    assert len(result) == 5
    counts = [d.count for d in result]
    assert counts == sorted(counts, reverse=True)
    assert result[0].city == "City 7"


def test_popular_destinations_falls_back_to_hotel_counters():
    """No booking references a known hotel → derived from hotel records."""
    hotels = [
        _hotel("h1", "Rome", 90, totalRevenue=300),
        _hotel("h2", "Paris", 150, totalRevenue=500),
    ]
    bookings = [_booking(NOW, 100, "unknown")]

    result = popular_destinations(bookings, hotels)

    assert len(result) == 2
    assert [d.totalRevenue for d in result] == [500, 300]
    assert [d.city for d in result] == ["Paris", "Rome"]
    assert all(d.count == 1 for d in result)


def test_destinations_from_hotels_groups_by_city():
    hotels = [
        _hotel("h1", "Rome", 90, totalRevenue=300),
        _hotel("h2", "Rome", 120, totalRevenue=200.25),
        _hotel("h3", "Paris", 150, totalRevenue=900),
    ]
    result = destinations_from_hotels(hotels)

    assert result[0].city == "Rome"
    assert result[0].count == 2
    assert result[0].totalRevenue == 500.25
    assert result[0].avgPrice == 90
    assert result[1].city == "Paris"


def test_popular_destinations_empty_snapshot():
    assert popular_destinations([], []) == []


# --- hotel performance ---


def test_group_by_hotel_projects_hotel_fields():
    hotels = [_hotel("h1", "Lisbon", 100, starRating=4), _hotel("h2", "Porto", 80, starRating=3)]
    bookings = [_booking(NOW, 100, "h2"), _booking(NOW, 50, "h2"), _booking(NOW, 75, "h1")]

    result = group_by_hotel(bookings, hotels)

    assert [h.hotelId for h in result] == ["h2", "h1"]
    top = result[0]
    assert top.name == "Hotel h2"
    assert top.city == "Porto"
    assert top.starRating == 3
    assert top.pricePerNight == 80
    assert top.bookingCount == 2
    assert top.totalRevenue == 150


def test_hotel_performance_limited_to_ten():
    hotels = [_hotel(f"h{i}", "Lisbon") for i in range(12)]
    bookings = [_booking(NOW, 10, f"h{i}") for i in range(12) for _ in range(i + 1)]

    result = hotel_performance(bookings, hotels)

    assert len(result) == 10
    assert result[0].hotelId == "h11"
    counts = [h.bookingCount for h in result]
    assert counts == sorted(counts, reverse=True)


def test_hotel_performance_falls_back_to_hotel_counters():
    hotels = [
        _hotel("h1", "Rome", totalBookings=3, totalRevenue=300),
        _hotel("h2", "Paris", totalBookings=7, totalRevenue=700),
    ]
    result = hotel_performance([], hotels)

    assert [h.hotelId for h in result] == ["h2", "h1"]
    assert result[0].bookingCount == 7
    assert result[0].totalRevenue == 700


def test_performance_from_hotels_respects_limit():
    hotels = [_hotel(f"h{i}", "Rome", totalBookings=i) for i in range(15)]
    assert len(performance_from_hotels(hotels)) == 10


def test_tied_groups_keep_stable_order():
    hotels = [_hotel("h1", "A"), _hotel("h2", "B"), _hotel("h3", "C")]
    bookings = [_booking(NOW, 10, "h2"), _booking(NOW, 10, "h1"), _booking(NOW, 10, "h3")]

    first = group_by_destination(bookings, hotels)
    second = group_by_destination(bookings, hotels)

    assert [d.city for d in first] == ["B", "A", "C"]
    assert [d.city for d in first] == [d.city for d in second]


# --- daily series ---


def test_group_by_day_ignores_time_of_day():
    bookings = [
        _booking(datetime(2026, 10, 18, 0, 1, tzinfo=UTC), 10),
        _booking(datetime(2026, 10, 18, 23, 59, tzinfo=UTC), 20),
        _booking(datetime(2026, 10, 17, 12, 0, tzinfo=UTC), 5),
    ]
    result = group_by_day(bookings)

    assert [(d.date, d.bookings, d.revenue) for d in result] == [
        ("2026-10-17", 1, 5),
        ("2026-10-18", 2, 30),
    ]


def test_daily_bookings_keeps_most_recent_seven_dates():
    """10 distinct dates → the 7 most recent, ascending."""
    start = datetime(2026, 10, 1, 9, 0, tzinfo=UTC)
    bookings = [_booking(start + timedelta(days=i)) for i in reversed(range(10))]

    result = daily_bookings(bookings)

    assert [d.date for d in result] == [f"2026-10-{day:02d}" for day in range(4, 11)]


def test_daily_bookings_short_series_untouched():
    bookings = [_booking(datetime(2026, 10, d, tzinfo=UTC)) for d in (5, 3, 4)]
    result = daily_bookings(bookings)
    assert [d.date for d in result] == ["2026-10-03", "2026-10-04", "2026-10-05"]


# --- partition sums ---


def test_partitions_sum_to_total_revenue():
    hotels = [_hotel("h1", "Lisbon"), _hotel("h2", "Porto"), _hotel("h3", "Lisbon")]
    bookings = [
        _booking(NOW - timedelta(days=i), cost, f"h{(i % 3) + 1}")
        for i, cost in enumerate([120, 80.5, None, 45.25, 300, 99.99, 10])
    ]
    total = totals(bookings).revenue

    assert sum(d.totalRevenue for d in group_by_destination(bookings, hotels)) == pytest.approx(total)
    assert sum(h.totalRevenue for h in group_by_hotel(bookings, hotels)) == pytest.approx(total)
    assert sum(d.revenue for d in group_by_day(bookings)) == pytest.approx(total)
    assert sum(d.count for d in group_by_destination(bookings, hotels)) == len(bookings)


def test_fractional_star_rating_is_kept():
    hotels = [_hotel("h1", "Lisbon", 100, starRating=4.5)]

    result = group_by_hotel([_booking(NOW, 100, "h1")], hotels)

    assert result[0].starRating == 4.5


@pytest.mark.parametrize("rating", [0.5, 5.5])
def test_star_rating_outside_one_to_five_is_rejected(rating):
    with pytest.raises(ValidationError):
        _hotel("h1", "Lisbon", starRating=rating)
