from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
import pytest
from httpx import ASGITransport

from app.exceptions.custom import StoreError
from app.schemas.records import BookingRecord, HotelRecord

# Monday; the week containing it starts on Sunday 2026-10-18.
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@dataclass
class FakeData:
    bookings: list[BookingRecord] = field(default_factory=list)
    hotels: list[HotelRecord] = field(default_factory=list)
    users: int = 0
    fail_with: str | None = None
    database_up: bool = True


class FakeBookingStore:
    def __init__(self, data: FakeData):
        self._data = data
        self.calls: list[datetime | None] = []

    async def list_bookings(self, since: datetime | None = None) -> list[BookingRecord]:
        self.calls.append(since)
        if self._data.fail_with:
            raise StoreError(self._data.fail_with, operation="list_bookings")
        return [b for b in self._data.bookings if since is None or b.createdAt >= since]


class FakeHotelStore:
    def __init__(self, data: FakeData):
        self._data = data

    async def list_hotels(self) -> list[HotelRecord]:
        return list(self._data.hotels)

    async def get_hotel(self, hotel_id: str) -> HotelRecord | None:
        return next((h for h in self._data.hotels if h.id == hotel_id), None)


class FakeUserStore:
    def __init__(self, data: FakeData):
        self._data = data

    async def count_users(self) -> int:
        return self._data.users


class FakeDatabaseProbe:
    name = "lodgelogic-test"

    def __init__(self, data: FakeData):
        self._data = data

    async def ping(self) -> bool:
        return self._data.database_up

    async def count_collections(self) -> int:
        return 3


@pytest.fixture
def data():
    return FakeData()


@pytest.fixture
def insights(data):
    from app.metrics import RequestMetrics
    from app.services.insights import InsightsService
    from app.services.system_metrics import SystemMetricsService

    return InsightsService(
        FakeBookingStore(data),
        FakeHotelStore(data),
        FakeUserStore(data),
        SystemMetricsService(),
        RequestMetrics(),
        clock=lambda: NOW,
    )


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("MONGODB_CONNECTION_STRING", "mongodb://localhost:27017")
    monkeypatch.setenv("MONGODB_DATABASE", "lodgelogic-test")


@pytest.fixture
async def client(mock_env, data):
    from app.main import app, lifespan
    from app.services.insights import InsightsService

    async with lifespan(app):
        # Swap the Mongo-backed collaborators for in-memory fakes
        app.state.insights_service = InsightsService(
            FakeBookingStore(data),
            FakeHotelStore(data),
            FakeUserStore(data),
            app.state.system_metrics,
            app.state.request_metrics,
            clock=lambda: NOW,
        )
        app.state.database_probe = FakeDatabaseProbe(data)
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
