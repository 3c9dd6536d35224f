from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class BookingStatus(StrEnum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"
    refunded = "refunded"


class PaymentStatus(StrEnum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class BookingRecord(BaseModel):
    id: str
    userId: str
    hotelId: str
    firstName: str | None = None
    lastName: str | None = None
    email: str | None = None
    phone: str | None = None
    adultCount: int = 0
    childCount: int = 0
    checkIn: datetime | None = None
    checkOut: datetime | None = None
    totalCost: float | None = Field(default=None, ge=0)
    status: BookingStatus = BookingStatus.pending
    paymentStatus: PaymentStatus = PaymentStatus.pending
    refundAmount: float = 0
    createdAt: datetime
    updatedAt: datetime | None = None

    @field_validator("checkIn", "checkOut", "createdAt", "updatedAt")
    @classmethod
    def _naive_is_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def revenue(self) -> float:
        return self.totalCost or 0


class HotelRecord(BaseModel):
    id: str
    userId: str | None = None
    name: str
    city: str
    country: str | None = None
    starRating: float = Field(default=1, ge=1, le=5)
    pricePerNight: float = Field(default=0, ge=0)
    totalBookings: int = 0
    totalRevenue: float = 0
