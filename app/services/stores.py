import logging
from datetime import datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from app.exceptions.custom import StoreError
from app.schemas.records import BookingRecord, HotelRecord

logger = logging.getLogger(__name__)

BOOKINGS_COLLECTION = "bookings"
HOTELS_COLLECTION = "hotels"
USERS_COLLECTION = "users"
COLLECTIONS = (BOOKINGS_COLLECTION, HOTELS_COLLECTION, USERS_COLLECTION)

HOTEL_PROJECTION = {
    "userId": 1,
    "name": 1,
    "city": 1,
    "country": 1,
    "starRating": 1,
    "pricePerNight": 1,
    "totalBookings": 1,
    "totalRevenue": 1,
}


def _with_string_id(doc: dict[str, Any]) -> dict[str, Any]:
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = str(doc["_id"])
    return data


class BookingStore:
    def __init__(self, db: AsyncDatabase):
        self._collection = db[BOOKINGS_COLLECTION]

    async def list_bookings(self, since: datetime | None = None) -> list[BookingRecord]:
        query: dict[str, Any] = {}
        if since is not None:
            query["createdAt"] = {"$gte": since}

        try:
            docs = await self._collection.find(query).to_list()
        except PyMongoError as exc:
            raise StoreError(str(exc), operation="list_bookings") from exc

        bookings = [BookingRecord(**_with_string_id(doc)) for doc in docs]
        logger.debug("Fetched %d bookings (since=%s)", len(bookings), since)
        return bookings


class HotelStore:
    def __init__(self, db: AsyncDatabase):
        self._collection = db[HOTELS_COLLECTION]

    async def list_hotels(self) -> list[HotelRecord]:
        try:
            docs = await self._collection.find({}, HOTEL_PROJECTION).to_list()
        except PyMongoError as exc:
            raise StoreError(str(exc), operation="list_hotels") from exc

        hotels = [HotelRecord(**_with_string_id(doc)) for doc in docs]
        logger.debug("Fetched %d hotels", len(hotels))
        return hotels

    async def get_hotel(self, hotel_id: str) -> HotelRecord | None:
        try:
            oid = ObjectId(hotel_id)
        except (InvalidId, TypeError):
            return None

        try:
            doc = await self._collection.find_one({"_id": oid}, HOTEL_PROJECTION)
        except PyMongoError as exc:
            raise StoreError(str(exc), operation="get_hotel") from exc

        if doc is None:
            return None
        return HotelRecord(**_with_string_id(doc))


class UserStore:
    def __init__(self, db: AsyncDatabase):
        self._collection = db[USERS_COLLECTION]

    async def count_users(self) -> int:
        try:
            return await self._collection.count_documents({})
        except PyMongoError as exc:
            raise StoreError(str(exc), operation="count_users") from exc


class DatabaseProbe:
    """Connection checks for the health endpoints."""

    def __init__(self, db: AsyncDatabase):
        self._db = db

    @property
    def name(self) -> str:
        return self._db.name

    async def ping(self) -> bool:
        try:
            await self._db.command("ping")
        except PyMongoError as exc:
            logger.warning("Database ping failed: %s", exc)
            return False
        return True

    async def count_collections(self) -> int:
        try:
            return len(await self._db.list_collection_names())
        except PyMongoError as exc:
            raise StoreError(str(exc), operation="list_collections") from exc
