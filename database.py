"""
Database access

MongoDB connection settings and the Store object handed to every request handler.
Collections: hotels, rooms, reservations.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson.objectid import ObjectId
from dotenv import load_dotenv
from pymongo import MongoClient, ReturnDocument
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger("hotel-booking.database")

DEFAULT_DATABASE_URL = "mongodb://localhost:27017/hotel-booking"
DEFAULT_DATABASE_NAME = "hotel-booking"


def now() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return the ObjectId for ``value`` or None when it is not a valid identifier."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string; None when it does not parse."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


# Fields stored as native types; PUT bodies arrive as JSON strings.
REFERENCE_FIELDS = ("hotelId", "roomId")
DATE_FIELDS = ("checkInDate", "checkOutDate")


def coerce_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Convert known reference and date fields to ObjectId/datetime when they parse.

    Values that do not parse are kept as sent: updates are not validated.
    """
    out = dict(changes)
    for key in REFERENCE_FIELDS:
        if key in out:
            out[key] = parse_object_id(out[key]) or out[key]
    for key in DATE_FIELDS:
        if key in out:
            out[key] = parse_datetime(out[key]) or out[key]
    return out


def serialize_doc(doc):
    """Make a Mongo document JSON friendly: ``_id`` becomes ``id`` and ObjectIds become strings."""
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, list):
        return [serialize_doc(item) for item in doc]
    if not isinstance(doc, dict):
        return doc
    out = {}
    for key, value in doc.items():
        if key == "_id":
            key = "id"
        out[key] = serialize_doc(value)
    return out


class Store:
    """Access to the three booking collections of one database."""

    def __init__(self, db: Database):
        self.db = db
        self.hotels = db["hotels"]
        self.rooms = db["rooms"]
        self.reservations = db["reservations"]

    @property
    def name(self) -> str:
        return self.db.name

    def ping(self) -> None:
        self.db.command("ping")

    def insert(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        stamp = now()
        data = dict(data)
        data["createdAt"] = stamp
        data["updatedAt"] = stamp
        self.db[collection].insert_one(data)
        return data

    def update(self, collection: str, oid: ObjectId, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow ``$set`` merge. Returns the updated document or None if nothing matched."""
        changes = coerce_fields({k: v for k, v in changes.items() if k not in ("_id", "id")})
        if not changes:
            return self.db[collection].find_one({"_id": oid})
        changes["updatedAt"] = now()
        return self.db[collection].find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, collection: str, oid: ObjectId) -> bool:
        result = self.db[collection].delete_one({"_id": oid})
        return result.deleted_count == 1

    def find_page(self, collection: str, filter_dict: Dict[str, Any], skip: int, limit: int):
        """Return one page of matching documents and the total number of matches."""
        coll = self.db[collection]
        items = list(coll.find(filter_dict).skip(skip).limit(limit))
        total = coll.count_documents(filter_dict)
        return items, total

    def populate(self, docs: List[Dict[str, Any]], field: str, collection: str) -> List[Dict[str, Any]]:
        """Replace the reference stored in ``field`` by the referenced document (None if it is gone)."""
        ids = {doc.get(field) for doc in docs if isinstance(doc.get(field), ObjectId)}
        found = {}
        if ids:
            found = {d["_id"]: d for d in self.db[collection].find({"_id": {"$in": list(ids)}})}
        for doc in docs:
            if field in doc:
                ref = doc[field]
                doc[field] = found.get(ref) if isinstance(ref, ObjectId) else None
        return docs

    def aggregate(self, collection: str, pipeline: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return list(self.db[collection].aggregate(list(pipeline)))


def database_url() -> str:
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def connect(url: Optional[str] = None, name: Optional[str] = None) -> Store:
    """Open a client for ``url`` and check the server answers. Raises on failure."""
    url = url or database_url()
    client = MongoClient(url, serverSelectionTimeoutMS=5000)
    name = name or os.getenv("DATABASE_NAME")
    if not name:
        default = client.get_default_database(default=DEFAULT_DATABASE_NAME)
        name = default.name
    store = Store(client[name])
    store.ping()
    logger.info("Connected to MongoDB database %s", name)
    return store
