"""Aggregation reports over the booking collections.

Every report runs its pipeline on each call; nothing is cached.
"""

from typing import Any, Dict, List

from database import Store, serialize_doc

TOP_HOTEL_GROUPS = 5
TOP_ROOMS = 10


def _round(rows: List[Dict[str, Any]], field: str) -> List[Dict[str, Any]]:
    for row in rows:
        if row.get(field) is not None:
            row[field] = round(row[field], 2)
    return rows


def top_hotels_by_stars(store: Store) -> List[Dict[str, Any]]:
    pipeline = [
        {"$group": {"_id": "$starRating", "count": {"$sum": 1}, "hotels": {"$push": "$name"}}},
        {"$sort": {"_id": -1}},
        {"$limit": TOP_HOTEL_GROUPS},
        {"$project": {"_id": 0, "starRating": "$_id", "count": 1, "hotels": 1}},
    ]
    return store.aggregate("hotels", pipeline)


def room_stats_by_type(store: Store) -> List[Dict[str, Any]]:
    pipeline = [
        {"$group": {"_id": "$roomType", "count": {"$sum": 1}, "averagePrice": {"$avg": "$pricePerNight"}}},
        {"$sort": {"count": -1}},
        {"$project": {"_id": 0, "roomType": "$_id", "count": 1, "averagePrice": 1}},
    ]
    return _round(store.aggregate("rooms", pipeline), "averagePrice")


def most_booked_rooms(store: Store) -> List[Dict[str, Any]]:
    pipeline = [
        {
            "$lookup": {
                "from": "reservations",
                "localField": "_id",
                "foreignField": "roomId",
                "as": "reservations",
            }
        },
        {
            "$project": {
                "roomNumber": 1,
                "roomType": 1,
                "pricePerNight": 1,
                "reservationCount": {"$size": "$reservations"},
            }
        },
        {"$sort": {"reservationCount": -1}},
        {"$limit": TOP_ROOMS},
    ]
    return serialize_doc(store.aggregate("rooms", pipeline))


def reservation_stats(store: Store) -> Dict[str, Any]:
    pipeline = [
        {"$group": {"_id": "$status", "count": {"$sum": 1}, "revenue": {"$sum": "$totalPrice"}}},
        {"$sort": {"count": -1}},
        {"$project": {"_id": 0, "status": "$_id", "count": 1, "revenue": 1}},
    ]
    stats = _round(store.aggregate("reservations", pipeline), "revenue")
    return {"stats": stats, "total": store.reservations.count_documents({})}


def complete_reservations(store: Store) -> List[Dict[str, Any]]:
    """Reservations joined with their hotel and room.

    ``$unwind`` drops reservations whose hotel or room no longer exists.
    """
    pipeline = [
        {"$lookup": {"from": "hotels", "localField": "hotelId", "foreignField": "_id", "as": "hotel"}},
        {"$lookup": {"from": "rooms", "localField": "roomId", "foreignField": "_id", "as": "room"}},
        {"$unwind": "$hotel"},
        {"$unwind": "$room"},
        {
            "$project": {
                "hotelName": "$hotel.name",
                "hotelStarRating": "$hotel.starRating",
                "roomNumber": "$room.roomNumber",
                "roomType": "$room.roomType",
                "clientName": "$client.name",
                "clientEmail": "$client.email",
                "checkInDate": 1,
                "checkOutDate": 1,
                "totalPrice": 1,
                "status": 1,
            }
        },
        {"$sort": {"checkInDate": -1}},
    ]
    return serialize_doc(store.aggregate("reservations", pipeline))
