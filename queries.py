"""Translate raw query-string parameters into MongoDB filters.

Numeric and date parameters that do not parse are ignored: the matching
constraint is left out of the filter instead of failing the request.
"""

import re
from typing import Any, Dict, Optional, Tuple

from database import parse_datetime, parse_object_id

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def contains(text: str) -> Dict[str, str]:
    """Case-insensitive substring match."""
    return {"$regex": re.escape(text), "$options": "i"}


def value_range(low, high) -> Optional[Dict[str, Any]]:
    bounds = {}
    if low is not None:
        bounds["$gte"] = low
    if high is not None:
        bounds["$lte"] = high
    return bounds or None


def pagination(page: Optional[str], limit: Optional[str]) -> Tuple[int, int, int]:
    """Return ``(page, limit, skip)`` for 1-based pages."""
    page_num = to_int(page)
    if page_num is None or page_num < 1:
        page_num = DEFAULT_PAGE
    size = to_int(limit)
    if size is None or size < 1:
        size = DEFAULT_LIMIT
    return page_num, size, (page_num - 1) * size


def hotel_filter(ville: Optional[str] = None, etoiles: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"active": True}
    if ville:
        query["address.city"] = contains(ville)
    stars = to_int(etoiles)
    if stars is not None:
        query["starRating"] = stars
    return query


def advanced_hotel_filter(
    ville: Optional[str] = None,
    etoiles_min: Optional[str] = None,
    etoiles_max: Optional[str] = None,
    actif: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    # Any value other than "true"/"false" lists both active and inactive hotels.
    if actif is None or actif == "true":
        query["active"] = True
    elif actif == "false":
        query["active"] = False
    if ville:
        query["address.city"] = contains(ville)
    stars = value_range(to_int(etoiles_min), to_int(etoiles_max))
    if stars:
        query["starRating"] = stars
    return query


def room_filter(
    hotel_id: Optional[str] = None,
    room_type: Optional[str] = None,
    prix_min: Optional[str] = None,
    prix_max: Optional[str] = None,
    disponible: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if hotel_id:
        query["hotelId"] = parse_object_id(hotel_id) or hotel_id
    if room_type:
        query["roomType"] = room_type
    if disponible is not None:
        query["available"] = disponible == "true"
    price = value_range(to_float(prix_min), to_float(prix_max))
    if price:
        query["pricePerNight"] = price
    return query


def reservation_filter(
    statut: Optional[str] = None,
    date_debut: Optional[str] = None,
    date_fin: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if statut:
        query["status"] = statut
    check_in = value_range(parse_datetime(date_debut), parse_datetime(date_fin))
    if check_in:
        query["checkInDate"] = check_in
    return query
