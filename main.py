"""
Hotel Booking API

FastAPI entry point. Routes live under /api:
    /api/hotels        - hotels, advanced search, top by stars
    /api/rooms         - rooms, stats by type, most booked
    /api/reservations  - reservations, stats, joined listing
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import queries
import reports
from database import Store, connect, parse_object_id, serialize_doc
from mirror import HotelMirror, mirror_from_env
from schemas import HotelCreate, ReservationCreate, RoomCreate

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("hotel-booking")

VERSION = "1.0.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_store(request: Request) -> Store:
    return request.app.state.store


def object_id(value: str):
    oid = parse_object_id(value)
    if oid is None:
        raise HTTPException(status_code=400, detail="Invalid identifier")
    return oid


def update_or_404(store: Store, collection: str, item_id: str, payload: Dict[str, Any], label: str):
    doc = store.update(collection, object_id(item_id), payload)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return serialize_doc(doc)


def delete_or_404(store: Store, collection: str, item_id: str, label: str):
    if not store.delete(collection, object_id(item_id)):
        raise HTTPException(status_code=404, detail=f"{label} not found")
    logger.info("%s %s deleted", label, item_id)
    return {"message": f"{label} deleted"}


def pagination_body(page: int, limit: int, total: int):
    return {"page": page, "limit": limit, "total": total}


api = APIRouter(prefix="/api")


# Hotels

@api.post("/hotels", status_code=201)
def create_hotel(payload: HotelCreate, request: Request, store: Store = Depends(get_store)):
    doc = serialize_doc(store.insert("hotels", payload.to_document()))
    logger.info("Hotel %s created", doc["id"])
    hotel_mirror: Optional[HotelMirror] = request.app.state.mirror
    if hotel_mirror is not None:
        hotel_mirror.append(doc)
    return {"message": "Hotel created", "hotel": doc}


@api.get("/hotels")
def list_hotels(
    ville: Optional[str] = None,
    etoiles: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: Store = Depends(get_store),
):
    page_num, size, skip = queries.pagination(page, limit)
    items, total = store.find_page("hotels", queries.hotel_filter(ville, etoiles), skip, size)
    return {"hotels": serialize_doc(items), "pagination": pagination_body(page_num, size, total)}


@api.get("/hotels/recherche/avancee")
def search_hotels(
    ville: Optional[str] = None,
    etoiles_min: Optional[str] = Query(None, alias="etoilesMin"),
    etoiles_max: Optional[str] = Query(None, alias="etoilesMax"),
    actif: Optional[str] = None,
    store: Store = Depends(get_store),
):
    query = queries.advanced_hotel_filter(ville, etoiles_min, etoiles_max, actif)
    hotels = serialize_doc(list(store.hotels.find(query)))
    return {"count": len(hotels), "hotels": hotels}


@api.get("/hotels/top/etoiles")
def top_hotels(store: Store = Depends(get_store)):
    return {"topHotels": reports.top_hotels_by_stars(store)}


@api.put("/hotels/{hotel_id}")
def update_hotel(hotel_id: str, payload: Dict[str, Any] = Body(...), store: Store = Depends(get_store)):
    return {"message": "Hotel updated", "hotel": update_or_404(store, "hotels", hotel_id, payload, "Hotel")}


@api.delete("/hotels/{hotel_id}")
def delete_hotel(hotel_id: str, store: Store = Depends(get_store)):
    return delete_or_404(store, "hotels", hotel_id, "Hotel")


# Rooms

@api.post("/rooms", status_code=201)
def create_room(payload: RoomCreate, store: Store = Depends(get_store)):
    doc = serialize_doc(store.insert("rooms", payload.to_document()))
    logger.info("Room %s created", doc["id"])
    return {"message": "Room created", "room": doc}


@api.get("/rooms")
def list_rooms(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    room_type: Optional[str] = Query(None, alias="type"),
    prix_min: Optional[str] = Query(None, alias="prixMin"),
    prix_max: Optional[str] = Query(None, alias="prixMax"),
    disponible: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: Store = Depends(get_store),
):
    page_num, size, skip = queries.pagination(page, limit)
    query = queries.room_filter(hotel_id, room_type, prix_min, prix_max, disponible)
    items, total = store.find_page("rooms", query, skip, size)
    store.populate(items, "hotelId", "hotels")
    return {"rooms": serialize_doc(items), "pagination": pagination_body(page_num, size, total)}


@api.get("/rooms/stats/par-type")
def room_stats(store: Store = Depends(get_store)):
    return {"statistics": reports.room_stats_by_type(store)}


@api.get("/rooms/plus-reservees")
def most_booked_rooms(store: Store = Depends(get_store)):
    return {"topRooms": reports.most_booked_rooms(store)}


@api.put("/rooms/{room_id}")
def update_room(room_id: str, payload: Dict[str, Any] = Body(...), store: Store = Depends(get_store)):
    return {"message": "Room updated", "room": update_or_404(store, "rooms", room_id, payload, "Room")}


@api.delete("/rooms/{room_id}")
def delete_room(room_id: str, store: Store = Depends(get_store)):
    return delete_or_404(store, "rooms", room_id, "Room")


# Reservations

@api.post("/reservations", status_code=201)
def create_reservation(payload: ReservationCreate, store: Store = Depends(get_store)):
    doc = serialize_doc(store.insert("reservations", payload.to_document()))
    logger.info("Reservation %s created", doc["id"])
    return {"message": "Reservation created", "reservation": doc}


@api.get("/reservations")
def list_reservations(
    statut: Optional[str] = None,
    date_debut: Optional[str] = Query(None, alias="dateDebut"),
    date_fin: Optional[str] = Query(None, alias="dateFin"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: Store = Depends(get_store),
):
    page_num, size, skip = queries.pagination(page, limit)
    query = queries.reservation_filter(statut, date_debut, date_fin)
    items, total = store.find_page("reservations", query, skip, size)
    store.populate(items, "hotelId", "hotels")
    store.populate(items, "roomId", "rooms")
    return {"reservations": serialize_doc(items), "pagination": pagination_body(page_num, size, total)}


@api.get("/reservations/stats")
def reservation_stats(store: Store = Depends(get_store)):
    return reports.reservation_stats(store)


@api.get("/reservations/completes")
def complete_reservations(store: Store = Depends(get_store)):
    items = reports.complete_reservations(store)
    return {"reservations": items, "count": len(items)}


@api.put("/reservations/{reservation_id}")
def update_reservation(reservation_id: str, payload: Dict[str, Any] = Body(...), store: Store = Depends(get_store)):
    doc = update_or_404(store, "reservations", reservation_id, payload, "Reservation")
    return {"message": "Reservation updated", "reservation": doc}


@api.delete("/reservations/{reservation_id}")
def delete_reservation(reservation_id: str, store: Store = Depends(get_store)):
    return delete_or_404(store, "reservations", reservation_id, "Reservation")


# Error responses: always {"error": message}

def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    message = str(first.get("msg", "Invalid request")).replace("Value error, ", "")
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return JSONResponse(status_code=400, content={"error": f"{field}: {message}" if field else message})


def http_error(request: Request, exc: StarletteHTTPException):
    # Unmatched paths and methods raise the plain Starlette exception.
    if not isinstance(exc, HTTPException) and exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


def store_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(store: Optional[Store] = None, hotel_mirror: Optional[HotelMirror] = None) -> FastAPI:
    """Build the application. Without ``store`` the database is connected at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            try:
                app.state.store = connect()
            except PyMongoError as e:
                logger.error("MongoDB connection failed: %s", e)
                raise SystemExit(1)
        logger.info("Hotel Booking API started (database: %s)", app.state.store.name)
        yield
        logger.info("Hotel Booking API stopped")

    app = FastAPI(title="Hotel Booking API", version=VERSION, lifespan=lifespan)
    app.state.store = store
    app.state.mirror = hotel_mirror if hotel_mirror is not None else mirror_from_env()

    # Registered before CORSMiddleware so it runs inside it and 500s keep the CORS headers.
    @app.middleware("http")
    async def catch_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            return store_error(request, e)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        return await call_next(request)

    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(PyMongoError, store_error)

    @app.get("/")
    def read_root():
        return {
            "message": "Hotel Booking API",
            "version": VERSION,
            "totalRoutes": 19,
        }

    app.include_router(api)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 3000))
    uvicorn.run(app, host="0.0.0.0", port=port)
