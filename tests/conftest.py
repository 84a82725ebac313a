import sys
from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

# Force the root directory into sys.path
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from database import Store  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def store():
    return Store(mongomock.MongoClient()["hotel-booking-test"])


@pytest.fixture
def mirror_path(tmp_path):
    return tmp_path / "hotels.json"


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


def hotel_payload(**overrides):
    payload = {
        "name": "Hotel du Lac",
        "address": {"street": "1 quai du Lac", "city": "Annecy", "postalCode": "74000"},
        "phone": "0450000000",
        "email": "contact@hoteldulac.fr",
        "starRating": 4,
    }
    payload.update(overrides)
    return payload


def room_payload(hotel_id, **overrides):
    payload = {
        "hotelId": hotel_id,
        "roomNumber": "101",
        "roomType": "Double",
        "pricePerNight": 120,
        "capacity": 2,
    }
    payload.update(overrides)
    return payload


def reservation_payload(hotel_id, room_id, **overrides):
    payload = {
        "hotelId": hotel_id,
        "roomId": room_id,
        "client": {"name": "Marie Curie", "email": "marie@example.com", "phone": "0600000000"},
        "checkInDate": "2025-06-01",
        "checkOutDate": "2025-06-04",
        "totalPrice": 360,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_hotel(client):
    def _make(**overrides):
        response = client.post("/api/hotels", json=hotel_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()["hotel"]
    return _make


@pytest.fixture
def make_room(client):
    def _make(hotel_id, **overrides):
        response = client.post("/api/rooms", json=room_payload(hotel_id, **overrides))
        assert response.status_code == 201, response.text
        return response.json()["room"]
    return _make


@pytest.fixture
def make_reservation(client):
    def _make(hotel_id, room_id, **overrides):
        response = client.post("/api/reservations", json=reservation_payload(hotel_id, room_id, **overrides))
        assert response.status_code == 201, response.text
        return response.json()["reservation"]
    return _make
