import pytest
from bson.objectid import ObjectId

from conftest import room_payload


@pytest.mark.parametrize("field", ["hotelId", "roomNumber", "roomType", "pricePerNight", "capacity"])
def test_create_room_requires_field(client, store, field):
    payload = room_payload(str(ObjectId()))
    del payload[field]

    response = client.post("/api/rooms", json=payload)

    assert response.status_code == 400
    assert store.rooms.count_documents({}) == 0


def test_create_room_treats_zero_capacity_as_missing(client):
    response = client.post("/api/rooms", json=room_payload(str(ObjectId()), capacity=0))

    assert response.status_code == 400
    assert "capacity" in response.json()["error"]


def test_create_room_rejects_unknown_type(client):
    response = client.post("/api/rooms", json=room_payload(str(ObjectId()), roomType="Penthouse"))

    assert response.status_code == 400


def test_create_room_rejects_negative_price(client):
    response = client.post("/api/rooms", json=room_payload(str(ObjectId()), pricePerNight=-5))

    assert response.status_code == 400


def test_create_room_rejects_malformed_hotel_id(client):
    response = client.post("/api/rooms", json=room_payload("hotel-1"))

    assert response.status_code == 400


def test_create_room_does_not_check_hotel_exists(client, store):
    hotel_id = str(ObjectId())

    response = client.post("/api/rooms", json=room_payload(hotel_id))

    assert response.status_code == 201
    room = response.json()["room"]
    assert room["hotelId"] == hotel_id
    assert room["available"] is True
    assert isinstance(store.rooms.find_one()["hotelId"], ObjectId)


def test_list_rooms_populates_hotel(client, make_hotel, make_room):
    hotel = make_hotel(name="Lac")
    make_room(hotel["id"])
    make_room(str(ObjectId()), roomNumber="999")

    rooms = client.get("/api/rooms").json()["rooms"]

    assert rooms[0]["hotelId"]["name"] == "Lac"
    assert rooms[1]["hotelId"] is None


def test_list_rooms_filters(client, make_hotel, make_room):
    hotel = make_hotel()
    other = make_hotel(name="Other")
    make_room(hotel["id"], roomNumber="1", roomType="Simple", pricePerNight=50)
    make_room(hotel["id"], roomNumber="2", roomType="Suite", pricePerNight=300, available=False)
    make_room(hotel["id"], roomNumber="3", roomType="Double", pricePerNight=120)
    make_room(other["id"], roomNumber="4", roomType="Double", pricePerNight=100)

    def numbers(**params):
        return [r["roomNumber"] for r in client.get("/api/rooms", params=params).json()["rooms"]]

    assert numbers(hotelId=hotel["id"]) == ["1", "2", "3"]
    assert numbers(type="Double") == ["3", "4"]
    assert numbers(prixMin="100", prixMax="120") == ["3", "4"]
    assert numbers(disponible="false") == ["2"]
    assert numbers(disponible="true", prixMin="110") == ["3"]


def test_update_room_without_validation(client, make_room):
    room = make_room(str(ObjectId()))

    response = client.put(f"/api/rooms/{room['id']}", json={"capacity": 0, "available": False})

    assert response.status_code == 200
    updated = response.json()["room"]
    assert updated["capacity"] == 0
    assert updated["available"] is False
    assert updated["roomNumber"] == room["roomNumber"]


def test_update_room_rejects_non_object_body(client, make_room):
    room = make_room(str(ObjectId()))

    response = client.put(f"/api/rooms/{room['id']}", json=["capacity", 3])

    assert response.status_code == 400


def test_update_missing_room_returns_404(client):
    assert client.put(f"/api/rooms/{ObjectId()}", json={"capacity": 3}).status_code == 404


def test_delete_room_twice(client, make_room):
    room = make_room(str(ObjectId()))

    assert client.delete(f"/api/rooms/{room['id']}").status_code == 200
    assert client.delete(f"/api/rooms/{room['id']}").status_code == 404


def test_update_room_hotel_id_is_stored_as_object_id(client, make_room, store):
    room = make_room(str(ObjectId()))
    new_hotel = ObjectId()

    client.put(f"/api/rooms/{room['id']}", json={"hotelId": str(new_hotel)})

    assert store.rooms.find_one()["hotelId"] == new_hotel


def test_list_rooms_with_non_id_hotel_reference(client, make_hotel, make_room):
    hotel = make_hotel()
    room = make_room(hotel["id"])
    client.put(f"/api/rooms/{room['id']}", json={"hotelId": {"x": 1}})

    response = client.get("/api/rooms")

    assert response.status_code == 200
    assert response.json()["rooms"][0]["hotelId"] is None
