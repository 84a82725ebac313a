"""
Database Schemas

Request models for the three MongoDB collections used by the booking API:
- HotelCreate -> "hotels" collection
- RoomCreate -> "rooms" collection
- ReservationCreate -> "reservations" collection

Fields are camelCase on the wire and snake_case in Python.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from database import parse_datetime, parse_object_id

RoomType = Literal["Simple", "Double", "Suite", "Family"]
ReservationStatus = Literal["pending", "confirmed", "cancelled"]


def check_object_id(value: str) -> str:
    if parse_object_id(value) is None:
        raise ValueError("Invalid identifier")
    return value


ObjectIdStr = Annotated[str, AfterValidator(check_object_id)]


def require_truthy(data: Any, fields) -> Any:
    # A zero price or capacity is reported as missing, like an absent field.
    if isinstance(data, dict):
        missing = [f for f in fields if not data.get(f)]
        if missing:
            raise ValueError("Missing fields: " + ", ".join(missing))
    return data


class Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Address(Schema):
    street: str
    city: str
    postal_code: str
    country: str = "France"


class HotelCreate(Schema):
    name: str = Field(..., description="Hotel name")
    address: Address
    phone: str
    email: EmailStr
    star_rating: int = Field(..., ge=1, le=5, description="Star rating 1-5")
    description: Optional[str] = Field(None, description="About the hotel")
    active: bool = True


class RoomCreate(Schema):
    hotel_id: ObjectIdStr = Field(..., description="Related hotel id")
    room_number: str
    room_type: RoomType
    price_per_night: float = Field(..., ge=0, description="Nightly rate")
    available: bool = True
    capacity: int = Field(..., ge=1, description="Max guests")

    @model_validator(mode="before")
    @classmethod
    def required_fields(cls, data):
        return require_truthy(data, ("hotelId", "roomNumber", "roomType", "pricePerNight", "capacity"))

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["hotelId"] = parse_object_id(self.hotel_id)
        return doc


class Client(Schema):
    name: str
    email: EmailStr
    phone: str


class ReservationCreate(Schema):
    hotel_id: ObjectIdStr
    room_id: ObjectIdStr
    client: Client
    check_in_date: datetime
    check_out_date: datetime
    total_price: float = Field(..., ge=0)
    status: ReservationStatus = "pending"

    @model_validator(mode="before")
    @classmethod
    def required_fields(cls, data):
        return require_truthy(
            data, ("hotelId", "roomId", "client", "checkInDate", "checkOutDate", "totalPrice")
        )

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def parse_date(cls, value):
        if isinstance(value, str):
            parsed = parse_datetime(value)
            if parsed is None:
                raise ValueError("Invalid date")
            return parsed
        return value

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["hotelId"] = parse_object_id(self.hotel_id)
        doc["roomId"] = parse_object_id(self.room_id)
        return doc
