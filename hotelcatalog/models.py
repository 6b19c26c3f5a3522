from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoomStatus(str, Enum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    UNDER_MAINTENANCE = "UnderMaintenance"
    CLEANING = "Cleaning"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    CHECKED_IN = "CheckedIn"
    CHECKED_OUT = "CheckedOut"
    NO_SHOW = "NoShow"


class Hotel(SQLModel, table=True):
    hotel_id: int | None = Field(default=None, primary_key=True)
    name: str
    address: str = ""
    city: str
    postal_code: Optional[str] = None
    country: str
    contact_number: Optional[str] = None
    contact_email: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_deleted: bool = False

    room_types: List["RoomType"] = Relationship(back_populates="hotel")


class RoomType(SQLModel, table=True):
    room_type_id: int | None = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    occupancy: int = 1
    base_price: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    hotel_id: Optional[int] = Field(default=None, foreign_key="hotel.hotel_id")
    is_deleted: bool = False

    hotel: Optional[Hotel] = Relationship(back_populates="room_types")
    rooms: List["Room"] = Relationship(back_populates="room_type")
    images: List["RoomImage"] = Relationship(back_populates="room_type")
    amenity_links: List["RoomTypeAmenity"] = Relationship(back_populates="room_type")


class Room(SQLModel, table=True):
    room_id: int | None = Field(default=None, primary_key=True)
    room_number: str
    room_type_id: int = Field(foreign_key="roomtype.room_type_id", index=True)
    status: RoomStatus = RoomStatus.AVAILABLE
    is_deleted: bool = False

    room_type: Optional[RoomType] = Relationship(back_populates="rooms")
    bookings: List["Booking"] = Relationship(back_populates="room")


class Booking(SQLModel, table=True):
    booking_id: int | None = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="room.room_id", index=True)
    check_in_date: date
    check_out_date: date
    booking_date: datetime = Field(default_factory=_utcnow)
    total_price: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    status: BookingStatus = BookingStatus.PENDING
    is_deleted: bool = False

    room: Optional[Room] = Relationship(back_populates="bookings")
    reviews: List["Review"] = Relationship(back_populates="booking")


class Review(SQLModel, table=True):
    review_id: int | None = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="booking.booking_id", index=True)
    rating: int
    comment: Optional[str] = None
    review_date: datetime = Field(default_factory=_utcnow)
    is_deleted: bool = False

    booking: Optional[Booking] = Relationship(back_populates="reviews")


class RoomImage(SQLModel, table=True):
    image_id: int | None = Field(default=None, primary_key=True)
    room_type_id: int = Field(foreign_key="roomtype.room_type_id")
    image_url: str
    caption: Optional[str] = None
    is_deleted: bool = False

    room_type: Optional[RoomType] = Relationship(back_populates="images")


class Amenity(SQLModel, table=True):
    amenity_id: int | None = Field(default=None, primary_key=True)
    name: str
    image_url: Optional[str] = None
    is_deleted: bool = False

    room_type_links: List["RoomTypeAmenity"] = Relationship(back_populates="amenity")


class RoomTypeAmenity(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    room_type_id: int = Field(foreign_key="roomtype.room_type_id")
    amenity_id: int = Field(foreign_key="amenity.amenity_id")

    room_type: Optional[RoomType] = Relationship(back_populates="amenity_links")
    amenity: Optional[Amenity] = Relationship(back_populates="room_type_links")


# Entities hidden from every query once flagged as deleted.
SOFT_DELETED = (Hotel, RoomType, Room, Booking, Review, RoomImage, Amenity)
