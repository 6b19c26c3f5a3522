from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import hotelcatalog.db as db
from hotelcatalog.api import server
from hotelcatalog.models import (
    Amenity,
    Booking,
    BookingStatus,
    Hotel,
    Review,
    Room,
    RoomImage,
    RoomStatus,
    RoomType,
    RoomTypeAmenity,
)
from hotelcatalog.search.catalog import CatalogService

TODAY = date(2024, 6, 1)


class Seed:
    """Small builders for catalog rows; every call commits."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, *objs):
        for o in objs:
            self.session.add(o)
        self.session.commit()
        return objs[0] if len(objs) == 1 else list(objs)

    def hotel(self, name="Grand Plaza", city="Kuala Lumpur", country="Malaysia", **kw):
        return self._add(Hotel(name=name, city=city, country=country, **kw))

    def room_type(self, name="Deluxe Suite", hotel=None, base_price=150, occupancy=4, **kw):
        return self._add(
            RoomType(
                name=name,
                hotel_id=hotel.hotel_id if hotel else None,
                base_price=Decimal(str(base_price)),
                occupancy=occupancy,
                **kw,
            )
        )

    def rooms(self, room_type, n=1, status=RoomStatus.AVAILABLE, **kw):
        made = [
            Room(
                room_number=f"{room_type.room_type_id}{i:02d}",
                room_type_id=room_type.room_type_id,
                status=status,
                **kw,
            )
            for i in range(n)
        ]
        out = self._add(*made)
        return out if isinstance(out, list) else [out]

    def booking(self, room, check_in, check_out, status=BookingStatus.CONFIRMED, **kw):
        return self._add(
            Booking(
                room_id=room.room_id,
                check_in_date=check_in,
                check_out_date=check_out,
                status=status,
                **kw,
            )
        )

    def review(self, booking, rating=5, review_date=None, **kw):
        return self._add(
            Review(
                booking_id=booking.booking_id,
                rating=rating,
                review_date=review_date or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
                **kw,
            )
        )

    def image(self, room_type, url="/img/room.jpg", **kw):
        return self._add(RoomImage(room_type_id=room_type.room_type_id, image_url=url, **kw))

    def amenity(self, room_type, name="WiFi", **kw):
        a = self._add(Amenity(name=name, **kw))
        self._add(RoomTypeAmenity(room_type_id=room_type.room_type_id, amenity_id=a.amenity_id))
        return a


@pytest.fixture
def engine(monkeypatch):
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    monkeypatch.setattr(db, "engine", eng)
    yield eng
    eng.dispose()


@pytest.fixture
def seed(engine):
    with Session(engine, expire_on_commit=False) as s:
        yield Seed(s)


@pytest.fixture
def svc(engine):
    return CatalogService(today=lambda: TODAY)


@pytest.fixture
def client(svc, monkeypatch):
    monkeypatch.setattr(server, "service", svc)
    return TestClient(server.app)


@pytest.fixture
def kl_suite(seed):
    """Deluxe Suite: 150/night, sleeps 4, 3 rooms, one booked 2024-06-10..12."""
    hotel = seed.hotel(name="Grand Plaza", city="Kuala Lumpur", country="Malaysia")
    rt = seed.room_type("Deluxe Suite", hotel=hotel, base_price=150, occupancy=4)
    rooms = seed.rooms(rt, n=3)
    seed.booking(rooms[0], date(2024, 6, 10), date(2024, 6, 12))
    return rt
