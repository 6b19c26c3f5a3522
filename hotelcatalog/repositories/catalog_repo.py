from decimal import Decimal
from typing import List, Literal, Optional, Sequence

from sqlmodel import select
from sqlalchemy import and_, func
from sqlalchemy.orm import selectinload, with_loader_criteria

from ..db import get_session
from ..models import (
    SOFT_DELETED,
    Booking,
    Hotel,
    Review,
    Room,
    RoomStatus,
    RoomType,
    RoomTypeAmenity,
)


def _live_only():
    # applied to the statement and to every relationship load it triggers
    return [
        with_loader_criteria(entity, entity.is_deleted.is_(False), include_aliases=True)
        for entity in SOFT_DELETED
    ]


def _full_room_type():
    return [
        selectinload(RoomType.hotel),
        selectinload(RoomType.images),
        selectinload(RoomType.amenity_links).selectinload(RoomTypeAmenity.amenity),
        selectinload(RoomType.rooms)
        .selectinload(Room.bookings)
        .selectinload(Booking.reviews),
    ]


class CatalogRepo:
    """Read-only access to the catalog entities. Deleted rows are never returned."""

    def matching_room_type_ids(self, conditions: Sequence = ()) -> List[int]:
        with get_session() as session:
            q = (
                select(RoomType.room_type_id)
                .join(
                    Hotel,
                    and_(Hotel.hotel_id == RoomType.hotel_id, Hotel.is_deleted.is_(False)),
                    isouter=True,
                )
                .where(RoomType.is_deleted.is_(False))
            )
            for cond in conditions:
                q = q.where(cond)
            q = q.distinct()
            return sorted(session.exec(q).all())

    def room_types_by_ids(
        self,
        ids: Sequence[int],
        order: Literal["id", "price"] = "id",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[RoomType]:
        if not ids:
            return []
        with get_session() as session:
            if order == "price":
                ordering = (RoomType.base_price.asc(), RoomType.room_type_id.asc())
            else:
                ordering = (RoomType.room_type_id.asc(),)
            q = (
                select(RoomType)
                .where(RoomType.room_type_id.in_(list(ids)))
                .where(RoomType.is_deleted.is_(False))
                .options(*_full_room_type(), *_live_only())
                .order_by(*ordering)
                .offset(offset)
            )
            if limit is not None:
                q = q.limit(limit)
            return list(session.exec(q).all())

    def get_room_type(self, room_type_id: int) -> Optional[RoomType]:
        with get_session() as session:
            q = (
                select(RoomType)
                .where(RoomType.room_type_id == room_type_id)
                .where(RoomType.is_deleted.is_(False))
                .options(*_full_room_type(), *_live_only())
            )
            return session.exec(q).first()

    def rooms_for_room_type(
        self, room_type_id: int, status: Optional[RoomStatus] = None
    ) -> List[Room]:
        """Physical rooms of a room type with their bookings loaded."""
        with get_session() as session:
            q = (
                select(Room)
                .where(Room.room_type_id == room_type_id)
                .where(Room.is_deleted.is_(False))
                .options(selectinload(Room.bookings), *_live_only())
                .order_by(Room.room_id)
            )
            if status is not None:
                q = q.where(Room.status == status)
            return list(session.exec(q).all())

    def reviews_for_room_type(self, room_type_id: int) -> List[Review]:
        """Reviews reached through rooms -> bookings of this room type only."""
        with get_session() as session:
            q = (
                select(Review)
                .join(Booking, Booking.booking_id == Review.booking_id)
                .join(Room, Room.room_id == Booking.room_id)
                .where(Room.room_type_id == room_type_id)
                .where(Review.is_deleted.is_(False))
                .where(Booking.is_deleted.is_(False))
                .where(Room.is_deleted.is_(False))
                .order_by(
                    Review.review_date.desc(),
                    Room.room_id,
                    Booking.booking_id,
                    Review.review_id,
                )
            )
            return list(session.exec(q).all())

    # --- catalog-wide metadata ---

    def all_room_types(self) -> List[RoomType]:
        with get_session() as session:
            q = (
                select(RoomType)
                .where(RoomType.is_deleted.is_(False))
                .order_by(RoomType.room_type_id)
            )
            return list(session.exec(q).all())

    def max_base_price(self) -> Optional[Decimal]:
        with get_session() as session:
            q = select(func.max(RoomType.base_price)).where(
                RoomType.is_deleted.is_(False)
            )
            return session.exec(q).one()

    def hotels(self) -> List[Hotel]:
        with get_session() as session:
            q = (
                select(Hotel)
                .where(Hotel.is_deleted.is_(False))
                .order_by(Hotel.hotel_id)
            )
            return list(session.exec(q).all())
