# hotelcatalog/search/assembler.py
from __future__ import annotations

import math
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..models import Hotel, Review, RoomType
from ..utils.schemas import (
    AmenityOut,
    CatalogMeta,
    CatalogPage,
    HotelOut,
    ReviewOut,
    RoomImageOut,
    RoomTypeOption,
    RoomTypeOut,
    RoomTypeSummary,
    SearchFilters,
    ValidationWarning,
)

DEFAULT_MAX_PRICE = Decimal("1000")
FALLBACK_LOCATION = "Malaysia"


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


def paginate(items: List, page: int, page_size: int) -> List:
    start = (page - 1) * page_size
    return items[start : start + page_size]


def _live(items: Iterable) -> list:
    return [x for x in items if not getattr(x, "is_deleted", False)]


def destination(hotel: Hotel) -> str:
    return f"{hotel.city}, {hotel.country}"


def room_type_out(rt: RoomType) -> RoomTypeOut:
    h = rt.hotel
    return RoomTypeOut(
        room_type_id=rt.room_type_id,
        name=rt.name,
        description=rt.description,
        base_price=rt.base_price,
        occupancy=rt.occupancy,
        hotel=(
            HotelOut(
                hotel_id=h.hotel_id,
                name=h.name,
                city=h.city,
                country=h.country,
                image_url=h.image_url,
            )
            if h is not None
            else None
        ),
        images=[
            RoomImageOut(image_url=i.image_url, caption=i.caption)
            for i in _live(rt.images)
        ],
        amenities=[
            AmenityOut(name=link.amenity.name, image_url=link.amenity.image_url)
            for link in rt.amenity_links
            if link.amenity is not None
        ],
    )


def attached_reviews(rt: RoomType) -> List[Review]:
    return [
        rv
        for room in _live(rt.rooms)
        for b in _live(room.bookings)
        for rv in _live(b.reviews)
    ]


def summary_out(rt: RoomType, available_rooms: int) -> RoomTypeSummary:
    """Lightweight typeahead row."""
    out = room_type_out(rt)
    reviews = attached_reviews(rt)
    avg = sum(r.rating for r in reviews) / len(reviews) if reviews else 0
    return RoomTypeSummary(
        room_type_id=out.room_type_id,
        name=out.name,
        description=out.description,
        base_price=out.base_price,
        occupancy=out.occupancy,
        location=destination(rt.hotel) if rt.hotel is not None else FALLBACK_LOCATION,
        hotel_name=out.hotel.name if out.hotel else None,
        hotel_image_url=out.hotel.image_url if out.hotel else None,
        image_url=out.images[0].image_url if out.images else None,
        amenities=out.amenities,
        average_rating=avg,
        review_count=len(reviews),
        available_rooms=available_rooms,
    )


def review_out(rv: Review) -> ReviewOut:
    return ReviewOut(
        review_id=rv.review_id,
        rating=rv.rating,
        comment=rv.comment,
        review_date=rv.review_date,
    )


def catalog_meta(
    room_types: Iterable[RoomType],
    max_price: Optional[Decimal],
    hotels: Iterable[Hotel],
) -> CatalogMeta:
    """
    Catalog-wide facts for building filter controls: the room type selector,
    the price slider bound and the destination picker.
    """
    bound = max_price if max_price is not None and max_price > 0 else DEFAULT_MAX_PRICE
    return CatalogMeta(
        all_room_types=[
            RoomTypeOption(
                room_type_id=rt.room_type_id,
                name=rt.name,
                base_price=rt.base_price,
                occupancy=rt.occupancy,
            )
            for rt in room_types
        ],
        max_price_in_db=bound,
        destinations=sorted({destination(h) for h in hotels}),
    )


def catalog_page(
    *,
    filters: SearchFilters,
    items: List[RoomType],
    total_count: int,
    page: int,
    page_size: int,
    available: Dict[int, int],
    warnings: List[ValidationWarning],
    meta: CatalogMeta,
    search_error: Optional[str] = None,
) -> CatalogPage:
    return CatalogPage(
        items=[room_type_out(rt) for rt in items],
        total_count=total_count,
        total_pages=total_pages(total_count, page_size),
        current_page=page,
        page_size=page_size,
        search_term=filters.search_term,
        room_type_id=filters.room_type_id,
        max_price=filters.max_price,
        guests=filters.guests,
        check_in=filters.check_in.isoformat() if filters.check_in else None,
        available_rooms=available,
        warnings=warnings,
        search_error=search_error,
        meta=meta,
    )
