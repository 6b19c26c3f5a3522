# hotelcatalog/search/catalog.py
from __future__ import annotations

from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from ..models import RoomStatus, RoomType
from ..repositories.catalog_repo import CatalogRepo
from ..utils.cache import get_catalog_meta
from ..utils.log import setup_logger
from ..utils.schemas import (
    AvailabilityResult,
    CatalogMeta,
    CatalogPage,
    RoomTypeDetails,
    RoomTypeSummary,
    SearchFilters,
    SearchTooShort,
)
from . import assembler
from .availability import DateWindow, count_available, count_free_now
from .predicates import build_conditions, normalize

logger = setup_logger(__name__)

DEFAULT_PAGE_SIZE = 9
TYPEAHEAD_LIMIT = 9

MSG_CHECK_OUT_ORDER = "Check-out date must be after check-in date."
MSG_CHECK_IN_PAST = "Check-in date cannot be in the past."


def _page_args(page: int, page_size: int) -> Tuple[int, int]:
    page = page if page and page >= 1 else 1
    page_size = page_size if page_size and page_size >= 1 else DEFAULT_PAGE_SIZE
    return page, page_size


class CatalogService:
    """
    Room catalog queries: filtered paging, typeahead, availability checks and
    room type details. Every call reads fresh state from the repository.
    """

    def __init__(
        self,
        repo: Optional[CatalogRepo] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repo = repo or CatalogRepo()
        self.today = today

    # --- availability ---

    def count_available(
        self,
        room_type_id: int,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
    ) -> int:
        """Window mode when a check-in is given, otherwise availability as of today."""
        rooms = self.repo.rooms_for_room_type(room_type_id, status=RoomStatus.AVAILABLE)
        if check_in is not None:
            return count_available(rooms, window=DateWindow.for_stay(check_in, check_out))
        return count_available(rooms, today=self.today())

    def check_availability(
        self, room_type_id: int, check_in: date, check_out: date
    ) -> AvailabilityResult:
        if check_in >= check_out:
            return AvailabilityResult(available=False, message=MSG_CHECK_OUT_ORDER)
        if check_in < self.today():
            return AvailabilityResult(available=False, message=MSG_CHECK_IN_PAST)

        count = self.count_available(room_type_id, check_in, check_out)
        logger.info(
            f"availability room_type={room_type_id} {check_in}..{check_out} -> {count}"
        )
        return AvailabilityResult(available=count > 0, count=count)

    # --- paging ---

    def page_room_types(
        self, filters: SearchFilters, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[List[RoomType], int]:
        page, page_size = _page_args(page, page_size)
        ids = self.repo.matching_room_type_ids(build_conditions(filters))
        items = self.repo.room_types_by_ids(
            ids, order="id", offset=(page - 1) * page_size, limit=page_size
        )
        return items, len(ids)

    def catalog_meta(self) -> CatalogMeta:
        return get_catalog_meta(
            lambda: assembler.catalog_meta(
                self.repo.all_room_types(),
                self.repo.max_base_price(),
                self.repo.hotels(),
            )
        )

    def catalog(
        self,
        search_term: Optional[str] = "",
        room_type_id: Optional[int] = None,
        max_price=None,
        check_in: Optional[date] = None,
        guests: Optional[int] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> CatalogPage:
        page, page_size = _page_args(page, page_size)
        result, warnings = normalize(
            search_term,
            max_price=max_price,
            guests=guests,
            check_in=check_in,
            room_type_id=room_type_id,
            today=self.today(),
        )
        for w in warnings:
            logger.info(f"catalog input corrected [{w.field}]: {w.message}")

        if isinstance(result, SearchTooShort):
            return assembler.catalog_page(
                filters=result.filters,
                items=[],
                total_count=0,
                page=1,
                page_size=page_size,
                available={},
                warnings=warnings,
                meta=self.catalog_meta(),
                search_error=result.prompt,
            )

        filters = result
        items, total = self.page_room_types(filters, page, page_size)

        available: Dict[int, int] = {}
        for rt in items:
            available[rt.room_type_id] = self.count_available(
                rt.room_type_id, filters.check_in
            )

        logger.info(
            f"catalog mode={filters.mode} page={page}/{assembler.total_pages(total, page_size)} "
            f"total={total}"
        )
        return assembler.catalog_page(
            filters=filters,
            items=items,
            total_count=total,
            page=page,
            page_size=page_size,
            available=available,
            warnings=warnings,
            meta=self.catalog_meta(),
        )

    # --- typeahead ---

    def typeahead_search(
        self,
        term: Optional[str] = "",
        room_type_id: Optional[int] = None,
        max_price=None,
        guests: Optional[int] = None,
    ) -> List[RoomTypeSummary]:
        # the lightweight search applies filters as given, without correction
        filters = SearchFilters(
            search_term=term or "",
            room_type_id=room_type_id,
            max_price=max_price,
            guests=guests,
        )
        if term:
            result, _ = normalize(term, today=self.today())
            if isinstance(result, SearchTooShort):
                return []
            filters.term = result.term
            filters.mode = result.mode
            filters.city_token = result.city_token
            filters.country_token = result.country_token

        ids = self.repo.matching_room_type_ids(build_conditions(filters))
        rows = self.repo.room_types_by_ids(ids, order="price", limit=TYPEAHEAD_LIMIT)
        today = self.today()
        return [assembler.summary_out(rt, count_free_now(rt.rooms, today)) for rt in rows]

    # --- details ---

    def room_type_details(
        self,
        room_type_id: int,
        review_page: int = 1,
        review_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Optional[RoomTypeDetails]:
        """None when the room type does not exist (or is deleted)."""
        review_page, review_page_size = _page_args(review_page, review_page_size)
        rt = self.repo.get_room_type(room_type_id)
        if rt is None:
            logger.info(f"room type {room_type_id} not found")
            return None

        reviews = self.repo.reviews_for_room_type(room_type_id)
        return RoomTypeDetails(
            room_type=assembler.room_type_out(rt),
            available_rooms=self.count_available(room_type_id),
            reviews=[
                assembler.review_out(r)
                for r in assembler.paginate(reviews, review_page, review_page_size)
            ],
            total_reviews=len(reviews),
            review_current_page=review_page,
            review_total_pages=assembler.total_pages(len(reviews), review_page_size),
            review_page_size=review_page_size,
        )
