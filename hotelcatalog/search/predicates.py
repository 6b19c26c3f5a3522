# hotelcatalog/search/predicates.py
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy import and_, func, or_

from ..models import Hotel, RoomType
from ..utils.schemas import SearchFilters, SearchTooShort, ValidationWarning

MIN_GUESTS, MAX_GUESTS = 1, 20
MAX_TERM_LENGTH = 200
MIN_TERM_LENGTH = 2
TERM_RE = re.compile(r"[A-Za-z0-9\s,.-]+")

MSG_GUESTS = "Number of guests must be between 1 and 20."
MSG_MAX_PRICE = "Maximum price cannot be negative."
MSG_TERM_LENGTH = "Search term cannot exceed 200 characters."
MSG_TERM_CHARS = (
    "Search term contains invalid characters. Only letters, numbers, spaces, "
    "commas, periods, and hyphens are allowed."
)
MSG_CHECK_IN = "Check-in date cannot be in the past. Please select today or a future date."
MSG_TOO_SHORT = "Please enter at least 2 characters to search."


def _to_decimal(x) -> Optional[Decimal]:
    if x is None or x == "":
        return None
    return x if isinstance(x, Decimal) else Decimal(str(x))


def split_location(term: str) -> List[str]:
    """'Kuala Lumpur, Malaysia' -> ['kuala lumpur', 'malaysia'] (empties dropped)."""
    return [p.strip() for p in term.split(",") if p.strip()]


def normalize(
    raw_term: Optional[str] = "",
    max_price=None,
    guests: Optional[int] = None,
    check_in: Optional[date] = None,
    room_type_id: Optional[int] = None,
    today: Optional[date] = None,
) -> Tuple[Union[SearchFilters, SearchTooShort], List[ValidationWarning]]:
    """
    Validate raw catalog parameters, auto-correcting what can be corrected.

    Returns the normalized filters (or the too-short state) together with
    the non-fatal warnings collected along the way.
    """
    today = today or date.today()
    warnings: List[ValidationWarning] = []

    if guests is not None and (guests < MIN_GUESTS or guests > MAX_GUESTS):
        warnings.append(ValidationWarning(field="Guests", message=MSG_GUESTS))
        guests = MIN_GUESTS

    price = _to_decimal(max_price)
    if price is not None and price < 0:
        warnings.append(ValidationWarning(field="MaxPrice", message=MSG_MAX_PRICE))
        price = None

    search_term = raw_term or ""
    if search_term:
        if len(search_term) > MAX_TERM_LENGTH:
            warnings.append(ValidationWarning(field="SearchTerm", message=MSG_TERM_LENGTH))
            search_term = search_term[:MAX_TERM_LENGTH]
        if not TERM_RE.fullmatch(search_term):
            warnings.append(ValidationWarning(field="SearchTerm", message=MSG_TERM_CHARS))

    if check_in is not None and check_in < today:
        warnings.append(ValidationWarning(field="CheckIn", message=MSG_CHECK_IN))
        check_in = today

    filters = SearchFilters(
        search_term=search_term,
        room_type_id=room_type_id,
        max_price=price,
        guests=guests,
        check_in=check_in,
    )
    if not search_term:
        return filters, warnings

    term = search_term.strip().lower()
    if len(term) < MIN_TERM_LENGTH:
        return SearchTooShort(filters=filters, prompt=MSG_TOO_SHORT), warnings

    filters.term = term
    parts = split_location(term)
    if len(parts) >= 2:
        filters.mode = "location"
        filters.city_token, filters.country_token = parts[0], parts[1]
    else:
        filters.mode = "keyword"
    return filters, warnings


# --- SQL side ---


def _lower(col):
    return func.lower(col)


def _contains(col, token: str):
    return _lower(col).contains(token, autoescape=True)


def _word_match(col, term: str):
    # prefix of the whole string, or " " + term anywhere after it
    return or_(
        _lower(col).startswith(term, autoescape=True),
        _lower(col).contains(" " + term, autoescape=True),
    )


def location_condition(city: str, country: str):
    return and_(
        Hotel.hotel_id.is_not(None),
        or_(_contains(Hotel.city, city), _contains(Hotel.name, city)),
        or_(_contains(Hotel.country, country), _contains(Hotel.name, country)),
    )


def keyword_condition(term: str):
    return or_(
        _word_match(RoomType.name, term),
        and_(
            Hotel.hotel_id.is_not(None),
            or_(
                _word_match(Hotel.name, term),
                _word_match(Hotel.city, term),
                _word_match(Hotel.country, term),
            ),
        ),
    )


def build_conditions(filters: SearchFilters) -> list:
    """
    Compose the filters into SQL conditions over RoomType left-joined to Hotel.
    All conditions are ANDed by the caller.
    """
    conds = []
    if filters.mode == "location":
        conds.append(location_condition(filters.city_token, filters.country_token))
    elif filters.mode == "keyword":
        conds.append(keyword_condition(filters.term))

    if filters.room_type_id is not None:
        conds.append(RoomType.room_type_id == filters.room_type_id)
    if filters.max_price is not None:
        conds.append(RoomType.base_price <= filters.max_price)
    if filters.guests is not None and filters.guests > 0:
        conds.append(RoomType.occupancy >= filters.guests)
    return conds
