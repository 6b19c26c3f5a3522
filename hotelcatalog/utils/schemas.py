from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional


# -------- Query side --------


class ValidationWarning(BaseModel):
    field: str
    message: str


class SearchFilters(BaseModel):
    """Normalized catalog filters. `term` is trimmed and lowercased."""

    search_term: str = ""  # echoed back, after truncation
    term: Optional[str] = None
    mode: Literal["none", "keyword", "location"] = "none"
    city_token: Optional[str] = None
    country_token: Optional[str] = None
    room_type_id: Optional[int] = None
    max_price: Optional[Decimal] = None
    guests: Optional[int] = None
    check_in: Optional[date] = None


class SearchTooShort(BaseModel):
    """Terms under the minimum length stop here; no predicate is built."""

    filters: SearchFilters
    prompt: str


class AvailabilityRequest(BaseModel):
    room_type_id: int
    check_in: str  # ISO date
    check_out: str  # ISO date


# -------- Room types --------


class HotelOut(BaseModel):
    hotel_id: int
    name: str
    city: str
    country: str
    image_url: Optional[str] = None


class AmenityOut(BaseModel):
    name: str
    image_url: Optional[str] = None


class RoomImageOut(BaseModel):
    image_url: str
    caption: Optional[str] = None


class RoomTypeOut(BaseModel):
    room_type_id: int
    name: str
    description: Optional[str] = None
    base_price: float
    occupancy: int
    hotel: Optional[HotelOut] = None
    images: List[RoomImageOut] = []
    amenities: List[AmenityOut] = []


class RoomTypeOption(BaseModel):
    room_type_id: int
    name: str
    base_price: float
    occupancy: int


class RoomTypeSummary(BaseModel):
    room_type_id: int
    name: str
    description: Optional[str] = None
    base_price: float
    occupancy: int
    location: str
    hotel_name: Optional[str] = None
    hotel_image_url: Optional[str] = None
    image_url: Optional[str] = None
    amenities: List[AmenityOut] = []
    average_rating: float = 0
    review_count: int = 0
    available_rooms: int = 0


class ReviewOut(BaseModel):
    review_id: int
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    review_date: datetime


# -------- Responses --------


class CatalogMeta(BaseModel):
    all_room_types: List[RoomTypeOption] = []
    max_price_in_db: float
    destinations: List[str] = []


class CatalogPage(BaseModel):
    items: List[RoomTypeOut] = []
    total_count: int = 0
    total_pages: int = 0
    current_page: int = 1
    page_size: int = 9
    search_term: str = ""
    room_type_id: Optional[int] = None
    max_price: Optional[float] = None
    guests: Optional[int] = None
    check_in: Optional[str] = None  # ISO date
    available_rooms: Dict[int, int] = {}
    warnings: List[ValidationWarning] = []
    search_error: Optional[str] = None
    meta: CatalogMeta


class AvailabilityResult(BaseModel):
    available: bool
    count: Optional[int] = None
    message: Optional[str] = None


class RoomTypeDetails(BaseModel):
    room_type: RoomTypeOut
    available_rooms: int
    reviews: List[ReviewOut] = []
    total_reviews: int = 0
    review_current_page: int = 1
    review_total_pages: int = 0
    review_page_size: int = 9
