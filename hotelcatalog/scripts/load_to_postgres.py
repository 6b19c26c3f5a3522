import csv
import os
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv
from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine
from tenacity import retry, stop_after_attempt, wait_fixed

from hotelcatalog.models import (
    Booking,
    BookingStatus,
    Hotel,
    Review,
    Room,
    RoomStatus,
    RoomType,
)
from hotelcatalog.utils.cache import CACHE_ON, invalidate_catalog_meta
from hotelcatalog.utils.log import setup_logger

logger = setup_logger(__name__)

load_dotenv()
pg = (
    f"postgresql+psycopg://{os.getenv('POSTGRES_USER','hotelcatalog')}:"
    f"{os.getenv('POSTGRES_PASSWORD','hotelcatalog')}@"
    f"{os.getenv('POSTGRES_HOST','localhost')}:"
    f"{os.getenv('POSTGRES_PORT','5432')}/"
    f"{os.getenv('POSTGRES_DB','hotelcatalog')}"
)


# -------- utils --------
def _norm_row(row: dict) -> dict:
    return {
        (k or "")
        .replace("\ufeff", "")
        .strip()
        .lower(): (v.strip() if isinstance(v, str) else v)
        for k, v in row.items()
    }


def _int(x, default=None):
    try:
        if x is None or x == "":
            return default
        return int(x)
    except ValueError:
        return default


def _dec(x, default=None):
    try:
        if x is None or x == "":
            return default
        return Decimal(str(x).replace(",", ""))
    except InvalidOperation:
        return default


def _bool(x, default=False):
    if x is None:
        return default
    return str(x).strip().lower() in ("true", "1", "yes", "y")


def _date(x) -> date:
    return date.fromisoformat(x)


def _datetime(x, default=None):
    """ISO timestamp as an aware datetime; naive values are taken as UTC."""
    if not x:
        return default or datetime.now(timezone.utc)
    dt = datetime.fromisoformat(x)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _enum(enum_cls, value, default):
    """Accept 'CheckedIn', 'checked_in' or 'CHECKED_IN'."""
    if not value:
        return default
    key = value.replace("_", "").replace(" ", "").lower()
    for member in enum_cls:
        if member.value.lower() == key or member.name.replace("_", "").lower() == key:
            return member
    raise ValueError(f"unknown {enum_cls.__name__}: {value!r}")


def _rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        for raw in csv.DictReader(f):
            yield _norm_row(raw)


# -------- loaders --------
def load_hotels(session: Session, path: str) -> int:
    n = 0
    for r in _rows(path):
        session.merge(
            Hotel(
                hotel_id=_int(r.get("hotel_id") or r.get("hotelid")),
                name=r.get("name") or r.get("hotel_name"),
                address=r.get("address", ""),
                city=r.get("city", ""),
                postal_code=r.get("postal_code") or None,
                country=r.get("country", ""),
                description=r.get("description") or None,
                image_url=r.get("image_url") or None,
                is_deleted=_bool(r.get("is_deleted")),
            )
        )
        n += 1
    return n


def load_room_types(session: Session, path: str) -> int:
    n = 0
    for r in _rows(path):
        session.merge(
            RoomType(
                room_type_id=_int(r.get("room_type_id") or r.get("id")),
                name=r.get("name") or r.get("room_type"),
                description=r.get("description") or None,
                occupancy=_int(r.get("occupancy") or r.get("guests"), 2),
                base_price=_dec(
                    r.get("base_price") or r.get("price_per_night") or r.get("rate"),
                    Decimal("0"),
                ),
                hotel_id=_int(r.get("hotel_id") or r.get("hotelid")),
                is_deleted=_bool(r.get("is_deleted")),
            )
        )
        n += 1
    return n


def load_rooms(session: Session, path: str) -> int:
    n = 0
    for r in _rows(path):
        session.merge(
            Room(
                room_id=_int(r.get("room_id") or r.get("id")),
                room_number=r.get("room_number") or r.get("number"),
                room_type_id=_int(r.get("room_type_id")),
                status=_enum(RoomStatus, r.get("status"), RoomStatus.AVAILABLE),
                is_deleted=_bool(r.get("is_deleted")),
            )
        )
        n += 1
    return n


def load_bookings(session: Session, path: str) -> int:
    n = 0
    for r in _rows(path):
        check_in, check_out = _date(r["check_in"]), _date(r["check_out"])
        if check_out <= check_in:
            # Skip if the stay is empty or reversed
            logger.warning(f"skipping booking {r.get('booking_id')}: check_out <= check_in")
            continue
        session.merge(
            Booking(
                booking_id=_int(r.get("booking_id") or r.get("id")),
                room_id=_int(r.get("room_id")),
                check_in_date=check_in,
                check_out_date=check_out,
                booking_date=_datetime(r.get("booking_date")),
                total_price=_dec(r.get("total_price"), Decimal("0")),
                status=_enum(BookingStatus, r.get("status"), BookingStatus.PENDING),
                is_deleted=_bool(r.get("is_deleted")),
            )
        )
        n += 1
    return n


def load_reviews(session: Session, path: str) -> int:
    n = 0
    for r in _rows(path):
        rating = _int(r.get("rating"))
        if rating is None or not 1 <= rating <= 5:
            continue
        session.merge(
            Review(
                review_id=_int(r.get("review_id") or r.get("id")),
                booking_id=_int(r.get("booking_id")),
                rating=rating,
                comment=r.get("comment") or None,
                review_date=_datetime(r.get("review_date")),
                is_deleted=_bool(r.get("is_deleted")),
            )
        )
        n += 1
    return n


LOADERS = [
    ("hotels.csv", load_hotels),
    ("room_types.csv", load_room_types),
    ("rooms.csv", load_rooms),
    ("bookings.csv", load_bookings),
    ("reviews.csv", load_reviews),
]


@retry(wait=wait_fixed(2), stop=stop_after_attempt(5))
def wait_for_db(engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def load_all(engine, data_dir: str = "data") -> dict:
    SQLModel.metadata.create_all(engine)
    counts = {}
    with Session(engine) as session:
        for name, loader in LOADERS:
            path = os.path.join(data_dir, name)
            if not os.path.exists(path):
                continue
            counts[name] = loader(session, path)
            # parents must exist before children reference them
            session.flush()
        session.commit()
    if CACHE_ON:
        invalidate_catalog_meta()
    return counts


if __name__ == "__main__":
    engine = create_engine(os.getenv("DATABASE_URL") or pg, future=True)
    wait_for_db(engine)
    counts = load_all(engine, os.getenv("DATA_DIR", "data"))
    print("Loaded " + ", ".join(f"{k}={v}" for k, v in counts.items()))
