# hotelcatalog/search/availability.py
"""
Room availability over a room's booking history.

Three blocking policies exist and are deliberately kept apart:

- conflicts_with_window: used when the caller supplies dates. Everything
  except Cancelled/CheckedOut/NoShow blocks if it overlaps the window.
- is_currently_occupying: used when no dates are supplied. Only
  Pending/Confirmed/CheckedIn block, and only while check-out is after today.
- is_running_stay: the lightweight typeahead count. Same block-list as the
  window policy, limited to stays whose check-out is after today.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, NamedTuple, Optional

from ..models import Booking, BookingStatus, Room, RoomStatus

# Terminal statuses never block a dated request.
RELEASED_STATUSES = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.CHECKED_OUT, BookingStatus.NO_SHOW}
)

# Statuses that hold a room when no dates are given.
OCCUPYING_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
)


class DateWindow(NamedTuple):
    """Half-open stay window [start, end)."""

    start: date
    end: date

    @classmethod
    def for_stay(cls, check_in: date, check_out: Optional[date] = None) -> "DateWindow":
        # one night when check-out is not given
        return cls(check_in, check_out or check_in + timedelta(days=1))


def overlaps(booking: Booking, window: DateWindow) -> bool:
    b_in, b_out = booking.check_in_date, booking.check_out_date
    running_at_start = b_in <= window.start and b_out > window.start
    running_at_end = b_in < window.end and b_out >= window.end
    inside = b_in >= window.start and b_out <= window.end
    return running_at_start or running_at_end or inside


def conflicts_with_window(booking: Booking, window: DateWindow) -> bool:
    return booking.status not in RELEASED_STATUSES and overlaps(booking, window)


def is_currently_occupying(booking: Booking, today: date) -> bool:
    return booking.status in OCCUPYING_STATUSES and booking.check_out_date > today


def is_running_stay(booking: Booking, today: date) -> bool:
    return booking.status not in RELEASED_STATUSES and booking.check_out_date > today


def _live(items: Iterable) -> list:
    return [x for x in items if not getattr(x, "is_deleted", False)]


def room_is_available(
    room: Room,
    window: Optional[DateWindow] = None,
    today: Optional[date] = None,
) -> bool:
    """
    Window given -> window policy; otherwise the no-window policy against today.
    Room.status gates both modes independently of bookings.
    """
    if room.is_deleted or room.status != RoomStatus.AVAILABLE:
        return False
    bookings = _live(room.bookings)
    if window is not None:
        return not any(conflicts_with_window(b, window) for b in bookings)
    today = today or date.today()
    return not any(is_currently_occupying(b, today) for b in bookings)


def count_available(
    rooms: Iterable[Room],
    window: Optional[DateWindow] = None,
    today: Optional[date] = None,
) -> int:
    return sum(1 for r in rooms if room_is_available(r, window=window, today=today))


def count_free_now(rooms: Iterable[Room], today: Optional[date] = None) -> int:
    """Typeahead count: Available rooms with no unreleased stay still running."""
    today = today or date.today()
    n = 0
    for r in rooms:
        if r.is_deleted or r.status != RoomStatus.AVAILABLE:
            continue
        if any(is_running_stay(b, today) for b in _live(r.bookings)):
            continue
        n += 1
    return n
