from datetime import date, timedelta

import pytest

from hotelcatalog.models import Booking, BookingStatus, Room, RoomStatus
from hotelcatalog.search.availability import (
    DateWindow,
    conflicts_with_window,
    count_available,
    count_free_now,
    is_currently_occupying,
    is_running_stay,
    overlaps,
)

TODAY = date(2024, 6, 1)


def _booking(check_in, check_out, status=BookingStatus.CONFIRMED, **kw):
    return Booking(room_id=1, check_in_date=check_in, check_out_date=check_out, status=status, **kw)


def _room(*bookings, status=RoomStatus.AVAILABLE, **kw):
    return Room(room_number="101", room_type_id=1, status=status, bookings=list(bookings), **kw)


def test_window_defaults_to_one_night():
    w = DateWindow.for_stay(date(2024, 6, 10))
    assert w == DateWindow(date(2024, 6, 10), date(2024, 6, 11))


@pytest.mark.parametrize(
    "window, expected",
    [
        ((date(2024, 1, 8), date(2024, 1, 10)), False),  # adjacent after
        ((date(2024, 1, 3), date(2024, 1, 5)), False),  # adjacent before
        ((date(2024, 1, 7), date(2024, 1, 9)), True),  # runs at window start
        ((date(2024, 1, 4), date(2024, 1, 6)), True),  # runs at window end
        ((date(2024, 1, 6), date(2024, 1, 7)), True),  # window inside booking
        ((date(2024, 1, 1), date(2024, 1, 20)), True),  # booking inside window
        ((date(2024, 1, 5), date(2024, 1, 8)), True),  # identical
    ],
)
def test_overlap_is_boundary_exclusive(window, expected):
    b = _booking(date(2024, 1, 5), date(2024, 1, 8))
    assert overlaps(b, DateWindow(*window)) is expected


@pytest.mark.parametrize(
    "status, blocks",
    [
        (BookingStatus.PENDING, True),
        (BookingStatus.CONFIRMED, True),
        (BookingStatus.CHECKED_IN, True),
        (BookingStatus.CANCELLED, False),
        (BookingStatus.CHECKED_OUT, False),
        (BookingStatus.NO_SHOW, False),
    ],
)
def test_window_policy_block_list(status, blocks):
    b = _booking(date(2024, 6, 10), date(2024, 6, 12), status=status)
    assert conflicts_with_window(b, DateWindow(date(2024, 6, 11), date(2024, 6, 13))) is blocks


def test_no_window_policy_uses_allow_list_and_today():
    yesterday, tomorrow = TODAY - timedelta(days=1), TODAY + timedelta(days=1)
    assert not is_currently_occupying(_booking(date(2024, 5, 28), yesterday, BookingStatus.CHECKED_OUT), TODAY)
    assert is_currently_occupying(_booking(date(2024, 5, 30), tomorrow, BookingStatus.CONFIRMED), TODAY)
    # check-out today has already released the room
    assert not is_currently_occupying(_booking(date(2024, 5, 30), TODAY, BookingStatus.CHECKED_IN), TODAY)
    # a terminal status never occupies, even with a future check-out
    assert not is_currently_occupying(_booking(TODAY, tomorrow, BookingStatus.NO_SHOW), TODAY)


def test_the_two_policies_disagree_on_elapsed_unreleased_stays():
    # Pending stay far in the future: blocks the undated view, not an unrelated window
    b = _booking(date(2024, 7, 1), date(2024, 7, 5), BookingStatus.PENDING)
    assert is_currently_occupying(b, TODAY)
    assert not conflicts_with_window(b, DateWindow.for_stay(date(2024, 6, 10)))


def test_unavailable_room_status_never_counts():
    for status in (RoomStatus.OCCUPIED, RoomStatus.UNDER_MAINTENANCE, RoomStatus.CLEANING):
        rooms = [_room(status=status)]
        assert count_available(rooms, today=TODAY) == 0
        assert count_available(rooms, window=DateWindow.for_stay(date(2024, 6, 10))) == 0
        assert count_free_now(rooms, today=TODAY) == 0


def test_confirmed_future_stay_blocks_only_available_rooms():
    tomorrow = TODAY + timedelta(days=1)
    rooms = [
        _room(_booking(TODAY, tomorrow)),
        _room(),
        _room(status=RoomStatus.CLEANING),
    ]
    assert count_available(rooms, today=TODAY) == 1


def test_window_mode_counts_rooms_without_conflicts():
    rooms = [
        _room(_booking(date(2024, 6, 10), date(2024, 6, 12))),
        _room(_booking(date(2024, 6, 8), date(2024, 6, 10))),
        _room(_booking(date(2024, 6, 10), date(2024, 6, 12), BookingStatus.CANCELLED)),
    ]
    assert count_available(rooms, window=DateWindow.for_stay(date(2024, 6, 10))) == 2
    assert count_available(rooms, window=DateWindow.for_stay(date(2024, 6, 12))) == 3


def test_deleted_rooms_and_bookings_are_ignored():
    booked = _booking(date(2024, 6, 10), date(2024, 6, 12), is_deleted=True)
    rooms = [_room(booked), _room(is_deleted=True)]
    assert count_available(rooms, window=DateWindow.for_stay(date(2024, 6, 10))) == 1


def test_typeahead_count_blocks_running_unreleased_stays():
    tomorrow = TODAY + timedelta(days=1)
    pending = _booking(TODAY, tomorrow, BookingStatus.PENDING)
    cancelled = _booking(TODAY, tomorrow, BookingStatus.CANCELLED)
    elapsed = _booking(date(2024, 5, 1), date(2024, 5, 3))
    assert is_running_stay(pending, TODAY)
    assert not is_running_stay(cancelled, TODAY)
    assert not is_running_stay(elapsed, TODAY)
    assert count_free_now([_room(pending), _room(cancelled), _room(elapsed)], today=TODAY) == 2
