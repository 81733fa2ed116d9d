from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from courtbook.slots import (
    TimeSlot,
    enumerate_slots,
    is_past,
    minutes_label,
    overlaps,
    parse_date_key,
)

D = date(2024, 6, 1)
TZ = ZoneInfo("Asia/Kolkata")

def test_adjacent_slots_do_not_overlap():
    a = TimeSlot(D, 540, 60)
    b = TimeSlot(D, 600, 60)
    assert not overlaps(a, b)
    assert not overlaps(b, a)

def test_partial_overlap_is_symmetric():
    a = TimeSlot(D, 540, 60)
    b = TimeSlot(D, 570, 60)
    assert overlaps(a, b)
    assert overlaps(b, a)

def test_same_slot_overlaps_itself():
    a = TimeSlot(D, 540, 60)
    assert overlaps(a, TimeSlot(D, 540, 60))

def test_different_dates_never_overlap():
    assert not overlaps(TimeSlot(D, 540, 60), TimeSlot(date(2024, 6, 2), 540, 60))

def test_slot_ending_at_closing_fits_window():
    assert TimeSlot(D, 22 * 60, 60).fits_window(6 * 60, 23 * 60)
    assert not TimeSlot(D, 22 * 60 + 30, 60).fits_window(6 * 60, 23 * 60)
    assert not TimeSlot(D, 5 * 60, 60).fits_window(6 * 60, 23 * 60)

def test_slot_never_crosses_midnight():
    assert not TimeSlot(D, 23 * 60 + 30, 60).fits_window(0, 24 * 60)
    assert not TimeSlot(D, 540, 0).fits_window(0, 24 * 60)

def test_is_past_only_for_current_date():
    now = datetime(2024, 6, 1, 9, 30, tzinfo=TZ)
    assert is_past(TimeSlot(D, 540, 60), now)
    assert is_past(TimeSlot(D, 570, 60), now)
    assert not is_past(TimeSlot(D, 600, 60), now)
    # Autres dates: jamais « passées » ici
    assert not is_past(TimeSlot(date(2024, 5, 31), 540, 60), now)
    assert not is_past(TimeSlot(date(2024, 6, 2), 540, 60), now)

def test_enumerate_slots_default_window():
    starts = enumerate_slots(60, 6 * 60, 23 * 60)
    assert starts[0] == 360
    assert starts[-1] == 22 * 60
    assert len(starts) == 17

def test_enumerate_slots_stops_before_closing():
    assert enumerate_slots(90, 6 * 60, 9 * 60) == [360, 450]
    assert enumerate_slots(0, 6 * 60, 9 * 60) == []

@pytest.mark.parametrize("minute,label", [(0, "12:00 AM"), (540, "9:00 AM"), (750, "12:30 PM"), (1320, "10:00 PM")])
def test_minutes_label(minute, label):
    assert minutes_label(minute) == label

def test_parse_date_key():
    assert parse_date_key("2024-06-01") == D
    assert parse_date_key(D) == D
    with pytest.raises(ValueError):
        parse_date_key("01/06/2024")
    with pytest.raises(ValueError):
        parse_date_key("")

def test_to_dict_is_client_shape():
    assert TimeSlot(D, 540, 60).to_dict() == {"dateKey": "2024-06-01", "start": 540, "minutes": 60, "label": "9:00 AM"}
