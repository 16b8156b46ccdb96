from datetime import date, datetime

from gamenet.services.slots import generate_day_slots, is_aligned_slot, minutes_to_time_str

FUTURE_DAY = date(2030, 1, 5)


def test_full_day_has_48_contiguous_slots():
    slots = generate_day_slots(FUTURE_DAY)
    assert len(slots) == 48
    assert slots[0].label == "00:00 - 00:30"
    assert slots[-1].label == "23:30 - 00:00"
    assert slots[0].start == datetime(FUTURE_DAY.year, FUTURE_DAY.month, FUTURE_DAY.day)
    for prev, nxt in zip(slots, slots[1:]):
        assert prev.end == nxt.start
        assert nxt.start_minutes - prev.start_minutes == 30


def test_generation_is_deterministic():
    assert generate_day_slots(FUTURE_DAY, (600, 1320)) == generate_day_slots(FUTURE_DAY, (600, 1320))


def test_slots_are_clipped_to_open_interval():
    slots = generate_day_slots(FUTURE_DAY, (600, 1320))
    assert len(slots) == 24
    assert slots[0].label == "10:00 - 10:30"
    assert slots[-1].label == "21:30 - 22:00"


def test_partial_slots_at_the_edges_are_dropped():
    slots = generate_day_slots(FUTURE_DAY, (615, 1290))
    assert slots[0].start_minutes == 630
    assert slots[-1].end_minutes == 1290


def test_closed_interval_yields_nothing():
    assert generate_day_slots(FUTURE_DAY, (0, 0)) == []


def test_aligned_slot_rule():
    assert is_aligned_slot(600, 630)
    assert is_aligned_slot(1410, 1440)
    assert not is_aligned_slot(615, 645)
    assert not is_aligned_slot(600, 660)
    assert not is_aligned_slot(630, 600)


def test_minutes_to_time_str():
    assert minutes_to_time_str(0) == "00:00"
    assert minutes_to_time_str(630) == "10:30"
    assert minutes_to_time_str(1440) == "00:00"
