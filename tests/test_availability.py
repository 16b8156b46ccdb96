from datetime import date, timedelta

from gamenet.services.slots import (
    OccupiedRange,
    annotate_slots,
    check_availability,
    decompose_range,
    generate_day_slots,
    is_range_free,
    occupied_ranges,
    overlaps,
    station_day_slots,
)

FUTURE = date.today() + timedelta(days=30)


def test_half_open_overlap():
    assert overlaps(600, 630, 615, 645)
    assert overlaps(600, 660, 615, 630)
    assert not overlaps(600, 630, 630, 660)
    assert not overlaps(630, 660, 600, 630)


def test_occupied_slots_are_exactly_those_overlapping_bookings():
    occupied = [OccupiedRange(600, 630, "session"), OccupiedRange(660, 720, "reservation")]
    states = annotate_slots(generate_day_slots(FUTURE), occupied)
    taken = [s.slot.start_minutes for s in states if not s.is_free]
    assert taken == [600, 660, 690]


def test_occupied_ranges_unifies_both_record_kinds(db, make):
    station = make.station(make.venue())
    other = make.station(make.venue())
    make.session(station, start=600)
    make.session(station, start=630, status="revoked")
    make.session(station, start=660, status="completed")
    make.session(station, start=720, status="reserved")
    make.session(station, day=FUTURE + timedelta(days=1), start=600)
    make.reservation(station, start=780, end=840)
    make.reservation(other, start=600)

    ranges = occupied_ranges(db, [station.id, other.id], FUTURE)

    assert [(o.start_minutes, o.end_minutes, o.source) for o in ranges[station.id]] == [
        (600, 630, "session"),
        (720, 750, "session"),
        (780, 840, "reservation"),
    ]
    assert [(o.start_minutes, o.source) for o in ranges[other.id]] == [(600, "reservation")]


def test_recomputing_availability_is_stable(db, make):
    station = make.station(make.venue())
    make.session(station, start=600)
    first = station_day_slots(db, station.id, FUTURE)
    second = station_day_slots(db, station.id, FUTURE)
    assert first == second
    assert [s.slot.start_minutes for s in first if not s.is_free] == [600]


def test_range_must_be_entirely_free():
    occupied = [OccupiedRange(600, 630, "session")]
    assert not is_range_free(occupied, 570, 660)
    assert not is_range_free(occupied, 600, 630)
    assert is_range_free(occupied, 630, 690)
    assert is_range_free(occupied, 540, 600)


def test_range_outside_offered_slots_is_not_free():
    slots = generate_day_slots(FUTURE, (600, 1320))
    assert not is_range_free([], 570, 630, slots)
    assert not is_range_free([], 1290, 1350, slots)
    assert is_range_free([], 600, 690, slots)


def test_decompose_range():
    assert decompose_range(600, 690) == [(600, 630), (630, 660), (660, 690)]
    assert decompose_range(600, 615) == []
    assert decompose_range(630, 600) == []


def test_check_availability_reads_current_bookings(db, make):
    station = make.station(make.venue())
    assert check_availability(db, station.id, FUTURE, 600, 630)
    make.reservation(station, start=600)
    assert not check_availability(db, station.id, FUTURE, 600, 630)
    assert check_availability(db, station.id, FUTURE, 630, 660)
