import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from gamenet.core import errors
from gamenet.models.booking import GameSession, Invoice, Reservation
from gamenet.services import booking_service

FUTURE = date.today() + timedelta(days=30)
DAY = FUTURE.isoformat()


@pytest.fixture
def setup(db, make):
    venue = make.venue()
    console = make.console()
    station = make.station(venue, console, capacity=2, prices={1: 50000, 2: 80000})
    user = make.user()
    return venue, console, station, user


def _create(db, user, station, start="10:00", end="10:30", players=1, **kw):
    return booking_service.create_session(db, user.id, station.id, kw.pop("day", DAY), start, end, players, **kw)


def test_headcount_over_capacity_is_rejected_before_any_write(db, setup):
    _, _, station, user = setup
    with pytest.raises(errors.ValidationError) as exc:
        _create(db, user, station, players=3)
    assert exc.value.code == "over_capacity"
    assert db.query(GameSession).count() == 0
    assert db.query(Invoice).count() == 0


@pytest.mark.parametrize("start,end", [("10:15", "10:45"), ("10:00", "11:00"), ("10:30", "10:00"), ("10:00", "10:00")])
def test_range_must_be_one_aligned_slot(db, setup, start, end):
    _, _, station, user = setup
    with pytest.raises(errors.ValidationError):
        _create(db, user, station, start=start, end=end)


def test_start_in_the_past_is_rejected(db, setup):
    _, _, station, user = setup
    now = datetime(FUTURE.year, FUTURE.month, FUTURE.day, 10, 5)
    with pytest.raises(errors.ValidationError) as exc:
        _create(db, user, station, now=now)
    assert exc.value.code == "past_time"


def test_validation_order_slot_before_station(db, setup):
    _, _, _, user = setup
    with pytest.raises(errors.ValidationError):
        booking_service.create_session(db, user.id, "missing", DAY, "10:15", "10:45", 1)
    with pytest.raises(errors.NotFoundError):
        booking_service.create_session(db, user.id, "missing", DAY, "10:00", "10:30", 1)


@pytest.mark.parametrize("flags", [{"is_active": False}, {"is_accepted": False}, {"deleted_at": datetime.now(timezone.utc)}])
def test_unbookable_station_is_not_found(db, make, flags):
    station = make.station(make.venue(), **flags)
    with pytest.raises(errors.NotFoundError):
        booking_service.create_session(db, "u1", station.id, DAY, "10:00", "10:30", 1)


def test_missing_pricing_tier(db, make):
    station = make.station(make.venue(), capacity=3, prices={1: 50000})
    with pytest.raises(errors.ValidationError) as exc:
        booking_service.create_session(db, "u1", station.id, DAY, "10:00", "10:30", 2)
    assert exc.value.code == "missing_pricing"


def test_create_session_holds_slot_with_invoice(db, setup):
    venue, _, station, user = setup
    before = datetime.now(timezone.utc)

    out = _create(db, user, station, players=2)

    # 80000/hour prorated to 30 minutes, tax disabled by default
    assert out["priceBeforeTax"] == 40000
    assert out["tax"] == 0
    assert out["totalPrice"] == 40000
    assert out["session"]["status"] == "pending"
    assert out["session"]["organizationName"] == venue.name
    expire_at = datetime.fromisoformat(out["expireAt"])
    assert timedelta(minutes=9) < expire_at - before <= timedelta(minutes=11)

    s = db.get(GameSession, out["sessionId"])
    invoice = db.get(Invoice, out["invoiceId"])
    assert (s.start_minutes, s.end_minutes, s.duration) == (600, 630, 30)
    assert invoice.status == "not paid"
    assert invoice.session_id == s.id
    assert invoice.due_date == s.expire_at


def test_tax_is_added_on_top(db, make):
    make.tax(True, "9")
    station = make.station(make.venue(), capacity=1, prices={1: 200000})
    out = booking_service.create_session(db, "u1", station.id, DAY, "10:00", "10:30", 1)
    assert (out["priceBeforeTax"], out["tax"], out["totalPrice"]) == (100000, 9000, 109000)


def test_second_booking_of_same_slot_conflicts(db, setup):
    _, _, station, user = setup
    _create(db, user, station)
    with pytest.raises(errors.ConflictError):
        _create(db, user, station)
    assert db.query(GameSession).count() == 1
    # Adjacent slot is still free
    _create(db, user, station, start="10:30", end="11:00")


def test_booking_lost_between_precheck_and_lock_conflicts(db, make, setup, monkeypatch):
    _, _, station, user = setup
    original_lock = booking_service._lock_station

    def lock_after_competitor(session, station_id):
        make.session(station, start=600)
        return original_lock(session, station_id)

    monkeypatch.setattr(booking_service, "_lock_station", lock_after_competitor)

    with pytest.raises(errors.ConflictError):
        _create(db, user, station)
    active = db.query(GameSession).filter(GameSession.status == "pending").all()
    assert len(active) == 1
    assert active[0].user_id != user.id


def test_unique_slot_index_backs_up_the_recheck(db, make, setup, monkeypatch):
    _, _, station, user = setup
    make.session(station, start=600)
    monkeypatch.setattr(booking_service, "check_availability", lambda *a, **kw: True)

    with pytest.raises(errors.ConflictError):
        _create(db, user, station)
    assert db.query(GameSession).count() == 1


def test_concurrent_bookings_of_one_slot(file_session_factory, file_make, monkeypatch):
    station_id = file_make.station(file_make.venue()).id
    barrier = threading.Barrier(2, timeout=10)
    original_lock = booking_service._lock_station

    def lock_together(session, station_id):
        barrier.wait()
        return original_lock(session, station_id)

    monkeypatch.setattr(booking_service, "_lock_station", lock_together)
    results = []

    def book(user_id):
        db = file_session_factory()
        try:
            booking_service.create_session(db, user_id, station_id, DAY, "10:00", "10:30", 1)
            results.append("ok")
        except errors.ConflictError:
            results.append("conflict")
        finally:
            db.close()

    threads = [threading.Thread(target=book, args=(f"user-{i}",)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == ["conflict", "ok"]
    db = file_session_factory()
    try:
        assert db.query(GameSession).filter(GameSession.station_id == station_id).count() == 1
    finally:
        db.close()


def test_revoked_session_frees_the_slot(db, make, setup):
    _, _, station, user = setup
    make.session(station, start=600, status="revoked")
    out = _create(db, user, station)
    assert out["session"]["status"] == "pending"


def test_preview_prices_without_writing(db, setup):
    _, _, station, user = setup
    out = booking_service.preview_session(db, station.id, DAY, "10:00", "10:30", 1)
    assert out["isAvailable"] is True
    assert out["priceBeforeTax"] == 25000
    assert db.query(GameSession).count() == 0

    _create(db, user, station)
    assert booking_service.preview_session(db, station.id, DAY, "10:00", "10:30", 1)["isAvailable"] is False


def test_cancel_session(db, make, setup):
    _, _, station, user = setup
    out = _create(db, user, station)

    with pytest.raises(errors.NotFoundError):
        booking_service.cancel_session(db, out["sessionId"], "someone-else")

    assert booking_service.cancel_session(db, out["sessionId"], user.id)["status"] == "revoked"
    assert db.get(Invoice, out["invoiceId"]).status == "cancelled"
    with pytest.raises(errors.ConflictError):
        booking_service.cancel_session(db, out["sessionId"], user.id)
    # Slot can be booked again
    _create(db, user, station)


def test_get_session_only_for_owner(db, setup):
    _, _, station, user = setup
    out = _create(db, user, station)
    got = booking_service.get_session(db, out["sessionId"], user.id)
    assert got["invoice"]["status"] == "not paid"
    with pytest.raises(errors.NotFoundError):
        booking_service.get_session(db, out["sessionId"], "other")


def test_venue_block_reservation(db, setup):
    venue, console, station, user = setup
    out = booking_service.create_reservation(db, venue.id, station.id, console.id, DAY, "12:00", "12:30", 1)
    assert out["isBlockedByOrg"] and out["isPaid"] and out["isAccepted"]
    assert out["price"] == 50000
    # Legacy bookings block sessions on the same slot
    with pytest.raises(errors.ConflictError):
        _create(db, user, station, start="12:00", end="12:30")


def test_reservation_with_override_price_and_user(db, setup):
    venue, console, station, user = setup
    out = booking_service.create_reservation(
        db, venue.id, station.id, console.id, DAY, "12:00", "12:30", 2, user_id=user.id, price=1000
    )
    assert out["price"] == 1000
    assert not out["isBlockedByOrg"]
    r = db.get(Reservation, out["id"])
    assert r.start_time == datetime(FUTURE.year, FUTURE.month, FUTURE.day, 12, 0)


def test_reservation_must_match_venue_and_console(db, make, setup):
    venue, _, station, _ = setup
    other_console = make.console()
    with pytest.raises(errors.NotFoundError):
        booking_service.create_reservation(db, venue.id, station.id, other_console.id, DAY, "12:00", "12:30", 1)
    with pytest.raises(errors.NotFoundError):
        booking_service.create_reservation(db, "other-venue", station.id, station.console_id, DAY, "12:00", "12:30", 1)


def test_reservation_conflicts_with_pending_session(db, setup):
    venue, console, station, user = setup
    _create(db, user, station)
    with pytest.raises(errors.ConflictError):
        booking_service.create_reservation(db, venue.id, station.id, console.id, DAY, "10:00", "10:30", 1)


def test_check_station_availability_ranges(db, make, setup):
    _, _, station, _ = setup
    make.reservation(station, start=660)
    assert booking_service.check_station_availability(db, station.id, DAY, "10:00", "11:00") == {"isAvailable": True}
    assert booking_service.check_station_availability(db, station.id, DAY, "10:30", "11:30") == {"isAvailable": False}
    assert booking_service.check_station_availability(db, "missing", DAY, "10:00", "10:30") == {"isAvailable": False}
    with pytest.raises(errors.ValidationError):
        booking_service.check_station_availability(db, station.id, DAY, "10:10", "10:40")


def test_station_available_slots_follow_opening_hours(db, make, setup):
    venue, _, station, _ = setup
    make.hours(venue, start="10:00", end="22:00")
    make.session(station, start=600)
    out = booking_service.station_available_slots(db, station.id, DAY)
    assert out["slots"][0]["startTime"] == "10:00"
    assert out["slots"][0]["isAvailable"] is False
    assert out["slots"][1]["isAvailable"] is True
    assert len(out["slots"]) == 24
