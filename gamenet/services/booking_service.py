import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gamenet.core import errors
from gamenet.core.config import settings
from gamenet.models.booking import GameSession, Invoice, Reservation
from gamenet.models.station import Station, StationPricing
from gamenet.models.venue import Venue
from gamenet.services.calendar_service import at_minutes, local_now, parse_hhmm, parse_local_date
from gamenet.services.settings_service import calculate_tax, round_half_up
from gamenet.services.slots.availability import check_availability, decompose_range, station_day_slots
from gamenet.services.slots.config import is_aligned_slot, minutes_to_time_str
from gamenet.services.working_hours_service import day_hours

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = ("pending", "reserved")


def parse_range(date_text: str, start_text: str, end_text: str) -> tuple[date, int, int]:
    day = parse_local_date(date_text)
    return day, parse_hhmm(start_text), parse_hhmm(end_text, end_of_day=True)


def validate_slot_range(date_text: str, start_text: str, end_text: str, now: datetime | None = None) -> tuple[date, int, int]:
    """Exactly one 30 minute slot on the :00/:30 grid, not starting in the past."""
    day, start_min, end_min = parse_range(date_text, start_text, end_text)
    if not is_aligned_slot(start_min, end_min):
        raise errors.ValidationError(
            "time slot must be exactly 30 minutes and start at :00 or :30", code="invalid_slot"
        )
    now = now or local_now()
    if at_minutes(day, start_min) < now:
        raise errors.ValidationError("cannot book a time in the past", code="past_time")
    return day, start_min, end_min


def _station_query(station_id: str):
    return select(Station).where(
        Station.id == station_id,
        Station.is_active == True,
        Station.is_accepted == True,
        Station.deleted_at.is_(None),
    )


def _bookable_station(db: Session, station_id: str) -> Station:
    station = db.execute(_station_query(station_id)).scalar_one_or_none()
    if not station:
        raise errors.NotFoundError("station not found or not available")
    return station


def _lock_station(db: Session, station_id: str) -> Station | None:
    # Serializes concurrent bookings of the same station until commit/rollback
    return db.execute(_station_query(station_id).with_for_update()).scalar_one_or_none()


def _check_headcount(station: Station, players: int) -> None:
    if players < 1:
        raise errors.ValidationError("players count must be at least 1")
    if players > station.capacity:
        raise errors.ValidationError(
            f"players count {players} exceeds station capacity {station.capacity}", code="over_capacity"
        )


def _pricing_tier(db: Session, station_id: str, players: int) -> StationPricing | None:
    return db.execute(
        select(StationPricing).where(
            StationPricing.station_id == station_id,
            StationPricing.player_count == players,
        )
    ).scalar_one_or_none()


def _required_tier(db: Session, station_id: str, players: int) -> StationPricing:
    tier = _pricing_tier(db, station_id, players)
    if not tier:
        raise errors.ValidationError(f"no pricing defined for {players} players", code="missing_pricing")
    return tier


def session_price(db: Session, hourly_price: int, duration_minutes: int) -> dict:
    before_tax = round_half_up(Decimal(hourly_price) * duration_minutes / Decimal(60))
    tax, total = calculate_tax(db, before_tax)
    return {"priceBeforeTax": before_tax, "tax": tax, "totalPrice": total}


def _session_dict(s: GameSession, venue: Venue | None, station: Station | None) -> dict:
    return {
        "id": s.id,
        "organizationId": s.venue_id,
        "organizationName": venue.name if venue else None,
        "stationId": s.station_id,
        "stationTitle": station.title if station else None,
        "date": s.date.isoformat(),
        "startTime": s.start_time,
        "endTime": s.end_time,
        "duration": s.duration,
        "playersCount": s.players_count,
        "status": s.status,
        "invoiceId": s.invoice_id,
    }


def preview_session(
    db: Session,
    station_id: str,
    date_text: str,
    start_text: str,
    end_text: str,
    players_count: int,
    now: datetime | None = None,
) -> dict:
    """Validation and pricing only. Nothing is written."""
    day, start_min, end_min = validate_slot_range(date_text, start_text, end_text, now)
    station = _bookable_station(db, station_id)
    _check_headcount(station, players_count)
    tier = _required_tier(db, station.id, players_count)
    duration = end_min - start_min
    out = {
        "stationId": station.id,
        "stationTitle": station.title,
        "date": day.isoformat(),
        "startTime": minutes_to_time_str(start_min),
        "endTime": minutes_to_time_str(end_min),
        "duration": duration,
        "playersCount": players_count,
        "isAvailable": check_availability(db, station.id, day, start_min, end_min),
    }
    out.update(session_price(db, tier.price, duration))
    return out


def create_session(
    db: Session,
    user_id: str,
    station_id: str,
    date_text: str,
    start_text: str,
    end_text: str,
    players_count: int,
    now: datetime | None = None,
) -> dict:
    day, start_min, end_min = validate_slot_range(date_text, start_text, end_text, now)
    station = _bookable_station(db, station_id)
    _check_headcount(station, players_count)
    tier = _required_tier(db, station.id, players_count)
    if not check_availability(db, station.id, day, start_min, end_min):
        raise errors.ConflictError("time slot is already booked", code="slot_taken")

    try:
        station = _lock_station(db, station.id)
        if not station:
            raise errors.NotFoundError("station not found or not available")
        # Re-check under the lock; a concurrent request may have won meanwhile
        if not check_availability(db, station.id, day, start_min, end_min):
            raise errors.ConflictError("time slot was just booked by someone else", code="slot_taken")

        duration = end_min - start_min
        price = session_price(db, tier.price, duration)
        expire_at = datetime.now(timezone.utc) + timedelta(minutes=settings.SESSION_HOLD_MINUTES)
        start_str, end_str = minutes_to_time_str(start_min), minutes_to_time_str(end_min)

        session_id = str(uuid.uuid4())
        invoice = Invoice(
            id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=session_id,
            price=price["totalPrice"],
            price_before_tax=price["priceBeforeTax"],
            tax=price["tax"],
            status="not paid",
            due_date=expire_at,
            description=f"{station.title} on {day.isoformat()} {start_str}-{end_str}, {players_count} players",
        )
        game_session = GameSession(
            id=session_id,
            user_id=user_id,
            venue_id=station.venue_id,
            station_id=station.id,
            date=day,
            start_time=start_str,
            end_time=end_str,
            start_minutes=start_min,
            end_minutes=end_min,
            duration=duration,
            players_count=players_count,
            status="pending",
            expire_at=expire_at,
            invoice_id=invoice.id,
        )
        db.add(invoice)
        db.add(game_session)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("session conflict on unique slot index station=%s date=%s start=%s", station_id, day, start_min)
        raise errors.ConflictError("time slot was just booked by someone else", code="slot_taken")
    except errors.DomainError:
        db.rollback()
        logger.info("session rejected after lock station=%s date=%s start=%s", station_id, day, start_min)
        raise

    logger.info("session created id=%s station=%s date=%s %s-%s", session_id, station.id, day, start_str, end_str)
    venue = db.get(Venue, station.venue_id)
    return {
        "sessionId": session_id,
        "invoiceId": invoice.id,
        "totalPrice": price["totalPrice"],
        "tax": price["tax"],
        "priceBeforeTax": price["priceBeforeTax"],
        "expireAt": expire_at.isoformat(),
        "session": _session_dict(game_session, venue, station),
    }


def _own_session(db: Session, session_id: str, user_id: str, lock: bool = False) -> GameSession:
    stmt = select(GameSession).where(GameSession.id == session_id)
    if lock:
        stmt = stmt.with_for_update()
    s = db.execute(stmt).scalar_one_or_none()
    if not s or s.user_id != user_id:
        raise errors.NotFoundError("session not found")
    return s


def get_session(db: Session, session_id: str, user_id: str) -> dict:
    s = _own_session(db, session_id, user_id)
    out = _session_dict(s, db.get(Venue, s.venue_id), db.get(Station, s.station_id))
    out["expireAt"] = s.expire_at.isoformat() if s.expire_at else None
    invoice = db.get(Invoice, s.invoice_id) if s.invoice_id else None
    if invoice:
        out["invoice"] = {
            "id": invoice.id,
            "status": invoice.status,
            "totalPrice": invoice.price,
            "priceBeforeTax": invoice.price_before_tax,
            "tax": invoice.tax,
        }
    return out


def cancel_session(db: Session, session_id: str, user_id: str) -> dict:
    """Explicit cancellation by the owner. Frees the slot immediately."""
    s = _own_session(db, session_id, user_id, lock=True)
    if s.status not in CANCELLABLE_STATUSES:
        db.rollback()
        raise errors.ConflictError(f"session is already {s.status}", code="not_cancellable")
    s.status = "revoked"
    invoice = db.get(Invoice, s.invoice_id) if s.invoice_id else None
    if invoice and invoice.status == "not paid":
        invoice.status = "cancelled"
    db.commit()
    logger.info("session cancelled id=%s", s.id)
    return {"sessionId": s.id, "status": s.status}


def create_reservation(
    db: Session,
    venue_id: str,
    station_id: str,
    console_id: str,
    date_text: str,
    start_text: str,
    end_text: str,
    player_count: int,
    user_id: str | None = None,
    price: int | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Legacy booking path used by venue staff. No user means the venue blocks
    the slot itself; such rows are stored paid and accepted.
    """
    day, start_min, end_min = validate_slot_range(date_text, start_text, end_text, now)
    station = _bookable_station(db, station_id)
    if station.venue_id != venue_id or station.console_id != console_id:
        raise errors.NotFoundError("station not found for this venue and console")
    _check_headcount(station, player_count)
    if price is None:
        price = _required_tier(db, station.id, player_count).price
    elif price < 0:
        raise errors.ValidationError("price must be >= 0")

    try:
        station = _lock_station(db, station.id)
        if not station:
            raise errors.NotFoundError("station not found or not available")
        if not check_availability(db, station.id, day, start_min, end_min):
            raise errors.ConflictError("time slot is already booked", code="slot_taken")
        blocked = user_id is None
        reservation = Reservation(
            id=str(uuid.uuid4()),
            user_id=user_id,
            venue_id=venue_id,
            station_id=station.id,
            console_id=console_id,
            player_count=player_count,
            price=price,
            is_paid=blocked,
            is_accepted=blocked,
            is_blocked_by_org=blocked,
            start_time=at_minutes(day, start_min),
            end_time=at_minutes(day, end_min),
            reserved_date=day,
            notes=notes,
        )
        db.add(reservation)
        db.commit()
    except errors.DomainError:
        db.rollback()
        raise

    logger.info("reservation created id=%s station=%s blocked=%s", reservation.id, station.id, blocked)
    return {
        "id": reservation.id,
        "organizationId": venue_id,
        "stationId": station.id,
        "consoleId": console_id,
        "reservedDate": day.isoformat(),
        "startTime": minutes_to_time_str(start_min),
        "endTime": minutes_to_time_str(end_min),
        "playerCount": player_count,
        "price": price,
        "isPaid": reservation.is_paid,
        "isAccepted": reservation.is_accepted,
        "isBlockedByOrg": blocked,
        "userId": user_id,
    }


def check_station_availability(db: Session, station_id: str, date_text: str, start_text: str, end_text: str) -> dict:
    """
    Free/occupied for an arbitrary grid-aligned range. Stations that cannot be
    booked report no availability.
    """
    day, start_min, end_min = parse_range(date_text, start_text, end_text)
    if not decompose_range(start_min, end_min):
        raise errors.ValidationError(
            "range must start before it ends and align to 30 minute slots", code="invalid_slot"
        )
    station = db.execute(_station_query(station_id)).scalar_one_or_none()
    available = bool(station) and check_availability(db, station.id, day, start_min, end_min)
    return {"isAvailable": available}


def station_available_slots(db: Session, station_id: str, date_text: str) -> dict:
    day = parse_local_date(date_text)
    station = _bookable_station(db, station_id)
    hours = day_hours(db, station.venue_id, day)
    states = station_day_slots(db, station.id, day, hours.open_interval)
    return {
        "stationId": station.id,
        "date": day.isoformat(),
        "isClosed": hours.is_closed,
        "slots": [
            {
                "startTime": st.slot.start_time,
                "endTime": st.slot.end_time,
                "label": st.slot.label,
                "isAvailable": st.is_free,
            }
            for st in states
        ],
    }
