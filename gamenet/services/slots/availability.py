"""
Free/occupied state of a station's slots for one day.

Both booking record kinds (legacy reservations and sessions) are read as plain
OccupiedRange values, so nothing below cares which table a booking came from.
Stations that are inactive, unaccepted or soft-deleted must be filtered out by
the caller before asking for availability.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from gamenet.models.booking import Reservation, GameSession, ACTIVE_SESSION_STATUSES
from .config import SLOT_MINUTES, MINUTES_PER_DAY
from .generator import Slot, generate_day_slots


@dataclass(frozen=True)
class OccupiedRange:
    start_minutes: int
    end_minutes: int
    source: str  # "session" | "reservation"
    booking_id: str = ""


@dataclass(frozen=True)
class SlotState:
    slot: Slot
    is_free: bool


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap."""
    return a_start < b_end and a_end > b_start


def _minutes_on(day: date, value: datetime) -> int:
    midnight = datetime(day.year, day.month, day.day)
    delta = int((value - midnight).total_seconds() // 60)
    return max(0, min(MINUTES_PER_DAY, delta))


def _from_session(s: GameSession) -> OccupiedRange:
    return OccupiedRange(s.start_minutes, s.end_minutes, "session", s.id)


def _from_reservation(r: Reservation, day: date) -> OccupiedRange:
    return OccupiedRange(_minutes_on(day, r.start_time), _minutes_on(day, r.end_time), "reservation", r.id)


def occupied_ranges(db: Session, station_ids, day: date) -> dict[str, list[OccupiedRange]]:
    """Occupied ranges for every station in `station_ids` on `day`. One query per record kind."""
    ids = list(set(station_ids))
    out: dict[str, list[OccupiedRange]] = defaultdict(list)
    if not ids:
        return out

    sessions = db.execute(
        select(GameSession).where(
            GameSession.station_id.in_(ids),
            GameSession.date == day,
            GameSession.status.in_(ACTIVE_SESSION_STATUSES),
        )
    ).scalars().all()
    for s in sessions:
        out[s.station_id].append(_from_session(s))

    reservations = db.execute(
        select(Reservation).where(
            Reservation.station_id.in_(ids),
            Reservation.reserved_date == day,
        )
    ).scalars().all()
    for r in reservations:
        out[r.station_id].append(_from_reservation(r, day))

    for ranges in out.values():
        ranges.sort(key=lambda o: (o.start_minutes, o.end_minutes))
    return out


def annotate_slots(slots: list[Slot], occupied: list[OccupiedRange]) -> list[SlotState]:
    return [
        SlotState(
            slot=s,
            is_free=not any(overlaps(s.start_minutes, s.end_minutes, o.start_minutes, o.end_minutes) for o in occupied),
        )
        for s in slots
    ]


def decompose_range(start_minutes: int, end_minutes: int) -> list[tuple[int, int]]:
    """Split [start, end) into contiguous grid slots. Misaligned or empty ranges give []."""
    if end_minutes <= start_minutes or start_minutes % SLOT_MINUTES or end_minutes % SLOT_MINUTES:
        return []
    return [(m, m + SLOT_MINUTES) for m in range(start_minutes, end_minutes, SLOT_MINUTES)]


def is_range_free(
    occupied: list[OccupiedRange],
    start_minutes: int,
    end_minutes: int,
    slots: list[Slot] | None = None,
) -> bool:
    """
    Every grid slot inside [start, end) must be free. When `slots` is given
    (a day already clipped to opening hours) each piece must also be one of them.
    """
    pieces = decompose_range(start_minutes, end_minutes)
    if not pieces:
        return False
    offered = {s.start_minutes for s in slots} if slots is not None else None
    for piece_start, piece_end in pieces:
        if offered is not None and piece_start not in offered:
            return False
        if any(overlaps(piece_start, piece_end, o.start_minutes, o.end_minutes) for o in occupied):
            return False
    return True


def station_day_slots(
    db: Session,
    station_id: str,
    day: date,
    open_interval: tuple[int, int] | None = None,
) -> list[SlotState]:
    occupied = occupied_ranges(db, [station_id], day).get(station_id, [])
    return annotate_slots(generate_day_slots(day, open_interval), occupied)


def check_availability(db: Session, station_id: str, day: date, start_minutes: int, end_minutes: int) -> bool:
    occupied = occupied_ranges(db, [station_id], day).get(station_id, [])
    return is_range_free(occupied, start_minutes, end_minutes)
