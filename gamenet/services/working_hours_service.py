"""
Per-venue weekly opening hours.

A day is exactly one of closed, open around the clock, or open in a same-day
range [start, end). A day with no stored entry counts as open around the
clock; absence is not the same as closed.
"""
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from gamenet.core import errors
from gamenet.models.venue import Venue, WorkingHoursEntry
from gamenet.services.calendar_service import (
    DAY_NAMES,
    local_day_of_week,
    normalize_digits,
    parse_hhmm,
    to_local,
)
from gamenet.services.slots.config import MINUTES_PER_DAY, minutes_to_time_str

CLOSED = "closed"
OPEN_24H = "open24h"
RANGE = "range"


@dataclass(frozen=True)
class DayHours:
    kind: str
    start_minutes: int = 0
    end_minutes: int = MINUTES_PER_DAY

    @classmethod
    def from_entry(cls, entry: WorkingHoursEntry | None) -> "DayHours":
        if entry is None or entry.is_24_hours:
            return cls(OPEN_24H)
        if entry.is_closed:
            return cls(CLOSED, 0, 0)
        if not entry.start_time or not entry.end_time:
            # Range with missing bounds behaves like an unconfigured day
            return cls(OPEN_24H)
        return cls(RANGE, parse_hhmm(entry.start_time), parse_hhmm(entry.end_time, end_of_day=True))

    @property
    def is_closed(self) -> bool:
        return self.kind == CLOSED

    @property
    def open_interval(self) -> tuple[int, int]:
        return self.start_minutes, self.end_minutes

    def is_open_at_minute(self, minute: int) -> bool:
        if self.kind == CLOSED:
            return False
        if self.kind == OPEN_24H:
            return True
        return self.start_minutes <= minute < self.end_minutes

    @property
    def summary(self) -> str:
        if self.kind == CLOSED:
            return "Closed"
        if self.kind == OPEN_24H:
            return "24 Hours"
        return f"{minutes_to_time_str(self.start_minutes)} - {self.end_label}"

    @property
    def end_label(self) -> str:
        return "24:00" if self.end_minutes == MINUTES_PER_DAY else minutes_to_time_str(self.end_minutes)

    def today_dict(self) -> dict:
        return {
            "startTime": minutes_to_time_str(self.start_minutes) if self.kind == RANGE else None,
            "endTime": self.end_label if self.kind == RANGE else None,
            "is24Hours": self.kind == OPEN_24H,
            "isClosed": self.kind == CLOSED,
        }


def _entry_for(db: Session, venue_id: str, day_of_week: int) -> WorkingHoursEntry | None:
    return db.execute(
        select(WorkingHoursEntry).where(
            WorkingHoursEntry.venue_id == venue_id,
            WorkingHoursEntry.day_of_week == day_of_week,
        )
    ).scalar_one_or_none()


def day_hours(db: Session, venue_id: str, d: date) -> DayHours:
    return DayHours.from_entry(_entry_for(db, venue_id, local_day_of_week(d)))


def is_open_at(db: Session, venue_id: str, instant: datetime) -> bool:
    """Aware instants are converted to the venue clock; naive ones are taken as local."""
    local = to_local(instant)
    hours = day_hours(db, venue_id, local.date())
    return hours.is_open_at_minute(local.hour * 60 + local.minute)


def is_open_on_day_only(db: Session, venue_id: str, d: date) -> bool:
    return not day_hours(db, venue_id, d).is_closed


def day_hours_batch(db: Session, venue_ids, day_of_week: int) -> dict[str, WorkingHoursEntry]:
    """One query for the entries of every venue on one day of the week."""
    ids = list(set(venue_ids))
    if not ids:
        return {}
    rows = db.execute(
        select(WorkingHoursEntry).where(
            WorkingHoursEntry.venue_id.in_(ids),
            WorkingHoursEntry.day_of_week == day_of_week,
        )
    ).scalars()
    return {r.venue_id: r for r in rows}


def week_hours_batch(db: Session, venue_ids) -> dict[str, list[WorkingHoursEntry]]:
    ids = list(set(venue_ids))
    out: dict[str, list[WorkingHoursEntry]] = defaultdict(list)
    if not ids:
        return out
    rows = db.execute(
        select(WorkingHoursEntry)
        .where(WorkingHoursEntry.venue_id.in_(ids))
        .order_by(WorkingHoursEntry.day_of_week)
    ).scalars()
    for r in rows:
        out[r.venue_id].append(r)
    return out


def summarize(entries: list[WorkingHoursEntry], d: date) -> dict:
    """Display block: today's hours plus which days of the week the venue works."""
    by_day = {e.day_of_week: e for e in entries}
    today = DayHours.from_entry(by_day.get(local_day_of_week(d)))
    return {
        "workingHours": {"today": today.today_dict(), "summary": today.summary},
        "workingDays": [
            {
                "dayOfWeek": day,
                "dayName": DAY_NAMES[day],
                "isWorking": not DayHours.from_entry(by_day.get(day)).is_closed,
            }
            for day in range(7)
        ],
    }


def summarize_venue(db: Session, venue_id: str, d: date) -> dict:
    return summarize(week_hours_batch(db, [venue_id]).get(venue_id, []), d)


def get_working_hours(db: Session, venue_id: str) -> list[dict]:
    if not db.get(Venue, venue_id):
        raise errors.NotFoundError("venue not found")
    by_day = {e.day_of_week: e for e in week_hours_batch(db, [venue_id]).get(venue_id, [])}
    out = []
    for day in range(7):
        hours = DayHours.from_entry(by_day.get(day))
        out.append({
            "dayOfWeek": day,
            "dayName": DAY_NAMES[day],
            "configured": day in by_day,
            "isClosed": hours.is_closed,
            "is24Hours": hours.kind == OPEN_24H,
            "startTime": hours.today_dict()["startTime"],
            "endTime": hours.today_dict()["endTime"],
            "summary": hours.summary,
        })
    return out


def _validate_week(entries: list[dict]) -> list[dict]:
    if len(entries) != 7:
        raise errors.ValidationError("working hours must contain exactly 7 days", code="partial_week")
    days = sorted(e.get("dayOfWeek") for e in entries)
    if days != list(range(7)):
        raise errors.ValidationError("each day of week 0-6 must appear exactly once", code="partial_week")

    clean = []
    for e in entries:
        day = e["dayOfWeek"]
        is_closed = bool(e.get("isClosed"))
        is_24 = bool(e.get("is24Hours"))
        if is_closed and is_24:
            raise errors.ValidationError(f"day {day}: cannot be both closed and 24 hours")
        start = end = None
        if not is_closed and not is_24:
            if not e.get("startTime") or not e.get("endTime"):
                raise errors.ValidationError(f"day {day}: startTime and endTime are required")
            start_min = parse_hhmm(e["startTime"])
            end_min = parse_hhmm(e["endTime"], end_of_day=True)
            if start_min >= end_min:
                raise errors.ValidationError(
                    f"day {day}: startTime must be before endTime (overnight ranges are not supported)",
                    code="overnight_range",
                )
            start = normalize_digits(e["startTime"])
            end = "24:00" if end_min == MINUTES_PER_DAY else normalize_digits(e["endTime"])
        clean.append({"day": day, "is_closed": is_closed, "is_24": is_24, "start": start, "end": end})
    return clean


def set_working_hours(db: Session, venue_id: str, entries: list[dict]) -> list[dict]:
    """Replace the whole week at once. Partial weeks are rejected."""
    if not db.get(Venue, venue_id):
        raise errors.NotFoundError("venue not found")
    clean = _validate_week(entries)

    db.execute(delete(WorkingHoursEntry).where(WorkingHoursEntry.venue_id == venue_id))
    for c in clean:
        db.add(WorkingHoursEntry(
            id=str(uuid.uuid4()),
            venue_id=venue_id,
            day_of_week=c["day"],
            is_closed=c["is_closed"],
            is_24_hours=c["is_24"],
            start_time=c["start"],
            end_time=c["end"],
        ))
    db.commit()
    return get_working_hours(db, venue_id)
