"""
Discretize a local calendar day into the fixed half-hour grid.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .config import SLOT_MINUTES, MINUTES_PER_DAY, minutes_to_time_str


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
    start_minutes: int
    end_minutes: int
    label: str

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start_minutes)

    @property
    def end_time(self) -> str:
        return minutes_to_time_str(self.end_minutes)


def generate_day_slots(day: date, open_interval: tuple[int, int] | None = None) -> list[Slot]:
    """
    Ordered slots [00:00-00:30) .. [23:30-24:00) for `day`, clipped to
    `open_interval` (start_minutes, end_minutes). None means the whole day.

    A slot is kept only when it lies fully inside the interval.
    """
    open_start, open_end = open_interval if open_interval is not None else (0, MINUTES_PER_DAY)
    midnight = datetime(day.year, day.month, day.day)
    slots = []
    for start_min in range(0, MINUTES_PER_DAY, SLOT_MINUTES):
        end_min = start_min + SLOT_MINUTES
        if start_min < open_start or end_min > open_end:
            continue
        slots.append(Slot(
            start=midnight + timedelta(minutes=start_min),
            end=midnight + timedelta(minutes=end_min),
            start_minutes=start_min,
            end_minutes=end_min,
            label=f"{minutes_to_time_str(start_min)} - {minutes_to_time_str(end_min)}",
        ))
    return slots
