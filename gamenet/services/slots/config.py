"""
Slot grid constants and minute helpers.
"""
SLOT_MINUTES = 30
MINUTES_PER_DAY = 24 * 60


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM". The end of the day renders as "00:00"."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_aligned_slot(start_minutes: int, end_minutes: int) -> bool:
    """Exactly one slot long and starting on :00 or :30."""
    return end_minutes - start_minutes == SLOT_MINUTES and start_minutes % SLOT_MINUTES == 0
