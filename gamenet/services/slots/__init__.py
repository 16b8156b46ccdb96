from .config import SLOT_MINUTES, minutes_to_time_str, is_aligned_slot
from .generator import Slot, generate_day_slots
from .availability import (
    OccupiedRange,
    SlotState,
    overlaps,
    occupied_ranges,
    annotate_slots,
    decompose_range,
    is_range_free,
    station_day_slots,
    check_availability,
)
