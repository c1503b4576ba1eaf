"""Conversion between 12-hour slot labels and 24-hour clock values.

Slots are stored the way the booking frontend renders them, e.g. ``"01:30 PM"``.
"""

MERIDIEM_MARKERS = ('AM', 'PM')


class SlotParseError(ValueError):
    """Raised when a time_slot label is not of the form ``H:MM AM`` or ``H:MM PM``."""

    def __init__(self, time_slot: object, reason: str):
        self.time_slot = time_slot
        self.reason = reason
        super().__init__(f'Invalid time slot {time_slot!r}: {reason}')


def decode_time_slot(time_slot: str) -> tuple[int, int]:
    if not isinstance(time_slot, str):
        raise SlotParseError(time_slot, 'expected a string')

    parts = time_slot.split(' ')
    if len(parts) != 2:
        raise SlotParseError(time_slot, 'expected "<hour>:<minute> <AM|PM>"')

    clock, marker = parts
    if marker not in MERIDIEM_MARKERS:
        raise SlotParseError(time_slot, 'marker must be AM or PM')

    clock_parts = clock.split(':')
    if len(clock_parts) != 2 or not all(part.isascii() and part.isdigit() for part in clock_parts):
        raise SlotParseError(time_slot, 'clock part must be numeric hour and minute')
    if len(clock_parts[0]) > 2 or len(clock_parts[1]) != 2:
        raise SlotParseError(time_slot, 'expected a one or two digit hour and a two digit minute')

    hour, minute = (int(part) for part in clock_parts)
    if not 1 <= hour <= 12:
        raise SlotParseError(time_slot, 'hour must be between 1 and 12')
    if not 0 <= minute <= 59:
        raise SlotParseError(time_slot, 'minute must be between 0 and 59')

    if marker == 'PM' and hour != 12:
        hour += 12
    if marker == 'AM' and hour == 12:
        hour = 0

    return hour, minute


def format_time_slot(hour: int, minute: int) -> str:
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ValueError(f'Invalid clock value {hour}:{minute}')

    marker = 'PM' if hour >= 12 else 'AM'
    display_hour = hour % 12 or 12
    return f'{display_hour:02d}:{minute:02d} {marker}'


def normalize_time_slot(time_slot: str) -> str:
    return format_time_slot(*decode_time_slot(time_slot.strip()))
