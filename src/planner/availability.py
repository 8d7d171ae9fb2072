"""
Mover availability module.

A mover declares a weekly schedule: for each day of the week, a list of
("HH:MM", "HH:MM") time ranges during which they accept work. A day that is
missing from the schedule, or mapped to an empty list, means the mover is
unavailable that day.

Times of day are compared at minute resolution. Ranges are half-open:
a job at exactly the range end is outside it.
"""

import re
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


class DayOfWeek(str, Enum):
    SUN = 'SUN'
    MON = 'MON'
    TUE = 'TUE'
    WED = 'WED'
    THU = 'THU'
    FRI = 'FRI'
    SAT = 'SAT'


# Sunday-zero weekday index -> symbolic day
DAY_INDEX: Dict[int, DayOfWeek] = {
    0: DayOfWeek.SUN,
    1: DayOfWeek.MON,
    2: DayOfWeek.TUE,
    3: DayOfWeek.WED,
    4: DayOfWeek.THU,
    5: DayOfWeek.FRI,
    6: DayOfWeek.SAT,
}

TIME_OF_DAY_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def day_from_index(index: int) -> DayOfWeek:
    """
    Maps a Sunday-zero weekday index (0 = Sunday ... 6 = Saturday) to a DayOfWeek.

    Indices outside 0-6 cannot come from a real clock; they fall back to
    Sunday rather than raising.
    """
    return DAY_INDEX.get(index, DayOfWeek.SUN)


def day_of_week(timestamp: datetime) -> DayOfWeek:
    """Returns the symbolic day of the week of a timestamp's calendar date."""
    # isoweekday(): Monday = 1 ... Sunday = 7
    return day_from_index(timestamp.isoweekday() % 7)


def parse_time_of_day(value: str) -> int:
    """
    Parses an "HH:MM" 24-hour string into minutes since midnight.

    Raises:
        ValueError: If the string is not a valid HH:MM time.
    """
    match = TIME_OF_DAY_PATTERN.match(value)
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_since_midnight(timestamp: datetime) -> int:
    return timestamp.hour * 60 + timestamp.minute


def get_day_slots(
    schedule: Optional[Mapping[DayOfWeek, Sequence[Tuple[str, str]]]],
    day: DayOfWeek,
) -> List[Tuple[str, str]]:
    """Returns the time ranges registered for a day, or an empty list."""
    if not schedule:
        return []
    return list(schedule.get(day) or [])


def is_within_availability(
    timestamp: datetime,
    schedule: Optional[Mapping[DayOfWeek, Sequence[Tuple[str, str]]]],
    tz: Optional[tzinfo] = None,
    duration_minutes: float = 0,
) -> bool:
    """
    Checks whether a point in time falls inside a mover's declared availability.

    Args:
        timestamp: The moment to check (typically a job's scheduled time).
        schedule: The mover's weekly schedule.
        tz: Time zone the schedule is expressed in. If given, an aware
            timestamp is converted to it before reading day and time of day.
        duration_minutes: If positive, the job starting at `timestamp` must
            also finish no later than the end of the matching range.

    Returns:
        True if the time of day lies within at least one [start, end) range
        registered for that day.
    """
    if tz is not None and timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(tz)

    slots = get_day_slots(schedule, day_of_week(timestamp))
    if not slots:
        return False

    job_start = minutes_since_midnight(timestamp)
    job_end = job_start + duration_minutes
    for start, end in slots:
        slot_start = parse_time_of_day(start)
        slot_end = parse_time_of_day(end)
        if not slot_start <= job_start < slot_end:
            continue
        if duration_minutes > 0 and job_end > slot_end:
            continue
        return True
    return False
