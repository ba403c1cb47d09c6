# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Engine-side timer validation and overlap reasoning.

The device's own verdicts (Timer Status programming errors, overlap warning
bit) are checked against what is computed here.

Overlap policy: recordings are half-open intervals ``[start, start +
duration)``, so a timer that starts exactly when another ends does not
overlap it. Identical intervals overlap. Once-only timers are compared on
their calendar date and time. A recurring timer has no fixed date, so it is
compared by time of day only, as if it were active every day; such
intervals may wrap past midnight.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from cec_conformance.core.models import TimerEntry

MINUTES_PER_DAY = 24 * 60

# Year used to place once-only timers when no reference date is given.
# A leap year, so that 29 February is a valid date.
DEFAULT_TIMER_YEAR = 2000


class TimerFieldError(Enum):
    """First invalid field of a timer, in validation order."""

    INVALID_MONTH = "invalid_month"
    INVALID_DAY = "invalid_day"
    INVALID_START_HOUR = "invalid_start_hour"
    INVALID_START_MINUTE = "invalid_start_minute"
    INVALID_DURATION_MINUTE = "invalid_duration_minute"
    ZERO_DURATION = "zero_duration"
    INVALID_RECORDING_SEQUENCE = "invalid_recording_sequence"


def days_in_month(month: int, year: int) -> int:
    return calendar.monthrange(year, month)[1]


def validate_timer(entry: TimerEntry, year: int) -> TimerFieldError | None:
    """Check the semantic ranges of a timer.

    Args:
        entry: The timer to check
        year: Year the timer falls in; decides whether 29 February exists

    Returns:
        The first invalid field, or None if the timer is valid.
    """
    if not 1 <= entry.month <= 12:
        return TimerFieldError.INVALID_MONTH
    if not 1 <= entry.day <= days_in_month(entry.month, year):
        return TimerFieldError.INVALID_DAY
    if not 0 <= entry.start_hour <= 23:
        return TimerFieldError.INVALID_START_HOUR
    if not 0 <= entry.start_minute <= 59:
        return TimerFieldError.INVALID_START_MINUTE
    if not 0 <= entry.duration_minutes <= 59 or not 0 <= entry.duration_hours <= 99:
        return TimerFieldError.INVALID_DURATION_MINUTE
    if entry.duration == 0:
        return TimerFieldError.ZERO_DURATION
    # Bit 7 is reserved; the low seven bits are the weekdays
    if entry.recording_sequence & 0x80:
        return TimerFieldError.INVALID_RECORDING_SEQUENCE
    return None


def next_february_year(today: date) -> int:
    """Year of the next February that has not ended yet."""
    return today.year + 1 if today.month > 2 else today.year


def invalid_february_day(year: int) -> int:
    """First day number that does not exist in February of ``year``."""
    return 30 if calendar.isleap(year) else 29


def timer_year(entry: TimerEntry, today: date) -> int:
    """Year of the next occurrence of a once-only timer's date on or after ``today``.

    A 29 February timer falls in the next leap year. A date that exists in no
    year (e.g. 31 November) is placed in ``today``'s year.
    """
    # Leap years are at most eight years apart
    for year in range(today.year, today.year + 9):
        try:
            when = date(year, entry.month, entry.day)
        except ValueError:
            continue
        if when >= today:
            return year
    return today.year


def _absolute_start(entry: TimerEntry, year: int) -> int:
    return date(year, entry.month, entry.day).toordinal() * MINUTES_PER_DAY + entry.start_of_day


def _intervals_overlap(a: TimerEntry, year_a: int, b: TimerEntry, year_b: int) -> bool:
    if a.is_recurring or b.is_recurring:
        return _daily_overlap(a.start_of_day, a.duration, b.start_of_day, b.duration)
    if a.duration <= 0 or b.duration <= 0:
        return False
    start_a = _absolute_start(a, year_a)
    start_b = _absolute_start(b, year_b)
    return start_a < start_b + b.duration and start_b < start_a + a.duration


def _daily_overlap(start_a: int, duration_a: int, start_b: int, duration_b: int) -> bool:
    if duration_a <= 0 or duration_b <= 0:
        return False
    if duration_a >= MINUTES_PER_DAY or duration_b >= MINUTES_PER_DAY:
        return True
    # Either interval starts inside the other, measured around the clock
    if (start_b - start_a) % MINUTES_PER_DAY < duration_a:
        return True
    return (start_a - start_b) % MINUTES_PER_DAY < duration_b


def timers_overlap(a: TimerEntry, b: TimerEntry, year: int = DEFAULT_TIMER_YEAR) -> bool:
    """True if the recordings of ``a`` and ``b`` intersect.

    Symmetric in its arguments; a zero-duration timer never overlaps. Both
    once-only timers are placed in ``year``.
    """
    return _intervals_overlap(a, year, b, year)


def timer_at(moment: datetime, hours: int, minutes: int, recording_sequence: int = 0) -> TimerEntry:
    """Timer starting at ``moment`` (to the minute) for the given duration."""
    return TimerEntry(
        day=moment.day,
        month=moment.month,
        start_hour=moment.hour,
        start_minute=moment.minute,
        duration_hours=hours,
        duration_minutes=minutes,
        recording_sequence=recording_sequence,
    )


def timer_on(day: date, hour: int, minute: int, hours: int, minutes: int, recording_sequence: int = 0) -> TimerEntry:
    return TimerEntry(day.day, day.month, hour, minute, hours, minutes, recording_sequence)


def days_ahead(now: datetime, days: int) -> datetime:
    return now + timedelta(days=days)


@dataclass
class TimerSchedule:
    """Timers the device has accepted, in submission order.

    Once-only timers are placed in the year of their next occurrence counted
    from ``today``, so a schedule may span New Year. Without ``today`` every
    timer falls in DEFAULT_TIMER_YEAR.
    """

    today: date | None = None
    accepted: list[TimerEntry] = field(default_factory=list)

    def year_of(self, entry: TimerEntry) -> int:
        if self.today is None:
            return DEFAULT_TIMER_YEAR
        return timer_year(entry, self.today)

    def overlaps(self, entry: TimerEntry) -> bool:
        """Engine-side overlap predicate against all accepted timers."""
        year = self.year_of(entry)
        return any(_intervals_overlap(entry, year, other, self.year_of(other)) for other in self.accepted)

    def accept(self, entry: TimerEntry) -> None:
        self.accepted.append(entry)

    def __len__(self) -> int:
        return len(self.accepted)
