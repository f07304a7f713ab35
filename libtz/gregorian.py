"""Library for proleptic Gregorian calendar arithmetic.

These functions have no knowledge of timezones. They convert a count of
seconds (already adjusted by any UTC offset) to broken-down calendar fields
and back. All arithmetic is on python integers with floor division, so
negative values and values far outside the range of `datetime` are
handled exactly.

The day number conversions follow the era based algorithm where the
calendar is shifted to start on March 1st so that the leap day is the last
day of the shifted year. An era is a 400 year cycle of 146097 days.
"""

from __future__ import annotations

from typing import NamedTuple

__all__ = [
    "BrokenDown",
    "days_from_civil",
    "civil_from_days",
    "to_civil",
    "from_civil",
    "is_leap",
    "days_in_month",
]

SECS_PER_MIN = 60
SECS_PER_HOUR = 3600
SECS_PER_DAY = 86400
DAYS_PER_ERA = 146097
YEARS_PER_ERA = 400

# 1970-01-01 was a Thursday (Sunday=0)
EPOCH_WEEKDAY = 4

# Days from 0000-03-01 to 1970-01-01
_EPOCH_SHIFT = 719468

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class BrokenDown(NamedTuple):
    """Calendar fields for a count of seconds."""

    year: int
    """The full proleptic Gregorian year, e.g. 1970."""

    month: int
    """Month between 1 and 12."""

    day: int
    """Day of the month between 1 and 31."""

    hour: int
    minute: int
    second: int

    weekday: int
    """Day of the week between 0 (Sunday) and 6 (Saturday)."""

    yearday: int
    """Day of the year between 0 and 365 (January 1st is 0)."""


def is_leap(year: int) -> bool:
    """Return True if the year is a leap year."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the month (1-12) of the year."""
    if month == 2 and is_leap(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def days_from_civil(year: int, month: int, day: int) -> int:
    """Return the number of days since 1970-01-01 for the date.

    The month must be between 1 and 12, but the day may be any integer and
    is counted from the first of the month.
    """
    year -= month <= 2
    era = year // YEARS_PER_ERA
    year_of_era = year - era * YEARS_PER_ERA
    shifted_month = month - 3 if month > 2 else month + 9
    day_of_year = (153 * shifted_month + 2) // 5 + day - 1
    day_of_era = (
        year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    )
    return era * DAYS_PER_ERA + day_of_era - _EPOCH_SHIFT


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Return the (year, month, day) for a number of days since 1970-01-01."""
    days += _EPOCH_SHIFT
    era = days // DAYS_PER_ERA
    day_of_era = days - era * DAYS_PER_ERA
    year_of_era = (
        day_of_era
        - day_of_era // 1460
        + day_of_era // 36524
        - day_of_era // (DAYS_PER_ERA - 1)
    ) // 365
    day_of_year = day_of_era - (
        365 * year_of_era + year_of_era // 4 - year_of_era // 100
    )
    shifted_month = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * shifted_month + 2) // 5 + 1
    month = shifted_month + 3 if shifted_month < 10 else shifted_month - 9
    year = year_of_era + era * YEARS_PER_ERA + (month <= 2)
    return year, month, day


def to_civil(seconds: int) -> BrokenDown:
    """Decompose seconds since the epoch into calendar fields."""
    days, rem = divmod(seconds, SECS_PER_DAY)
    hour, rem = divmod(rem, SECS_PER_HOUR)
    minute, second = divmod(rem, SECS_PER_MIN)
    year, month, day = civil_from_days(days)
    return BrokenDown(
        year=year,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        second=second,
        weekday=(days + EPOCH_WEEKDAY) % 7,
        yearday=days - days_from_civil(year, 1, 1),
    )


def from_civil(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0
) -> int:
    """Return seconds since the epoch for the calendar fields.

    Fields out of their normal range are carried rather than rejected. The
    month is folded into the year first, then the day of the month is
    counted from the first of that month, and the time of day fields are
    added as elapsed time. For example month 2 (February) day 31 of a common
    year is March 3rd, and hour -1 is the last hour of the previous day.
    """
    year_carry, month_index = divmod(month - 1, 12)
    days = days_from_civil(year + year_carry, month_index + 1, 1) + day - 1
    return (
        days * SECS_PER_DAY + hour * SECS_PER_HOUR + minute * SECS_PER_MIN + second
    )
