"""Library for parsing TZ rules.

TZ supports these two formats

No DST: std offset
  - std: Name of the timezone
  - offset: Time added to local time to get UTC
  Example: EST+5

DST: std offset dst [offset],start[/time],end[/time]
  - dst: Name of the Daylight savings time timezone
  - offset: Defaults to 1 hour ahead of STD offset if not specified
  - start & end: Time period when DST is in effect. The start/end have
    the following formats:
      Jn: A julian day between 1 and 365 (Feb 29th never counted)
      n: A julian day between 0 and 365 (Feb 29th is counted in leap years)
      Mm.w.d:
          m: Month between 1 and 12
          d: Between 0 (Sunday) and 6 (Saturday)
          w: Between 1 and 5. Week 1 is first week d occurs
      The time field is in hh:mm:ss. The hour can be 167 to -167.

The start time is in local standard time and the end time is in local
daylight savings time. A rule with a DST name but no start and end dates
uses the US rules, as tzcode does.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Union

from dateutil import relativedelta

from libtz import gregorian
from libtz.exceptions import FormatError

__all__ = [
    "Rule",
    "RuleDate",
    "RuleDay",
    "RuleOccurrence",
    "RuleTransition",
    "parse_tz_rule",
]

_LOGGER = logging.getLogger(__name__)

_DEFAULT_TIME = 2 * gregorian.SECS_PER_HOUR
_DEFAULT_DST_RULE = ",M3.2.0,M11.1.0"
_MAX_OFFSET_HOURS = 24
_MAX_RULE_HOURS = 167

# Weekday arithmetic is done on an equivalent year in this 400 year window
# since the Gregorian calendar repeats every era.
_BASE_YEAR = 2000
_EPOCH_ORDINAL = datetime.date(1970, 1, 1).toordinal()


def _parse_time(values: dict[str, Any], max_hours: int) -> int | None:
    """Convert an offset from [+/-]hh[:mm[:ss]] to seconds.

    The parse tree dict expects fields of hour, minutes, seconds (see tz_time rule in parser).
    """
    if (hour := values["hour"]) is None:
        return None
    sign = 1
    if hour.startswith("+"):
        hour = hour[1:]
    elif hour.startswith("-"):
        sign = -1
        hour = hour[1:]
    minutes = int(values.get("minutes") or "0")
    seconds = int(values.get("seconds") or "0")
    if int(hour) > max_hours or minutes > 59 or seconds > 59:
        raise ValueError(f"Time out of range: {values}")
    return sign * (
        int(hour) * gregorian.SECS_PER_HOUR
        + minutes * gregorian.SECS_PER_MIN
        + seconds
    )


@dataclass(frozen=True)
class RuleDay:
    """A date referenced in a timezone rule for a julian day."""

    day_of_year: int
    """A day of the year, 1 to 365 for julian days or 0 to 365 when leap days count."""

    time: int = _DEFAULT_TIME
    """Seconds after local midnight when the rule goes into effect, default of 02:00:00."""

    leap_day_counted: bool = False
    """True for the zero based form where February 29th is counted."""

    def days_since_epoch(self, year: int) -> int:
        """Return the day of this rule in the specified year as days since 1970-01-01."""
        day_index = self.day_of_year
        if not self.leap_day_counted:
            day_index -= 1
            if gregorian.is_leap(year) and self.day_of_year >= 60:
                day_index += 1
        return gregorian.days_from_civil(year, 1, 1) + day_index


@dataclass(frozen=True)
class RuleDate:
    """A date referenced in a timezone rule."""

    month: int
    """A month between 1 and 12."""

    day_of_week: int
    """A day of the week between 0 (Sunday) and 6 (Saturday)."""

    week_of_month: int
    """A week number of the month (1 to 5) based on the first occurrence of day_of_week."""

    time: int = _DEFAULT_TIME
    """Seconds after local midnight when the rule goes into effect, default of 02:00:00."""

    def days_since_epoch(self, year: int) -> int:
        """Return the day of this rule in the specified year as days since 1970-01-01."""
        cycles, year_of_era = divmod(year - _BASE_YEAR, gregorian.YEARS_PER_ERA)
        first_of_month = datetime.date(_BASE_YEAR + year_of_era, self.month, 1)
        if self.week_of_month == 5:
            delta = relativedelta.relativedelta(
                day=gregorian.days_in_month(first_of_month.year, self.month),
                weekday=self._weekday(-1),
            )
        else:
            delta = relativedelta.relativedelta(
                weekday=self._weekday(self.week_of_month)
            )
        target = first_of_month + delta
        return (
            target.toordinal() - _EPOCH_ORDINAL + cycles * gregorian.DAYS_PER_ERA
        )

    def _weekday(self, nth: int) -> relativedelta.weekday:
        """Return the dateutil weekday for this rule based on day_of_week."""
        return relativedelta.weekdays[(self.day_of_week - 1) % 7](nth)


@dataclass(frozen=True)
class RuleOccurrence:
    """A TimeZone rule occurrence."""

    name: str
    """The name of the timezone occurrence e.g. EST."""

    utc_offset: int
    """Seconds east of UTC for this occurrence (not time added to local time)."""


class RuleTransition(NamedTuple):
    """An instant computed from a rule at which standard or daylight time starts."""

    instant: int
    occurrence: RuleOccurrence
    dst: bool


@dataclass(frozen=True)
class Rule:
    """A rule for evaluating future timezone transitions."""

    std: RuleOccurrence
    """An occurrence of a timezone transition for standard time."""

    dst: Optional[RuleOccurrence] = None
    """An occurrence of a timezone transition for daylight savings time."""

    dst_start: Union[RuleDate, RuleDay, None] = None
    """Describes when dst goes into effect."""

    dst_end: Union[RuleDate, RuleDay, None] = None
    """Describes when dst ends (std starts)."""

    @property
    def has_dst(self) -> bool:
        """Return True if the rule has a yearly daylight savings schedule."""
        return bool(self.dst and self.dst_start and self.dst_end)

    def transitions(self, year: int) -> list[RuleTransition]:
        """Return the DST start and end instants for the year, in that order."""
        if not self.dst or not self.dst_start or not self.dst_end:
            return []
        start = (
            self.dst_start.days_since_epoch(year) * gregorian.SECS_PER_DAY
            + self.dst_start.time
            - self.std.utc_offset
        )
        end = (
            self.dst_end.days_since_epoch(year) * gregorian.SECS_PER_DAY
            + self.dst_end.time
            - self.dst.utc_offset
        )
        return [
            RuleTransition(start, self.dst, True),
            RuleTransition(end, self.std, False),
        ]

    def transitions_between(self, start: int, end: int) -> list[RuleTransition]:
        """Return the rule transitions with an instant in (start, end]."""
        first_year = self._year_of(start) - 1
        last_year = self._year_of(end) + 1
        return [
            transition
            for year in range(first_year, last_year + 1)
            for transition in self.transitions(year)
            if start < transition.instant <= end
        ]

    def occurrence_at(self, instant: int) -> tuple[RuleOccurrence, bool]:
        """Return the occurrence in effect at the instant and if it is DST."""
        if (dst := self.dst) is None or not self.has_dst:
            return (self.std, False)
        year = self._year_of(instant)
        candidates = sorted(
            (
                transition
                for y in range(year - 2, year + 2)
                for transition in self.transitions(y)
            ),
            key=lambda transition: transition.instant,
        )
        # The state before the earliest candidate is the opposite of it
        active = (self.std, False) if candidates[0].dst else (dst, True)
        for transition in candidates:
            if transition.instant > instant:
                break
            active = (transition.occurrence, transition.dst)
        return active

    def _year_of(self, instant: int) -> int:
        return gregorian.to_civil(instant + self.std.utc_offset).year


# Regexp for parsing the TZ string
_OFFSET_RE_PATTERN: re.Pattern[str] = re.compile(
    r"(?P<name>(\<[a-zA-Z0-9+\-]+\>|[a-zA-Z]+))"  # name
    r"((?P<hour>[+-]?\d{1,3})(?::(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}))?)?)?"  # offset
)
_START_END_RE_PATTERN = re.compile(
    # days in either julian (J prefix), zero based or month.week.day (M prefix) format
    r",(J(?P<day_of_year>\d{1,3})|(?P<zero_based_day>\d{1,3})"
    r"|M(?P<month>\d{1,2})\.(?P<week_of_month>\d)\.(?P<day_of_week>\d))"
    # time
    r"(\/(?P<hour>[+-]?\d{1,3})(?::(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}))?)?)?"
)


def _rule_occurrence_from_match(
    match: re.Match[str], default_offset: int | None = None
) -> RuleOccurrence:
    """Create a rule occurrence from a regex match."""
    offset = _parse_time(match.groupdict(), _MAX_OFFSET_HOURS)
    if offset is None:
        if default_offset is None:
            raise ValueError(f"Missing offset for {match.group('name')}")
        utc_offset = default_offset
    else:
        # The TZ string offset is time added to local time to get UTC
        utc_offset = -offset
    return RuleOccurrence(name=match.group("name").strip("<>"), utc_offset=utc_offset)


def _rule_date_from_match(match: re.Match[str]) -> Union[RuleDay, RuleDate]:
    """Create a rule date from a regex match."""
    time = _parse_time(match.groupdict(), _MAX_RULE_HOURS)
    if time is None:
        time = _DEFAULT_TIME
    if match["day_of_year"] is not None:
        day_of_year = int(match.group("day_of_year"))
        if not 1 <= day_of_year <= 365:
            raise ValueError(f"Julian day out of range: {day_of_year}")
        return RuleDay(day_of_year=day_of_year, time=time)
    if match["zero_based_day"] is not None:
        day_of_year = int(match.group("zero_based_day"))
        if not 0 <= day_of_year <= 365:
            raise ValueError(f"Day of year out of range: {day_of_year}")
        return RuleDay(day_of_year=day_of_year, time=time, leap_day_counted=True)
    rule_date = RuleDate(
        month=int(match.group("month")),
        week_of_month=int(match.group("week_of_month")),
        day_of_week=int(match.group("day_of_week")),
        time=time,
    )
    if (
        not 1 <= rule_date.month <= 12
        or not 1 <= rule_date.week_of_month <= 5
        or not 0 <= rule_date.day_of_week <= 6
    ):
        raise ValueError(f"Month, week or day out of range: {match.group(0)}")
    return rule_date


def parse_tz_rule(tz_str: str) -> Rule:
    """Parse the TZ string into a Rule object."""
    try:
        return _parse_tz_rule(tz_str)
    except ValueError as err:
        raise FormatError(f"Unable to parse TZ string: {tz_str}") from err


def _parse_tz_rule(tz_str: str) -> Rule:
    buffer = tz_str
    if (std_match := _OFFSET_RE_PATTERN.match(buffer)) is None:
        raise ValueError(f"Unable to parse TZ string: {tz_str}")
    buffer = buffer[std_match.end() :]
    if (dst_match := _OFFSET_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[dst_match.end() :]
        if not buffer:
            _LOGGER.debug("Using default DST rule for TZ string: %s", tz_str)
            buffer = _DEFAULT_DST_RULE
    if (std_start := _START_END_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[std_start.end() :]
    if (std_end := _START_END_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[std_end.end() :]
    if std_start is not None and dst_match is None:
        raise ValueError(f"Unable to parse TZ string, dates without dst: {tz_str}")
    if (std_start is None) != (std_end is None):
        raise ValueError(
            f"Unable to parse TZ string, should have both or neither start and end dates: {tz_str}"
        )
    if buffer:
        raise ValueError(
            f"Unable to parse TZ string, unexpected trailing data: {tz_str}"
        )
    std = _rule_occurrence_from_match(std_match)
    return Rule(
        std=std,
        dst=(
            _rule_occurrence_from_match(
                dst_match, default_offset=std.utc_offset + gregorian.SECS_PER_HOUR
            )
            if dst_match
            else None
        ),
        dst_start=_rule_date_from_match(std_start) if std_start else None,
        dst_end=_rule_date_from_match(std_end) if std_end else None,
    )
