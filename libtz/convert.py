"""Conversions between instants and civil time.

An instant is a count of seconds since 1970-01-01T00:00:00Z. For timezones
that carry leap second records the count includes inserted leap seconds,
otherwise it is POSIX time.

Converting an instant to civil time is always unambiguous. Converting a
civil time back to an instant is not: when clocks spring forward some civil
times never occur, and when clocks fall back some occur twice. `mktime`
resolves these using the DST hint in the civil time and then the
`AmbiguityPolicy`, the default being the earlier instant as libc does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from . import gregorian
from .civil import TM_YEAR_BASE, CivilTime
from .exceptions import AmbiguousCivilTime, InvalidCivilTime, TimeOverflowError
from .policy import AmbiguityPolicy, get_ambiguity_policy
from .tzif.model import TransitionTable, ZoneOffset

if TYPE_CHECKING:
    from .timezone import Timezone

__all__ = [
    "Candidate",
    "LocalResolution",
    "gmtime",
    "localtime",
    "mktime",
    "posix2time",
    "resolve_local",
    "time2posix",
    "timegm",
]

_LOGGER = logging.getLogger(__name__)

TIME_MIN = -(2**63)
TIME_MAX = 2**63 - 1
TM_YEAR_MIN = -(2**31)
TM_YEAR_MAX = 2**31 - 1

UTC = ZoneOffset(0, False, "UTC")

# Larger than the difference between any two UTC offsets
_SEARCH_WINDOW = 2 * gregorian.SECS_PER_DAY


class Candidate(NamedTuple):
    """An instant at which a civil time occurs, with the offset in effect."""

    instant: int
    offset: ZoneOffset


@dataclass(frozen=True)
class LocalResolution:
    """The instants at which a civil time occurs in a timezone."""

    candidates: tuple[Candidate, ...]
    """Instants whose local time is the civil time, in ascending order.

    This is empty for a civil time in a gap, and has more than one value
    for a civil time repeated when clocks are turned back.
    """

    before: ZoneOffset
    """The offset in effect before the civil time, or before the gap."""

    after: ZoneOffset
    """The offset in effect after the civil time, or after the gap."""

    elapsed: int = 0
    """Seconds outside of 0-59 that are added to the result as elapsed time."""


def _check_instant(instant: int) -> None:
    if not TIME_MIN <= instant <= TIME_MAX:
        raise TimeOverflowError(f"Instant out of 64-bit range: {instant}")


def _civil_time(seconds: int, offset: ZoneOffset, leap_hit: bool = False) -> CivilTime:
    """Build the civil time for seconds already adjusted by the offset."""
    fields = gregorian.to_civil(seconds)
    tm_year = fields.year - TM_YEAR_BASE
    if not TM_YEAR_MIN <= tm_year <= TM_YEAR_MAX:
        raise TimeOverflowError(f"Year out of range: {fields.year}")
    return CivilTime(
        tm_year=tm_year,
        tm_mon=fields.month - 1,
        tm_mday=fields.day,
        tm_hour=fields.hour,
        tm_min=fields.minute,
        # The inserted leap second is shown as 23:59:60
        tm_sec=fields.second + leap_hit,
        tm_wday=fields.weekday,
        tm_yday=fields.yearday,
        tm_isdst=int(offset.is_dst),
        tm_gmtoff=offset.utc_offset,
        tm_zone=offset.abbreviation,
    )


def _local_seconds(civil: CivilTime, second: int) -> int:
    """Return the normalized civil time as seconds, ignoring any offset."""
    return gregorian.from_civil(
        civil.year,
        civil.tm_mon + 1,
        civil.tm_mday,
        civil.tm_hour,
        civil.tm_min,
        second,
    )


def gmtime(instant: int) -> CivilTime:
    """Convert an instant to UTC civil time."""
    _check_instant(instant)
    return _civil_time(instant, UTC)


def timegm(civil: CivilTime) -> int:
    """Convert a UTC civil time to an instant.

    The DST flag, offset and abbreviation are ignored and out of range
    fields are normalized.
    """
    instant = _local_seconds(civil, civil.tm_sec)
    if not TIME_MIN <= instant <= TIME_MAX:
        raise InvalidCivilTime(f"Civil time out of 64-bit range: {civil}")
    return instant


def _localtime(table: TransitionTable, instant: int) -> CivilTime:
    _check_instant(instant)
    offset = table.offset_at(instant)
    correction, leap_hit = table.leap_correction(instant)
    return _civil_time(instant - correction + offset.utc_offset, offset, leap_hit)


def localtime(tz: Timezone, instant: int) -> CivilTime:
    """Convert an instant to civil time in the timezone."""
    return _localtime(tz.table, instant)


def _time2posix(table: TransitionTable, instant: int) -> int:
    correction, _ = table.leap_correction(instant)
    return instant - correction


def _posix2time(table: TransitionTable, posix: int) -> int:
    if not table.leap_seconds:
        return posix
    instant = posix + table.leap_correction(posix)[0]
    value = _time2posix(table, instant)
    # Step one second at a time since corrections are never more than a
    # second apart; for a repeated second this lands on the earlier one.
    if value < posix:
        while value < posix:
            instant += 1
            value = _time2posix(table, instant)
        instant -= value != posix
    elif value > posix:
        while value > posix:
            instant -= 1
            value = _time2posix(table, instant)
        instant += value != posix
    return instant


def time2posix(tz: Timezone, instant: int) -> int:
    """Convert a leap second aware instant to POSIX time.

    During an inserted leap second the POSIX time repeats the prior second.
    """
    return _time2posix(tz.table, instant)


def posix2time(tz: Timezone, posix: int) -> int:
    """Convert POSIX time to a leap second aware instant.

    The result satisfies `time2posix(tz, posix2time(tz, x)) == x`.
    """
    return _posix2time(tz.table, posix)


def _resolve_local(table: TransitionTable, civil: CivilTime) -> LocalResolution:
    second = civil.tm_sec
    elapsed = 0
    if not 0 <= second < 60:
        # Resolve the start of the minute, then add the seconds as elapsed
        # time so that 23:59:60 lands on an inserted leap second.
        elapsed, second = second, 0
    local = _local_seconds(civil, second)
    offsets = table.offsets_between(local - _SEARCH_WINDOW, local + _SEARCH_WINDOW)
    candidates: dict[int, ZoneOffset] = {}
    for offset in offsets:
        instant = _posix2time(table, local - offset.utc_offset)
        actual = table.offset_at(instant)
        if actual.utc_offset == offset.utc_offset:
            candidates.setdefault(instant, actual)
    utc_offsets = [offset.utc_offset for offset in offsets]
    return LocalResolution(
        candidates=tuple(
            Candidate(instant, offset) for instant, offset in sorted(candidates.items())
        ),
        before=table.offset_at(_posix2time(table, local - max(utc_offsets))),
        after=table.offset_at(_posix2time(table, local - min(utc_offsets))),
        elapsed=elapsed,
    )


def resolve_local(tz: Timezone, civil: CivilTime) -> LocalResolution:
    """Return every instant at which the civil time occurs in the timezone."""
    return _resolve_local(tz.table, civil)


def _choose(
    candidates: tuple[Candidate, ...], civil: CivilTime, policy: AmbiguityPolicy
) -> Candidate:
    if civil.tm_isdst >= 0:
        wanted = civil.tm_isdst > 0
        preferred = tuple(c for c in candidates if c.offset.is_dst == wanted)
        candidates = preferred or candidates
    if not candidates:
        raise InvalidCivilTime(f"Civil time does not exist: {civil}")
    if len(candidates) == 1:
        return candidates[0]
    _LOGGER.debug(
        "Civil time %s occurs %d times, using policy %s",
        civil,
        len(candidates),
        policy,
    )
    if policy == AmbiguityPolicy.RAISE:
        raise AmbiguousCivilTime(f"Civil time is ambiguous: {civil}")
    if policy == AmbiguityPolicy.LATER:
        return candidates[-1]
    return candidates[0]


def mktime(
    tz: Timezone, civil: CivilTime, *, ambiguous: AmbiguityPolicy | None = None
) -> int:
    """Convert a civil time in the timezone to an instant.

    The weekday, day of year, offset and abbreviation are ignored and out of
    range fields are normalized. A positive or zero `tm_isdst` prefers the
    daylight savings or standard time interpretation when both exist. Any
    remaining ambiguity is resolved with the `ambiguous` policy, defaulting
    to the policy of the current context.

    Raises `InvalidCivilTime` when the civil time falls in a gap.
    """
    resolution = _resolve_local(tz.table, civil)
    if not resolution.candidates:
        _LOGGER.debug("Civil time %s is in a gap in %s", civil, tz.name)
    chosen = _choose(
        resolution.candidates, civil, ambiguous or get_ambiguity_policy()
    )
    instant = chosen.instant + resolution.elapsed
    if not TIME_MIN <= instant <= TIME_MAX:
        raise InvalidCivilTime(f"Civil time out of 64-bit range: {civil}")
    return instant
