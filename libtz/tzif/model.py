"""Data model for the tzif library.

A `TransitionTable` is the immutable result of parsing a TZif file. It is
safe to share between any number of threads since nothing mutates it after
construction, and lookups are binary searches over sorted tuples.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from .tz_rule import Rule, RuleOccurrence

__all__ = [
    "LeapSecond",
    "LocalTimeType",
    "Transition",
    "TransitionTable",
    "ZoneOffset",
]


@dataclass(frozen=True)
class LocalTimeType:
    """A local time type record from the data block."""

    utoff: int
    """Number of seconds added to UTC to determine local time."""

    dst: bool
    """Determines if local time is Daylight Savings Time (else Standard time)."""

    abbrev_index: int
    """Index of the designation in the abbreviation pool."""

    isstd: bool = False
    """Determines if transitions to this type are standard time (else, wall clock time)."""

    isut: bool = False
    """Determines if transitions to this type are UT (else, local time)."""


@dataclass(frozen=True)
class Transition:
    """An individual item in the Datablock."""

    transition_time: int
    """A transition time at which the rules for computing local time may change."""

    utoff: int
    """Number of seconds added to UTC to determine local time."""

    dst: bool
    """Determines if local time is Daylight Savings Time (else Standard time)."""

    abbrev_index: int
    """Index of the designation in the abbreviation pool."""


class LeapSecond(NamedTuple):
    """A correction that needs to be applied to UTC in order to determine TAI.

    The occurrence is the time at which the leap-second correction occurs.
    The correction is the value of LEAPCORR on or after the occurrence.
    """

    occurrence: int
    correction: int


@dataclass(frozen=True)
class ZoneOffset:
    """The local time rules in effect at an instant."""

    utc_offset: int
    """Seconds east of UTC."""

    is_dst: bool

    abbreviation: str


@dataclass(frozen=True)
class TransitionTable:
    """The results of parsing the TZif file."""

    transitions: tuple[Transition, ...]
    """Local time changes, sorted by transition time."""

    local_time_types: tuple[LocalTimeType, ...]
    """Local time types, the first is used before the first transition."""

    abbreviations: tuple[str, ...]
    """Pool of time zone designations."""

    leap_seconds: tuple[LeapSecond, ...] = ()
    """Leap second records, sorted by occurrence."""

    rule: Optional[Rule] = None
    """A rule for computing local time changes after the last transition."""

    version: int = 1
    """The TZif format version the table was read from."""

    _transition_times: tuple[int, ...] = field(init=False, repr=False, compare=False)
    _leap_occurrences: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index the sorted instants used for binary search."""
        object.__setattr__(
            self,
            "_transition_times",
            tuple(transition.transition_time for transition in self.transitions),
        )
        object.__setattr__(
            self,
            "_leap_occurrences",
            tuple(leap.occurrence for leap in self.leap_seconds),
        )

    @classmethod
    def from_rule(cls, rule: Rule) -> TransitionTable:
        """Create a table with no transitions that applies the rule for all time."""
        occurrences = [(rule.std, False)]
        if rule.dst is not None:
            occurrences.append((rule.dst, True))
        abbreviations: dict[str, int] = {}
        local_time_types = tuple(
            LocalTimeType(
                occurrence.utc_offset,
                dst,
                abbreviations.setdefault(occurrence.name, len(abbreviations)),
            )
            for occurrence, dst in occurrences
        )
        return cls(
            transitions=(),
            local_time_types=local_time_types,
            abbreviations=tuple(abbreviations),
            rule=rule,
        )

    def offset_at(self, instant: int) -> ZoneOffset:
        """Return the offset, DST flag and abbreviation in effect at the instant."""
        times = self._transition_times
        if not times:
            if self.rule is not None:
                return self._rule_offset(self.rule, instant)
            return self._type_offset(self.local_time_types[0])
        if instant < times[0]:
            return self._type_offset(self.local_time_types[0])
        if instant > times[-1] and self.rule is not None:
            return self._rule_offset(self.rule, instant)
        index = bisect.bisect_right(times, instant) - 1
        return self._transition_offset(self.transitions[index])

    def offsets_between(self, start: int, end: int) -> list[ZoneOffset]:
        """Return each distinct offset in effect at some instant in [start, end]."""
        offsets = [self.offset_at(start)]
        times = self._transition_times
        lo = bisect.bisect_right(times, start)
        hi = bisect.bisect_right(times, end)
        offsets.extend(
            self._transition_offset(transition)
            for transition in self.transitions[lo:hi]
        )
        if self.rule is not None and (not times or end > times[-1]):
            rule_start = max(start, times[-1]) if times else start
            offsets.extend(
                _occurrence_offset(transition.occurrence, transition.dst)
                for transition in self.rule.transitions_between(rule_start, end)
            )
            offsets.append(self.offset_at(end))
        return _unique(offsets)

    def standard_offset_at(self, instant: int) -> int:
        """Return the UTC offset of the standard time nearest to the instant."""
        offset = self.offset_at(instant)
        if not offset.is_dst:
            return offset.utc_offset
        times = self._transition_times
        if self.rule is not None and (not times or instant > times[-1]):
            return self.rule.std.utc_offset
        index = bisect.bisect_right(times, instant) - 1
        for transition in reversed(self.transitions[: max(index, 0)]):
            if not transition.dst:
                return transition.utoff
        for transition in self.transitions[index + 1 :]:
            if not transition.dst:
                return transition.utoff
        for local_time_type in self.local_time_types:
            if not local_time_type.dst:
                return local_time_type.utoff
        return offset.utc_offset

    def leap_correction(self, instant: int) -> tuple[int, bool]:
        """Return the cumulative leap correction at the instant.

        The second value is True when the instant is itself an inserted
        leap second.
        """
        index = bisect.bisect_right(self._leap_occurrences, instant) - 1
        if index < 0:
            return (0, False)
        leap = self.leap_seconds[index]
        previous = self.leap_seconds[index - 1].correction if index > 0 else 0
        return (
            leap.correction,
            instant == leap.occurrence and leap.correction > previous,
        )

    def _type_offset(self, local_time_type: LocalTimeType) -> ZoneOffset:
        return ZoneOffset(
            local_time_type.utoff,
            local_time_type.dst,
            self.abbreviations[local_time_type.abbrev_index],
        )

    def _transition_offset(self, transition: Transition) -> ZoneOffset:
        return ZoneOffset(
            transition.utoff,
            transition.dst,
            self.abbreviations[transition.abbrev_index],
        )

    def _rule_offset(self, rule: Rule, instant: int) -> ZoneOffset:
        occurrence, dst = rule.occurrence_at(instant)
        return _occurrence_offset(occurrence, dst)


def _occurrence_offset(occurrence: RuleOccurrence, dst: bool) -> ZoneOffset:
    return ZoneOffset(occurrence.utc_offset, dst, occurrence.name)


def _unique(offsets: Iterable[ZoneOffset]) -> list[ZoneOffset]:
    """Remove duplicates, preserving order."""
    return list(dict.fromkeys(offsets))
