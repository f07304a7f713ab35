"""An implementation of `datetime.tzinfo` backed by a Timezone.

Naive wall times are resolved following PEP 495: for a wall time that
occurs twice `fold=0` is the earlier occurrence and `fold=1` the later one,
and for a wall time in a gap `fold=0` uses the offset in effect before the
gap and `fold=1` the offset after it.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING

from . import convert
from .civil import CivilTime
from .tzif.model import ZoneOffset

if TYPE_CHECKING:
    from .timezone import Timezone

__all__ = [
    "TzInfo",
]

_ZERO = datetime.timedelta(0)
_SECOND = datetime.timedelta(seconds=1)
_EPOCH = datetime.datetime(1970, 1, 1)


class TzInfo(datetime.tzinfo):
    """An implementation of tzinfo based on the full transition table of a Timezone."""

    def __init__(self, timezone: Timezone) -> None:
        """Initialize TzInfo."""
        self._timezone = timezone

    def utcoffset(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return offset of local time from UTC, as a timedelta object."""
        if dt is None:
            return None
        return datetime.timedelta(seconds=self._resolve(dt).utc_offset)

    def tzname(self, dt: datetime.datetime | None) -> str | None:
        """Return the time zone name for the datetime as a string."""
        if dt is None:
            return None
        return self._resolve(dt).abbreviation

    def dst(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return the daylight saving time (DST) adjustment, if applicable."""
        if dt is None:
            return None
        offset = self._resolve(dt)
        if not offset.is_dst:
            return _ZERO
        instant = convert.posix2time(
            self._timezone, _wall_seconds(dt) - offset.utc_offset
        )
        std_offset = self._timezone.table.standard_offset_at(instant)
        return datetime.timedelta(seconds=offset.utc_offset - std_offset)

    def fromutc(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert a UTC datetime with this tzinfo to local wall time."""
        if dt.tzinfo is not self:
            raise ValueError("fromutc: dt.tzinfo is not self")
        instant = convert.posix2time(self._timezone, _wall_seconds(dt))
        civil = convert.localtime(self._timezone, instant)
        resolution = convert.resolve_local(self._timezone, civil)
        fold = int(
            len(resolution.candidates) > 1
            and instant == resolution.candidates[-1].instant
        )
        return datetime.datetime(
            civil.year,
            civil.tm_mon + 1,
            civil.tm_mday,
            civil.tm_hour,
            civil.tm_min,
            # datetime can't represent an inserted leap second
            min(civil.tm_sec, 59),
            dt.microsecond,
            tzinfo=self,
            fold=fold,
        )

    def _resolve(self, dt: datetime.datetime) -> ZoneOffset:
        resolution = convert.resolve_local(
            self._timezone, CivilTime.from_datetime(dt)
        )
        if not (candidates := resolution.candidates):
            return resolution.after if dt.fold else resolution.before
        return candidates[-1].offset if dt.fold else candidates[0].offset

    def __str__(self) -> str:
        """Return the string representation of the timezone."""
        return self._timezone.name

    def __repr__(self) -> str:
        """Return the string representation of the timezone."""
        return f"{self.__class__.__name__}({self._timezone.name})"


def _wall_seconds(dt: datetime.datetime) -> int:
    """Return the wall clock fields of the datetime as whole seconds since the epoch."""
    return (dt.replace(tzinfo=None) - _EPOCH) // _SECOND
