"""Broken-down civil time.

A `CivilTime` has the same fields as `time.struct_time`. The weekday,
day of the year, UTC offset and zone abbreviation are outputs of a
conversion from an instant, and are ignored when converting back to an
instant. The DST flag is read as a hint on the way back.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict

__all__ = [
    "CivilTime",
    "TM_YEAR_BASE",
]

TM_YEAR_BASE = 1900


class CivilTime(BaseModel):
    """A broken-down calendar time in some timezone."""

    model_config = ConfigDict(frozen=True)

    tm_year: int
    """Years since 1900."""

    tm_mon: int = 0
    """Month between 0 (January) and 11."""

    tm_mday: int = 1
    """Day of the month between 1 and 31."""

    tm_hour: int = 0
    """Hour between 0 and 23."""

    tm_min: int = 0
    """Minute between 0 and 59."""

    tm_sec: int = 0
    """Second between 0 and 60, where 60 is an inserted leap second."""

    tm_wday: int = 0
    """Day of the week between 0 (Sunday) and 6."""

    tm_yday: int = 0
    """Day of the year between 0 (January 1st) and 365."""

    tm_isdst: int = -1
    """Positive if daylight savings time, zero if standard time, negative if unknown."""

    tm_gmtoff: int = 0
    """Seconds east of UTC."""

    tm_zone: str = ""
    """The timezone abbreviation e.g. PST."""

    @property
    def year(self) -> int:
        """Return the full year e.g. 2000."""
        return self.tm_year + TM_YEAR_BASE

    @classmethod
    def from_datetime(cls, value: datetime.datetime, isdst: int = -1) -> CivilTime:
        """Create a civil time from the wall clock fields of a datetime."""
        return cls(
            tm_year=value.year - TM_YEAR_BASE,
            tm_mon=value.month - 1,
            tm_mday=value.day,
            tm_hour=value.hour,
            tm_min=value.minute,
            tm_sec=value.second,
            tm_isdst=isdst,
        )

    def __str__(self) -> str:
        return (
            f"{self.year:04}-{self.tm_mon + 1:02}-{self.tm_mday:02} "
            f"{self.tm_hour:02}:{self.tm_min:02}:{self.tm_sec:02} {self.tm_zone}"
        ).rstrip()
