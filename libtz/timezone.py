"""Library for loading timezones and converting times within them.

A `Timezone` is created from the raw bytes of a TZif file that the caller
has already located, e.g. from the system zoneinfo directory or the tzdata
package. This library does no file or environment lookups itself.

```python
from libtz import timezone

with open("/usr/share/zoneinfo/America/Los_Angeles", "rb") as tzfile:
    tz = timezone.load("America/Los_Angeles", tzfile.read())
civil = tz.localtime(946713600)
assert tz.mktime(civil) == 946713600
```
"""

from __future__ import annotations

import logging

from . import convert
from .civil import CivilTime
from .exceptions import EncodingError
from .policy import AmbiguityPolicy
from .tzif.model import TransitionTable
from .tzif.tz_rule import parse_tz_rule
from .tzif.tzif import read_tzif
from .tzinfo import TzInfo

__all__ = [
    "Timezone",
    "load",
    "load_default",
    "load_tz_string",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_NAME = "localtime"


class Timezone:
    """A handle on the immutable rules for a single timezone.

    The underlying table is never modified after loading, so a Timezone may
    be shared by any number of threads.
    """

    def __init__(self, name: str, table: TransitionTable) -> None:
        """Initialize Timezone."""
        self._name = name
        self._table = table

    @property
    def name(self) -> str:
        """Return the name the timezone was loaded with."""
        return self._name

    @property
    def table(self) -> TransitionTable:
        """Return the transition table for the timezone."""
        return self._table

    def localtime(self, instant: int) -> CivilTime:
        """Convert an instant to civil time in this timezone."""
        return convert.localtime(self, instant)

    def mktime(
        self, civil: CivilTime, *, ambiguous: AmbiguityPolicy | None = None
    ) -> int:
        """Convert civil time in this timezone to an instant."""
        return convert.mktime(self, civil, ambiguous=ambiguous)

    def time2posix(self, instant: int) -> int:
        """Convert from a leap second aware instant to POSIX time."""
        return convert.time2posix(self, instant)

    def posix2time(self, posix: int) -> int:
        """Convert from POSIX time to a leap second aware instant."""
        return convert.posix2time(self, posix)

    def tzinfo(self) -> TzInfo:
        """Return a `datetime.tzinfo` for this timezone."""
        return TzInfo(self)

    def __str__(self) -> str:
        """Return the string representation of the timezone."""
        return self._name

    def __repr__(self) -> str:
        """Return the string representation of the timezone."""
        return f"{self.__class__.__name__}({self._name})"


def _validate_name(name: str | bytes) -> str:
    """Return the zone name as text."""
    if isinstance(name, bytes):
        try:
            name = name.decode("UTF-8")
        except UnicodeDecodeError as err:
            raise EncodingError(f"Timezone name is not valid text: {name!r}") from err
    if "\x00" in name:
        raise EncodingError(f"Timezone name has internal null byte: {name!r}")
    return name


def load(name: str | bytes, data: bytes) -> Timezone:
    """Load a timezone from the contents of its TZif file."""
    name = _validate_name(name)
    _LOGGER.debug("Loading timezone: %s", name)
    return Timezone(name, read_tzif(data))


def load_default(data: bytes) -> Timezone:
    """Load the system default timezone from the contents of its TZif file."""
    return load(DEFAULT_NAME, data)


def load_tz_string(tz_str: str) -> Timezone:
    """Load a timezone from a POSIX TZ string such as `EST5EDT,M3.2.0,M11.1.0`."""
    tz_str = _validate_name(tz_str)
    _LOGGER.debug("Loading timezone from TZ string: %s", tz_str)
    return Timezone(tz_str, TransitionTable.from_rule(parse_tz_rule(tz_str)))
