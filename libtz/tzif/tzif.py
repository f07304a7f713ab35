"""Library for reading TZif files.

A TZif file describes a timezone as a series of transitions between local
time types, a set of leap second records and, for version 2 and later, a
POSIX TZ string footer describing transitions after the last explicit one.

The file has a version 1 header and data block with 32-bit times. Version 2
and later files follow that with a second header and data block using
64-bit times, then the footer. Readers that understand version 2 skip the
first data block entirely.

Note: This implementation contains more documentation and references to the
file format to serve as a resource for understanding the format. See
rfc8536 for TZif file format.
"""

import dataclasses
import enum
import io
import itertools
import logging
import struct
from collections import namedtuple
from dataclasses import dataclass

from libtz.exceptions import (
    BadMagic,
    EncodingError,
    FormatError,
    MalformedAbbreviation,
    TruncatedInput,
    UnsupportedVersion,
)

from .model import LeapSecond, LocalTimeType, Transition, TransitionTable
from .tz_rule import parse_tz_rule

__all__ = [
    "read_tzif",
]

_LOGGER = logging.getLogger(__name__)

# Records specifying the local time type
_LOCAL_TIME_TYPE_STRUCT_FORMAT = "".join(
    [
        ">",  # Use standard size of packed value bytes
        "l",  # utoff (4 bytes): Number of seconds to add to UTC to determine local time
        "?",  # dst (1 byte): Indicates the time is DST (1) or standard (0)
        "B",  # idx (1 byte): Offset index into the time zone designiation octets (0-charcnt-1)
    ]
)
_LOCAL_TIME_RECORD_SIZE = 6
_LEAP_CORRECTION_SIZE = 4


class _TZifVersion(enum.Enum):
    """Defines information related to _TZifVersions."""

    V1 = (b"\x00", 1, 4, "l")  # 32-bit in v1
    V2 = (b"2", 2, 8, "q")  # 64-bit in v2+
    V3 = (b"3", 3, 8, "q")
    V4 = (b"4", 4, 8, "q")

    def __init__(self, version: bytes, number: int, time_size: int, time_format: str):
        self._version = version
        self._number = number
        self._time_size = time_size
        self._time_format = time_format

    @classmethod
    def from_byte(cls, version: bytes) -> "_TZifVersion":
        """Return the version for the header version byte."""
        for member in cls:
            if member.version == version:
                return member
        raise UnsupportedVersion(f"Unsupported TZif version: {version!r}")

    @property
    def version(self) -> bytes:
        """Return the version byte string."""
        return self._version

    @property
    def number(self) -> int:
        """Return the version as a number."""
        return self._number

    @property
    def time_size(self) -> int:
        """Return the TIME_SIZE used in the data block parsing."""
        return self._time_size

    @property
    def time_format(self) -> str:
        """Return the struct unpack format string for TIME_SIZE objects."""
        return self._time_format


@dataclass
class _Header:
    """TZif _Header information."""

    SIZE = 44  # Total size of the header to read
    STRUCT_FORMAT = "".join(
        [
            ">",  # Use standard size of packed value bytes
            "4s",  # magic (4 bytes)
            "c",  # version (1 byte)
            "15x",  # unused
            "6L",  # isutccnt, isstdcnt, leapcnt, timecnt, typecnt, charcnt
        ]
    )
    MAGIC = "TZif".encode()

    version: _TZifVersion
    """The version of the files format."""

    isutccnt: int
    """The number of UTC/local indicators in the data block."""

    isstdcnt: int
    """The number of standard/wall indicators in the data block."""

    leapcnt: int
    """The number of leap second records in the data block."""

    timecnt: int
    """The number of time transitions in the data block."""

    typecnt: int
    """The number of local time type records in the data block."""

    charcnt: int
    """The number of characters for time zone designations in the data block."""

    @classmethod
    def from_bytes(cls, header_bytes: bytes) -> "_Header":
        """Parse the header bytes into a file."""
        if header_bytes[:4] != _Header.MAGIC[: len(header_bytes)]:
            raise BadMagic("zoneinfo file did not contain magic header")
        if len(header_bytes) < _Header.SIZE:
            raise TruncatedInput(
                f"TZif header requires {_Header.SIZE} bytes, found {len(header_bytes)}"
            )
        (
            _,
            version,
            isutccnt,
            isstdcnt,
            leapcnt,
            timecnt,
            typecnt,
            charcnt,
        ) = struct.unpack(_Header.STRUCT_FORMAT, header_bytes)
        header = _Header(
            _TZifVersion.from_byte(version),
            isutccnt,
            isstdcnt,
            leapcnt,
            timecnt,
            typecnt,
            charcnt,
        )
        if isutccnt not in (0, typecnt):
            raise FormatError(
                f"UTC/local indicators in datablock mismatched ({isutccnt}, {typecnt})"
            )
        if isstdcnt not in (0, typecnt):
            raise FormatError(
                f"standard/wall indicators in datablock mismatched ({isstdcnt}, {typecnt})"
            )
        return header

    def datablock_size(self, version: _TZifVersion) -> int:
        """Return the number of bytes in the data block following this header."""
        return (
            self.timecnt * version.time_size
            + self.timecnt
            + self.typecnt * _LOCAL_TIME_RECORD_SIZE
            + self.charcnt
            + self.leapcnt * (version.time_size + _LEAP_CORRECTION_SIZE)
            + self.isstdcnt
            + self.isutccnt
        )


# A series of records specifying the local time type:
#  - utoff (4 bytes): Number of seconds to add to UTC to determine local time
#  - dst (1 byte): Indicates the time is DST (1) or standard (0)
#  - idx (1 byte):  Offset index into the time zone designiation octets (0-charcnt-1)
# is the utoff (4 bytes), dst (1 byte), idx (1 byte).
_LocalTimeType = namedtuple("_LocalTimeType", ["utoff", "dst", "idx"])


def _read(buf: io.BytesIO, size: int, what: str) -> bytes:
    """Read exactly size bytes from the buffer."""
    data = buf.read(size)
    if len(data) != size:
        raise TruncatedInput(f"Expected {size} bytes of {what}, found {len(data)}")
    return data


def _read_designation(tz_designations: bytes, idx: int) -> str:
    """Find the null terminated string starting at the specified index."""
    if idx >= len(tz_designations):
        raise MalformedAbbreviation(
            f"Designation index out of bounds {idx} >= {len(tz_designations)}"
        )
    if (end := tz_designations.find(b"\x00", idx)) < 0:
        raise MalformedAbbreviation(f"Designation at {idx} is not NUL terminated")
    try:
        return tz_designations[idx:end].decode("UTF-8")
    except UnicodeDecodeError as err:
        raise MalformedAbbreviation(f"Designation at {idx} is not valid text") from err


def _read_datablock(
    header: _Header, version: _TZifVersion, buf: io.BytesIO
) -> TransitionTable:
    """Read records from the buffer."""
    if header.typecnt == 0:
        raise FormatError("Local time records in block is zero")
    if header.charcnt == 0:
        raise FormatError("Total number of octets is zero")

    # A series of transition times in sorted order
    transition_times = struct.unpack(
        f">{header.timecnt}{version.time_format}",
        _read(buf, header.timecnt * version.time_size, "transition times"),
    )
    if any(b < a for a, b in itertools.pairwise(transition_times)):
        raise FormatError("Transition times are not in ascending order")

    # A series of integers specifying the type of local time of the corresponding
    # transition time. These are zero-based indices into the array of local
    # time type records. (from 0 to typecnt-1)
    transition_types = _read(buf, header.timecnt, "transition types")

    raw_local_time_types: list[_LocalTimeType] = [
        _LocalTimeType._make(
            struct.unpack(
                _LOCAL_TIME_TYPE_STRUCT_FORMAT,
                _read(buf, _LOCAL_TIME_RECORD_SIZE, "local time type"),
            )
        )
        for _ in range(header.typecnt)
    ]

    # An array of NUL-terminated time zone designation strings
    tz_designations = _read(buf, header.charcnt, "time zone designations")

    leap_seconds: list[LeapSecond] = [
        LeapSecond._make(
            struct.unpack(
                f">{version.time_format}l",
                _read(
                    buf,
                    version.time_size + _LEAP_CORRECTION_SIZE,  # occur + corr
                    "leap second record",
                ),
            )
        )
        for _ in range(header.leapcnt)
    ]
    if any(b.occurrence <= a.occurrence for a, b in itertools.pairwise(leap_seconds)):
        raise FormatError("Leap second records are not in ascending order")

    # Standard/wall indicators determine if the transition times associated with
    # each local time type are standard time (1) or wall clock time (0).
    isstd_types = _read(buf, header.isstdcnt, "standard/wall indicators")

    # UTC/local indicators determine if the transition times associated with
    # each local time type are UTC (1) or local time (0).
    isut_types = _read(buf, header.isutccnt, "UTC/local indicators")

    abbreviations: dict[str, int] = {}
    local_time_types: list[LocalTimeType] = []
    for i, (utoff, dst, idx) in enumerate(raw_local_time_types):
        designation = _read_designation(tz_designations, idx)
        local_time_types.append(
            LocalTimeType(
                utoff,
                dst,
                abbreviations.setdefault(designation, len(abbreviations)),
                isstd=bool(isstd_types[i]) if isstd_types else False,
                isut=bool(isut_types[i]) if isut_types else False,
            )
        )

    transitions: list[Transition] = []
    for transition_time, time_type in zip(transition_times, transition_types):
        if time_type >= len(local_time_types):
            raise FormatError(
                f"transition_type out of bounds {time_type} >= {len(local_time_types)}"
            )
        local_time_type = local_time_types[time_type]
        transitions.append(
            Transition(
                transition_time,
                local_time_type.utoff,
                local_time_type.dst,
                local_time_type.abbrev_index,
            )
        )

    return TransitionTable(
        transitions=tuple(transitions),
        local_time_types=tuple(local_time_types),
        abbreviations=tuple(abbreviations),
        leap_seconds=tuple(leap_seconds),
        version=version.number,
    )


def _read_footer(buf: io.BytesIO) -> str:
    """Read the TZ string between the newlines that follow the v2+ data block."""
    if not (footer := buf.read()):
        raise TruncatedInput("Missing TZ string footer")
    try:
        text = footer.decode("UTF-8")
    except UnicodeDecodeError as err:
        raise EncodingError("TZ string footer is not valid text") from err
    parts = text.split("\n")
    if len(parts) != 3 or parts[0] or parts[2]:
        raise FormatError("Failed to read TZ footer")
    return parts[1]


def read_tzif(content: bytes) -> TransitionTable:
    """Read the TZif file and parse and return the timezone records."""
    buf = io.BytesIO(content)

    # V1 header and block
    header = _Header.from_bytes(buf.read(_Header.SIZE))
    if header.version == _TZifVersion.V1:
        table = _read_datablock(header, _TZifVersion.V1, buf)
        _log_table(table)
        return table

    # Version 2+ readers skip the v1 data block
    _read(buf, header.datablock_size(_TZifVersion.V1), "v1 data block")

    # V2+ header and block
    header = _Header.from_bytes(buf.read(_Header.SIZE))
    if header.version == _TZifVersion.V1:
        raise FormatError("Second TZif header must be version 2 or later")
    table = _read_datablock(header, header.version, buf)

    # V2+ footer
    if tz_string := _read_footer(buf):
        _LOGGER.debug("Parsing TZ string footer: %s", tz_string)
        table = dataclasses.replace(table, rule=parse_tz_rule(tz_string))
    _log_table(table)
    return table


def _log_table(table: TransitionTable) -> None:
    _LOGGER.debug(
        "Read TZif version %d with %d transitions, %d types, %d leap seconds",
        table.version,
        len(table.transitions),
        len(table.local_time_types),
        len(table.leap_seconds),
    )
