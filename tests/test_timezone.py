"""Tests for loading timezones."""

from collections.abc import Callable
import threading

import pytest

from libtz import timezone
from libtz.civil import CivilTime
from libtz.exceptions import (
    BadMagic,
    EncodingError,
    FormatError,
    TimezoneError,
    TruncatedInput,
)


def test_load(read_zoneinfo: Callable[[str], bytes]) -> None:
    """Test loading a timezone from TZif file contents."""
    tz = timezone.load("America/Los_Angeles", read_zoneinfo("America/Los_Angeles"))
    assert tz.name == "America/Los_Angeles"
    assert str(tz) == "America/Los_Angeles"
    assert repr(tz) == "Timezone(America/Los_Angeles)"
    civil = tz.localtime(946713600)
    assert civil.tm_zone == "PST"
    assert tz.mktime(civil) == 946713600
    assert tz.time2posix(946713600) == 946713600
    assert tz.posix2time(946713600) == 946713600


def test_load_bytes_name(read_zoneinfo: Callable[[str], bytes]) -> None:
    """Test a zone name passed as bytes is decoded."""
    tz = timezone.load(b"Europe/Paris", read_zoneinfo("Europe/Paris"))
    assert tz.name == "Europe/Paris"


@pytest.mark.parametrize(
    "name,match",
    [
        ("Europe/\x00Paris", "internal null byte"),
        (b"Europe/\x00Paris", "internal null byte"),
        (b"Europe/\xffParis", "not valid text"),
    ],
)
def test_load_invalid_name(
    read_zoneinfo: Callable[[str], bytes], name: str | bytes, match: str
) -> None:
    """Test zone names that are not valid text."""
    with pytest.raises(EncodingError, match=match):
        timezone.load(name, read_zoneinfo("Europe/Paris"))


def test_load_default(read_zoneinfo: Callable[[str], bytes]) -> None:
    """Test loading the system default timezone."""
    tz = timezone.load_default(read_zoneinfo("Europe/Paris"))
    assert tz.name == "localtime"
    assert tz.localtime(915177600).tm_zone == "CET"


def test_load_invalid_data() -> None:
    """Test that invalid data never produces a timezone."""
    with pytest.raises(TruncatedInput):
        timezone.load("Invalid", b"")
    with pytest.raises(FormatError):
        timezone.load_default(b"TZif")
    with pytest.raises(BadMagic):
        timezone.load("Invalid", b"\x00" * 100)
    with pytest.raises(TimezoneError):
        timezone.load("Invalid", b"\x00" * 100)


@pytest.mark.parametrize(
    "tz_str,instant,expected",
    [
        ("EST5EDT,M3.2.0,M11.1.0", 1615705199, "2021-03-14 01:59:59 EST"),
        ("EST5EDT,M3.2.0,M11.1.0", 1615705200, "2021-03-14 03:00:00 EDT"),
        ("EST5EDT", 1636264800, "2021-11-07 01:00:00 EST"),
        ("JST-9", 0, "1970-01-01 09:00:00 JST"),
        ("<+0530>-5:30", 0, "1970-01-01 05:30:00 +0530"),
    ],
)
def test_load_tz_string(tz_str: str, instant: int, expected: str) -> None:
    """Test loading a timezone from a POSIX TZ string."""
    tz = timezone.load_tz_string(tz_str)
    assert tz.name == tz_str
    civil = tz.localtime(instant)
    assert str(civil) == expected
    assert tz.mktime(civil) == instant


def test_load_tz_string_invalid() -> None:
    """Test loading an invalid TZ string."""
    with pytest.raises(FormatError, match="Unable to parse TZ string"):
        timezone.load_tz_string("EST5EDT,M3.2.0")


def test_shared_between_threads(read_zoneinfo: Callable[[str], bytes]) -> None:
    """Test a single timezone used from many threads at once."""
    tz = timezone.load("America/Los_Angeles", read_zoneinfo("America/Los_Angeles"))
    instants = range(1636268400, 1636282800, 61)
    expected = [tz.localtime(instant) for instant in instants]
    results: dict[int, list[CivilTime]] = {}

    def convert_all(index: int) -> None:
        results[index] = [tz.localtime(tz.mktime(tz.localtime(i))) for i in instants]

    threads = [threading.Thread(target=convert_all, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert results == {i: expected for i in range(8)}
