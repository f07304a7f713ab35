"""Test fixtures."""

from collections.abc import Callable, Sequence
from importlib import resources
import struct

import pytest

from libtz import timezone

TZifBuilder = Callable[..., bytes]


def _iana_key_to_resource(key: str) -> tuple[str, str]:
    """Returns the package and resource file for the specified timezone."""
    if "/" not in key:
        return "tzdata.zoneinfo", key
    package_loc, resource = key.rsplit("/", 1)
    package = "tzdata.zoneinfo." + package_loc.replace("/", ".")
    return package, resource


@pytest.fixture
def read_zoneinfo() -> Callable[[str], bytes]:
    """Fixture that reads TZif file contents from the tzdata package."""

    def _read(key: str) -> bytes:
        package, resource = _iana_key_to_resource(key)
        return resources.files(package).joinpath(resource).read_bytes()

    return _read


@pytest.fixture
def load_zone(
    read_zoneinfo: Callable[[str], bytes],
) -> Callable[[str], timezone.Timezone]:
    """Fixture that loads a Timezone from the tzdata package."""

    def _load(key: str) -> timezone.Timezone:
        return timezone.load(key, read_zoneinfo(key))

    return _load


def _tzif_block(
    version: bytes,
    time_format: str,
    transitions: Sequence[tuple[int, int]],
    types: Sequence[tuple[int, bool, int]],
    designations: bytes,
    leap_seconds: Sequence[tuple[int, int]],
    isstd: bytes,
    isut: bytes,
) -> bytes:
    """Return a header and data block."""
    return b"".join(
        [
            struct.pack(
                ">4sc15x6L",
                b"TZif",
                version,
                len(isut),
                len(isstd),
                len(leap_seconds),
                len(transitions),
                len(types),
                len(designations),
            ),
            struct.pack(
                f">{len(transitions)}{time_format}", *(t for t, _ in transitions)
            ),
            bytes(idx for _, idx in transitions),
            *(struct.pack(">l?B", *local_time_type) for local_time_type in types),
            designations,
            *(struct.pack(f">{time_format}l", *leap) for leap in leap_seconds),
            isstd,
            isut,
        ]
    )


def _build_tzif(
    *,
    version: bytes = b"2",
    transitions: Sequence[tuple[int, int]] = (),
    types: Sequence[tuple[int, bool, int]] = ((0, False, 0),),
    designations: bytes = b"UTC\x00",
    leap_seconds: Sequence[tuple[int, int]] = (),
    isstd: bytes = b"",
    isut: bytes = b"",
    footer: bytes = b"\n\n",
) -> bytes:
    """Build the contents of a TZif file.

    Version 2+ files repeat the same data in the legacy block, so values
    must fit in 32 bits.
    """
    data = (transitions, types, designations, leap_seconds, isstd, isut)
    v1_block = _tzif_block(version, "l", *data)
    if version == b"\x00":
        return v1_block
    return v1_block + _tzif_block(version, "q", *data) + footer


@pytest.fixture
def build_tzif() -> TZifBuilder:
    """Fixture that builds synthetic TZif file contents."""
    return _build_tzif
