"""Tests for the civil time model."""

import datetime

import pydantic
import pytest

from libtz.civil import CivilTime


def test_from_datetime() -> None:
    """Test creating a civil time from the wall clock fields of a datetime."""
    civil = CivilTime.from_datetime(
        datetime.datetime(2021, 11, 7, 1, 30, 15), isdst=1
    )
    assert civil == CivilTime(
        tm_year=121, tm_mon=10, tm_mday=7, tm_hour=1, tm_min=30, tm_sec=15, tm_isdst=1
    )
    assert civil.year == 2021


@pytest.mark.parametrize(
    "civil,expected",
    [
        (CivilTime(tm_year=70), "1970-01-01 00:00:00"),
        (
            CivilTime(
                tm_year=72,
                tm_mon=5,
                tm_mday=30,
                tm_hour=23,
                tm_min=59,
                tm_sec=60,
                tm_zone="UTC",
            ),
            "1972-06-30 23:59:60 UTC",
        ),
        (CivilTime(tm_year=-1900, tm_zone="LMT"), "0000-01-01 00:00:00 LMT"),
    ],
)
def test_str(civil: CivilTime, expected: str) -> None:
    """Test the string representation of a civil time."""
    assert str(civil) == expected


def test_frozen() -> None:
    """Test civil times are immutable values."""
    civil = CivilTime(tm_year=70)
    with pytest.raises(pydantic.ValidationError):
        civil.tm_year = 71  # type: ignore[misc]
    assert civil.model_copy(update={"tm_year": 71}).year == 1971
