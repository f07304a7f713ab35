"""Exceptions for libtz library."""


class TimezoneError(Exception):
    """Base exception for all libtz errors."""


class FormatError(TimezoneError, ValueError):
    """Exception raised when TZif rule data can't be parsed.

    A load that raises this error never produces a partially usable
    timezone. The more specific subclasses describe the common failure
    modes of the binary format; the base class is raised directly for
    structural problems such as out of range indexes or an unparsable
    TZ string footer.
    """


class TruncatedInput(FormatError):
    """Raised when fewer bytes are available than a declared count requires."""


class BadMagic(FormatError):
    """Raised when the data does not start with the TZif magic identifier."""


class UnsupportedVersion(FormatError):
    """Raised when the TZif version byte is not recognized."""


class EncodingError(TimezoneError, ValueError):
    """Raised when an abbreviation, TZ string or zone name is not valid text."""


class MalformedAbbreviation(FormatError, EncodingError):
    """Raised when a time zone designation can't be read from the pool.

    This is both a format error (the index is out of range or the string is
    not NUL terminated) and an encoding error (the pool is not valid text).
    """


class InvalidCivilTime(TimezoneError, ValueError):
    """Raised when a civil time can't be represented as an instant.

    The common case is a local time that falls inside a daylight saving
    time gap, which never occurs on the wall clock. This is recoverable by
    the caller, e.g. by adjusting the time or passing a different hint.
    """


class AmbiguousCivilTime(InvalidCivilTime):
    """Raised when a civil time occurs twice and the policy forbids choosing."""


class TimeOverflowError(TimezoneError, OverflowError):
    """Raised when an instant or its broken-down year is out of range."""
