"""Policy for resolving civil times that occur more than once.

When clocks are turned back, an hour of civil time repeats. With no DST
hint the long-standing libc convention is to pick the earlier instant,
which is the default here. Callers that want stricter behavior can pick a
policy per call, or for a block of code with `ambiguity_policy`.
"""

from collections.abc import Generator
import contextlib
import contextvars
import enum

__all__ = [
    "AmbiguityPolicy",
    "ambiguity_policy",
    "get_ambiguity_policy",
]


class AmbiguityPolicy(enum.Enum):
    """How to choose between instants that share a civil time."""

    EARLIER = "earlier"
    """Use the earliest instant, typically the daylight savings time one."""

    LATER = "later"
    """Use the latest instant, typically the standard time one."""

    RAISE = "raise"
    """Raise an `AmbiguousCivilTime` error."""


_ambiguity_policy = contextvars.ContextVar(
    "ambiguity_policy", default=AmbiguityPolicy.EARLIER
)


@contextlib.contextmanager
def ambiguity_policy(policy: AmbiguityPolicy) -> Generator[None]:
    """Context manager to change the default ambiguity policy."""
    token = _ambiguity_policy.set(policy)
    try:
        yield
    finally:
        _ambiguity_policy.reset(token)


def get_ambiguity_policy() -> AmbiguityPolicy:
    """Return the ambiguity policy in effect."""
    return _ambiguity_policy.get()
