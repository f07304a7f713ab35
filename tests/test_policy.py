"""Tests for the ambiguity policy configuration."""

from libtz.policy import AmbiguityPolicy, ambiguity_policy, get_ambiguity_policy


def test_default() -> None:
    """Test the default policy picks the earlier instant."""
    assert get_ambiguity_policy() == AmbiguityPolicy.EARLIER


def test_context_manager() -> None:
    """Test changing the policy for a block of code."""
    with ambiguity_policy(AmbiguityPolicy.RAISE):
        assert get_ambiguity_policy() == AmbiguityPolicy.RAISE
        with ambiguity_policy(AmbiguityPolicy.LATER):
            assert get_ambiguity_policy() == AmbiguityPolicy.LATER
        assert get_ambiguity_policy() == AmbiguityPolicy.RAISE
    assert get_ambiguity_policy() == AmbiguityPolicy.EARLIER


def test_reset_on_error() -> None:
    """Test the policy is restored when the block raises."""
    try:
        with ambiguity_policy(AmbiguityPolicy.LATER):
            raise KeyError("test")
    except KeyError:
        pass
    assert get_ambiguity_policy() == AmbiguityPolicy.EARLIER
