"""Comparison of an observed value against the accepted desired values."""

from typing import Any, Iterable


def matches(observed: Any, accepted: Iterable[Any]) -> bool:
    """True iff `observed` equals at least one accepted value."""
    for value in accepted:
        if observed == value:
            return True
    return False
