"""Validation and normalization ("munge") of proposed desired values."""

from __future__ import annotations

import re
from typing import Any, Optional

from statesync.core.errors import InvalidValue


NUMERIC = re.compile(r"^[-+]?[0-9]+$")


class ValuePipeline:
    """
    Optional per-property-type hooks applied on `should` assignment.

    The base class accepts everything and leaves values untouched; property
    types that need checks or normalization declare a subclass.
    """

    def validate(self, value: Any) -> None:
        """Raise InvalidValue to reject `value`."""
        return None

    def munge(self, value: Any) -> Any:
        """Return the stored form of an already validated value."""
        return value


class IntegerPipeline(ValuePipeline):
    """Accepts ints and numeric strings, stores ints."""

    def __init__(self, minimum: Optional[int] = None):
        self.minimum = minimum

    def validate(self, value: Any) -> None:
        if isinstance(value, bool):
            raise InvalidValue(f"Expected an integer, got {value!r}")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and NUMERIC.match(value.strip()):
            number = int(value.strip())
        else:
            raise InvalidValue(f"Expected an integer, got {value!r}")
        if self.minimum is not None and number < self.minimum:
            raise InvalidValue(f"{number} is below the minimum of {self.minimum}")

    def munge(self, value: Any) -> int:
        if isinstance(value, int):
            return value
        return int(str(value).strip())


class PathPipeline(ValuePipeline):
    """Requires absolute paths."""

    def validate(self, value: Any) -> None:
        if not isinstance(value, str) or not value.startswith("/"):
            raise InvalidValue(f"Expected an absolute path, got {value!r}")


class TextPipeline(ValuePipeline):
    """Single-line text that fits inside a single-quoted shell argument."""

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise InvalidValue(f"Expected text, got {value!r}")
        if "\n" in value or "'" in value:
            raise InvalidValue(f"Text may not contain newlines or single quotes: {value!r}")
