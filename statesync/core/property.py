"""
The property (state) object.

A property is one declaratively managed attribute of a resource. It holds the
observed value (`is_`) and the list of acceptable desired values (`should`),
and answers whether the two agree. Backends subclass it to add retrieval and
command generation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from statesync.core.context import ReconcileContext
from statesync.core.errors import DevError, InvalidValue, StateSyncError
from statesync.core.logs import LogEntry, LogLevel, emit
from statesync.core.matcher import matches
from statesync.core.pipeline import ValuePipeline


class Absent(Enum):
    """Marks a value that is absent on the target."""

    NOT_FOUND = "notfound"

    def __str__(self) -> str:
        return self.value


NOT_FOUND = Absent.NOT_FOUND

_MISSING = object()


class Property:
    """Base class for managed properties."""

    name = "property"
    pipeline: ValuePipeline = ValuePipeline()

    def __init__(
        self,
        parent=None,
        should: Any = _MISSING,
        is_: Any = _MISSING,
        context: Optional[ReconcileContext] = None,
    ):
        if parent is None:
            raise DevError(f"Property {self.name} was not passed a parent")
        self._parent = parent
        self.context = context or ReconcileContext()
        self.noop = False
        self.is_: Any = None
        self._should: Optional[List[Any]] = None
        self._should_orig: Optional[List[Any]] = None

        if should is not _MISSING:
            self.should = should
        if is_ is not _MISSING:
            self.is_ = is_

    @property
    def parent(self):
        return self._parent

    @property
    def should(self) -> Any:
        """The canonical desired value: the first accepted one."""
        if self._should is None:
            return None
        if not isinstance(self._should, list):
            raise DevError(f"should for {self.name} on {self.parent.name} is not a list")
        if not self._should:
            return None
        return self._should[0]

    @should.setter
    def should(self, values: Any) -> None:
        if isinstance(values, (list, tuple)):
            values = list(values)
        else:
            values = [values]

        # Nothing is stored until every value has passed both steps.
        # NOT_FOUND asks for absence and bypasses the pipeline.
        try:
            for value in values:
                if value is not NOT_FOUND:
                    self.pipeline.validate(value)
            munged = [value if value is NOT_FOUND else self.pipeline.munge(value) for value in values]
        except StateSyncError:
            raise
        except Exception as e:
            raise InvalidValue(f"Invalid value for {self.name}: {e}") from e

        self._should_orig = values
        self._should = munged

    @property
    def should_values(self) -> List[Any]:
        """Every accepted desired value, after munging."""
        return list(self._should or [])

    @property
    def should_orig(self) -> Optional[List[Any]]:
        """The desired values as supplied, before munging."""
        return self._should_orig

    def insync(self) -> bool:
        """
        Whether the observed value satisfies the desired values.

        An unset or empty `should` means the property is not managed and is
        therefore always in sync.
        """
        if not self._should:
            return True
        if not isinstance(self._should, list):
            raise DevError(f"{type(self).__name__}'s should is not a list")
        return matches(self.is_, self._should)

    def is_to_s(self) -> Any:
        return self.is_

    def should_to_s(self) -> Any:
        return self.should

    def change_description(self) -> str:
        """Describe the transition from `is_` to `should` for logs and audit."""
        try:
            if self.is_ == NOT_FOUND:
                return f"defined '{self.name}' as '{self.should_to_s()}'"
            elif self.should == NOT_FOUND:
                return f"undefined {self.name} from '{self.is_to_s()}'"
            else:
                return f"{self.name} changed '{self.is_to_s()}' to '{self.should_to_s()}'"
        except StateSyncError:
            raise
        except Exception as e:
            raise DevError(f"Could not convert change {self.name} to string: {e}") from e

    def is_noop(self) -> bool:
        """True when enforcement is disabled here, on the parent, or globally."""
        return bool(self.noop or getattr(self.parent, "noop", False) or self.context.noop)

    def log(self, message: str) -> LogEntry:
        loglevel = getattr(self.parent, "loglevel", None)
        if not loglevel:
            raise DevError(f"Parent {self.parent} has no loglevel")
        try:
            level = LogLevel.parse(loglevel)
        except ValueError as e:
            raise DevError(f"Parent {self.parent} has an invalid loglevel: {e}") from e
        return emit(LogEntry(level=level, message=message, source=self))

    @property
    def path(self) -> str:
        return "/".join([getattr(self.parent, "path", str(self.parent)), self.name])

    def __str__(self) -> str:
        return f"{self.parent.name}({self.name})"

    def __repr__(self) -> str:
        should = ", ".join(str(v) for v in self._should) if self._should else None
        return f"{type(self).__name__}({self.name!r}, is={self.is_!r}, should={should!r})"
