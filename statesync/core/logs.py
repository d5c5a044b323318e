"""Structured log records emitted on behalf of properties."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

event_logger = logging.getLogger("statesync.events")


class LogLevel(Enum):
    """Levels a resource may be configured to log at."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERR = "err"
    ALERT = "alert"
    EMERG = "emerg"
    CRIT = "crit"

    @property
    def stdlib_level(self) -> int:
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown log level: {value!r}") from None


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: NOTICE,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERR: logging.ERROR,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.EMERG: logging.CRITICAL,
    LogLevel.CRIT: logging.CRITICAL,
}


@dataclass(frozen=True)
class LogEntry:
    """A message attributed to the object that produced it."""

    level: LogLevel
    message: str
    source: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level.value, "message": self.message, "source": str(self.source)}


def emit(entry: LogEntry) -> LogEntry:
    """Send `entry` to the events logger and return it."""
    event_logger.log(
        entry.level.stdlib_level,
        f"{entry.source}: {entry.message}",
        extra={"source": str(entry.source), "statesync_level": entry.level.value},
    )
    return entry
