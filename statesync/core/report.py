"""Reporting of property transitions to the log and the audit trail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from statesync.core.audit import AuditLogger, AuditResult


@dataclass(frozen=True)
class ChangeEvent:
    """One rendered transition of a property."""

    resource: str
    property: str
    is_value: str
    should_value: str
    message: str
    level: str
    noop: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.resource,
            "property": self.property,
            "is": self.is_value,
            "should": self.should_value,
            "message": self.message,
            "level": self.level,
            "noop": self.noop,
            "timestamp": self.timestamp.isoformat(),
        }


class ChangeReporter:
    """Renders property transitions and sends them to the log and audit chain."""

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self.audit_logger = audit_logger

    def describe(self, prop, noop: Optional[bool] = None) -> ChangeEvent:
        """Build the event for `prop`'s pending transition without emitting it."""
        message = prop.change_description()
        if noop is None:
            noop = prop.is_noop()
        if noop:
            message = f"{message} (noop)"
        return ChangeEvent(
            resource=prop.parent.path,
            property=prop.name,
            is_value=str(prop.is_to_s()),
            should_value=str(prop.should_to_s()),
            message=message,
            level=str(prop.parent.loglevel),
            noop=noop,
        )

    def report(
        self,
        prop,
        result: AuditResult,
        event: Optional[ChangeEvent] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ChangeEvent:
        """Log the transition through the property and append it to the audit chain."""
        event = event or self.describe(prop)
        prop.log(event.message)
        if self.audit_logger is not None:
            self.audit_logger.log(
                action="change",
                resource=event.resource,
                property=event.property,
                result=result,
                details={"message": event.message, "is": event.is_value, "should": event.should_value, **(details or {})},
            )
        return event
