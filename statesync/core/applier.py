"""Converges one property at a time: check, plan, execute, re-read, report."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from statesync.core.audit import AuditResult
from statesync.core.commands import ProviderCommand
from statesync.core.property import NOT_FOUND
from statesync.core.report import ChangeEvent, ChangeReporter

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of converging one property."""

    property: object
    result: AuditResult
    commands: List[ProviderCommand] = field(default_factory=list)
    event: Optional[ChangeEvent] = None
    errors: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.result == AuditResult.SUCCESS


class PropertyApplier:
    """
    Applies provider commands for out-of-sync properties.

    Properties must be provider-backed: they offer `retrieve()`, `exists()`
    and the add/modify/undefine command builders. Exit codes of mutating
    commands are interpreted here; nothing is retried.
    """

    def __init__(self, reporter: Optional[ChangeReporter] = None, dry_run: bool = False):
        self.reporter = reporter or ChangeReporter()
        self.dry_run = dry_run

    def plan(self, prop) -> List[ProviderCommand]:
        """Commands that would bring `prop` in sync; empty when it already is."""
        if prop.insync():
            return []
        if prop.should == NOT_FOUND:
            # Only the attribute goes; the directory entry itself stays.
            return [prop.undefine_command()]
        if prop.is_ == NOT_FOUND and not prop.exists():
            return [prop.add_command(), prop.modify_command()]
        return [prop.modify_command()]

    def sync(self, prop) -> SyncResult:
        if prop.is_ is None:
            prop.retrieve()

        commands = self.plan(prop)
        if not commands:
            return SyncResult(property=prop, result=AuditResult.IN_SYNC)

        noop = self.dry_run or prop.is_noop()
        event = self.reporter.describe(prop, noop=noop)

        if noop:
            self.reporter.report(prop, AuditResult.NOOP, event=event, details={"commands": [c.text for c in commands]})
            return SyncResult(property=prop, result=AuditResult.NOOP, commands=commands, event=event)

        errors: List[str] = []
        executor = prop.context.executor
        for command in commands:
            result = executor.run(command.text)
            if not result.ok:
                errors.append(f"{command.text} exited {result.exit_status}: {(result.error or result.output).strip()}")
                logger.warning(f"Command failed for {prop}: {errors[-1]}")
                break

        prop.retrieve()
        outcome = AuditResult.FAILURE if errors else AuditResult.SUCCESS
        self.reporter.report(
            prop,
            outcome,
            event=event,
            details={"commands": [c.text for c in commands], "errors": errors},
        )
        return SyncResult(property=prop, result=outcome, commands=commands, event=event, errors=errors)
