"""Core reconciliation engine for statesync."""

from statesync.core.applier import PropertyApplier, SyncResult
from statesync.core.audit import AuditChain, AuditEntry, AuditLogger, AuditResult
from statesync.core.commands import CommandKind, CommandPlan, ProviderCommand
from statesync.core.context import ReconcileContext
from statesync.core.errors import DevError, ExecutorError, InvalidValue, ManifestError, StateSyncError
from statesync.core.executor import CommandExecutor, CommandResult
from statesync.core.property import NOT_FOUND, Property
from statesync.core.report import ChangeEvent, ChangeReporter

__all__ = [
    "PropertyApplier",
    "SyncResult",
    "AuditChain",
    "AuditEntry",
    "AuditLogger",
    "AuditResult",
    "CommandKind",
    "CommandPlan",
    "ProviderCommand",
    "ReconcileContext",
    "DevError",
    "ExecutorError",
    "InvalidValue",
    "ManifestError",
    "StateSyncError",
    "CommandExecutor",
    "CommandResult",
    "NOT_FOUND",
    "Property",
    "ChangeEvent",
    "ChangeReporter",
]
