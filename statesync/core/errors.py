"""Exceptions raised by the reconciliation core."""


class StateSyncError(Exception):
    """Base class for all statesync errors."""

    pass


class DevError(StateSyncError):
    """Raised for configuration or internal faults (never retried)."""

    pass


class InvalidValue(StateSyncError):
    """Raised when a proposed desired value is rejected."""

    pass


class ExecutorError(StateSyncError):
    """Raised when an external command cannot be launched."""

    pass


class ManifestError(StateSyncError):
    """Raised when a desired-state manifest cannot be loaded."""

    pass
