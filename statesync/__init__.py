"""Statesync - resource property reconciliation."""

__version__ = "0.3.0"
