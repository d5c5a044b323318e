"""Explicit reconciliation settings passed to every property."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from statesync.core.executor import CommandExecutor


TRUTHY = ("1", "true", "yes", "y", "on")


def default_data_dir() -> Path:
    return Path.home() / ".statesync"


@dataclass(frozen=True)
class ReconcileContext:
    """
    Process-wide inputs consumed by the core.

    Attributes:
        noop: When true, no property is enforced.
        loglevel: Level used for resources that do not carry their own.
        executor: Runs provider command lines.
        data_dir: Where the audit database lives.
    """

    noop: bool = False
    loglevel: str = "notice"
    executor: CommandExecutor = field(default_factory=CommandExecutor)
    data_dir: Path = field(default_factory=default_data_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ReconcileContext":
        """
        Build a context from STATESYNC_* environment variables.

        Order (later wins):
          1) defaults
          2) STATESYNC_NOOP, STATESYNC_LOGLEVEL, STATESYNC_DATA_DIR
          3) keyword overrides that are not None (CLI flags)
        """
        env = os.environ if environ is None else environ
        ctx = cls()

        noop = env.get("STATESYNC_NOOP")
        if noop is not None:
            ctx = replace(ctx, noop=noop.strip().lower() in TRUTHY)
        loglevel = env.get("STATESYNC_LOGLEVEL")
        if loglevel:
            ctx = replace(ctx, loglevel=loglevel.strip().lower())
        data_dir = env.get("STATESYNC_DATA_DIR")
        if data_dir:
            ctx = replace(ctx, data_dir=Path(data_dir))

        explicit = {k: v for k, v in overrides.items() if v is not None}
        if explicit:
            ctx = replace(ctx, **explicit)
        return ctx
