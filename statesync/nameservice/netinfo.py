"""
Manage NetInfo directory-service objects through the niutil/nireport tools.

Every NetInfo attribute is read and written through the same command-line
interface, so a single property class covers them all; the only per-property
difference is the backend key, looked up in the provider's key map.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Tuple

from statesync.core.commands import CommandKind, ProviderCommand
from statesync.core.errors import DevError
from statesync.core.executor import CommandExecutor
from statesync.core.pipeline import IntegerPipeline, PathPipeline, TextPipeline
from statesync.core.property import NOT_FOUND, Property
from statesync.core.registry import PropertyRegistry, ProviderType

logger = logging.getLogger(__name__)

ADMIN_TOOL = "niutil"
REPORT_TOOL = "nireport"
DUMP_TOOL = "nidump"
FLUSH_COMMAND = "lookupd -flushcache"

REPORT_LINE = re.compile(r"^(\w+)\s+(.+)$")
NUMERIC_VALUE = re.compile(r"^[-+]?[0-9]+$")

NETINFO = ProviderType(
    name="netinfo",
    key_map={"comment": "realname"},
    required_tools=(ADMIN_TOOL, REPORT_TOOL),
)

registry = PropertyRegistry()


def probe(executor: Optional[CommandExecutor] = None) -> Tuple[bool, Optional[str]]:
    """Check that every NetInfo tool is installed. Returns (available, missing_tool)."""
    executor = executor or CommandExecutor()
    for tool in NETINFO.required_tools:
        if executor.which(tool) is None:
            logger.error(f"Could not find {tool}")
            return False, tool
    return True, None


def exists(resource, executor: Optional[CommandExecutor] = None) -> bool:
    """Whether the object is present in its NetInfo directory."""
    executor = executor or CommandExecutor()
    cmd = f"{DUMP_TOOL} -r /{resource.container}/{resource.name} /"
    result = executor.run(cmd)
    # nidump reports a missing entry on stderr; only stdout means it exists.
    return result.output.strip() != ""


def flush(executor: Optional[CommandExecutor] = None) -> bool:
    """Flush the lookupd cache; a failure is logged and reads may be stale."""
    executor = executor or CommandExecutor()
    result = executor.run(FLUSH_COMMAND)
    if not result.ok:
        logger.error(f"Could not flush lookupd cache: {(result.error or result.output).strip()}")
        return False
    return True


def parse_value(value: str) -> Any:
    if NUMERIC_VALUE.match(value):
        return int(value)
    return value


class ReportedTextPipeline(TextPipeline):
    """Text stored the way `nireport` output is parsed, so all-digit text becomes an int."""

    def munge(self, value: Any) -> Any:
        return parse_value(value)


class NetInfoProperty(Property):
    """A property stored as a NetInfo attribute of its parent's directory entry."""

    provider_type = NETINFO

    @classmethod
    def netinfo_key(cls) -> str:
        key = cls.provider_type.key_for(cls.name)
        if not key:
            raise DevError(f"Could not find netinfo key for property {cls.name}")
        return key

    @property
    def executor(self) -> CommandExecutor:
        return self.context.executor

    def exists(self) -> bool:
        return exists(self.parent, self.executor)

    def retrieve_command(self) -> ProviderCommand:
        cmd = [REPORT_TOOL, "/", f"/{self.parent.container}", "name", self.netinfo_key()]
        return self._command(CommandKind.RETRIEVE, " ".join(cmd))

    def retrieve(self) -> Any:
        """Read the current value from NetInfo into `is_`."""
        flush(self.executor)
        cmd = self.retrieve_command()
        logger.debug(f"Executing {cmd.text!r}")
        output = self.executor.run(cmd.text).output

        found: Any = NOT_FOUND
        for line in output.splitlines():
            match = REPORT_LINE.match(line)
            if match is None:
                raise DevError(f"Could not match {line!r}")
            name, value = match.group(1), match.group(2).rstrip()
            if name == self.parent.name:
                found = parse_value(value)

        self.is_ = found
        return found

    def add_command(self) -> ProviderCommand:
        return self._creator_command(CommandKind.CREATE)

    def delete_command(self) -> ProviderCommand:
        return self._creator_command(CommandKind.DESTROY)

    def undefine_command(self) -> ProviderCommand:
        cmd = [ADMIN_TOOL, "-destroyprop", "/", self._target(), self.netinfo_key()]
        return self._command(CommandKind.UNDEFINE, " ".join(cmd))

    def modify_command(self) -> ProviderCommand:
        if self.should is None:
            raise DevError(f"Cannot modify {self}: no desired value")
        cmd = [ADMIN_TOOL, "-createprop", "/", self._target(), self.netinfo_key(), f"'{self.should}'"]
        return self._command(CommandKind.MODIFY, " ".join(cmd))

    def _creator_command(self, kind: CommandKind) -> ProviderCommand:
        flag = {CommandKind.CREATE: "-create", CommandKind.DESTROY: "-destroy"}[kind]
        return self._command(kind, " ".join([ADMIN_TOOL, flag, "/", self._target()]))

    def _target(self) -> str:
        return f"/{self.parent.container}/{self.parent.name}"

    def _command(self, kind: CommandKind, text: str) -> ProviderCommand:
        return ProviderCommand(kind=kind, text=text, resource=self.parent.name, property_name=self.name)


@registry.register
class UID(NetInfoProperty):
    name = "uid"
    pipeline = IntegerPipeline(minimum=0)


@registry.register
class GID(NetInfoProperty):
    name = "gid"
    pipeline = IntegerPipeline(minimum=0)


@registry.register
class Comment(NetInfoProperty):
    name = "comment"
    pipeline = ReportedTextPipeline()


@registry.register
class Home(NetInfoProperty):
    name = "home"
    pipeline = PathPipeline()


@registry.register
class Shell(NetInfoProperty):
    name = "shell"
    pipeline = PathPipeline()
