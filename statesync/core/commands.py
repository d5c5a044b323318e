"""Provider commands and the plans that collect them."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List


class CommandKind(Enum):
    """What a provider command does to the target."""

    CREATE = "create"
    MODIFY = "modify"
    DESTROY = "destroy"
    UNDEFINE = "undefine"
    RETRIEVE = "retrieve"


@dataclass(frozen=True)
class ProviderCommand:
    """A backend command line, built fresh for each request."""

    kind: CommandKind
    text: str
    resource: str = ""
    property_name: str = ""

    def __post_init__(self):
        """Validate command."""
        if not self.text.strip():
            raise ValueError(f"{self.kind.value} command requires command text")

    @property
    def mutating(self) -> bool:
        return self.kind != CommandKind.RETRIEVE

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "resource": self.resource,
            "property": self.property_name,
        }


@dataclass
class CommandPlan:
    """Commands needed to converge a set of properties."""

    created_at: datetime
    description: str
    commands: List[ProviderCommand] = field(default_factory=list)
    changes: List[str] = field(default_factory=list)

    def add(self, command: ProviderCommand) -> None:
        """Add a command to the plan."""
        self.commands.append(command)

    def is_empty(self) -> bool:
        """Check if plan has any commands."""
        return len(self.commands) == 0

    def get_summary(self) -> str:
        """Get human-readable summary of the plan."""
        parts = [f"Plan: {self.description}"]
        counts: Dict[str, int] = {}
        for command in self.commands:
            counts[command.kind.value] = counts.get(command.kind.value, 0) + 1
        for kind in sorted(counts):
            parts.append(f"  {kind}: {counts[kind]} command(s)")
        if self.is_empty():
            parts.append("  (No changes planned)")
        return "\n".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert plan to dictionary for JSON serialization."""
        return {
            "created_at": self.created_at.isoformat(),
            "description": self.description,
            "commands": [c.to_dict() for c in self.commands],
            "changes": list(self.changes),
        }

    def to_json(self, file_path: Path) -> None:
        """Serialize plan to JSON file."""
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
