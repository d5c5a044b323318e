"""
Desired-state manifests for name-service resources.

A manifest is a flat XML document:

    <resources>
      <user name="bob" loglevel="info">
        <comment>Bob Smith</comment>
        <shell>/bin/zsh</shell>
        <shell>/bin/bash</shell>
      </user>
      <group name="staff"><gid>20</gid></group>
    </resources>

Repeated property tags list several acceptable values, in preference order.
`ensure="absent"` on a property tag asks for the value to be undefined.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Type

from lxml import etree

from statesync.core.context import ReconcileContext
from statesync.core.errors import ManifestError, StateSyncError
from statesync.core.property import NOT_FOUND
from statesync.core.resource import Group, Resource, User
from statesync.nameservice.netinfo import NETINFO, NetInfoProperty, registry


RESOURCE_TYPES: Dict[str, Tuple[Type[Resource], Tuple[str, ...]]] = {
    "user": (User, ("uid", "gid", "comment", "home", "shell")),
    "group": (Group, ("gid",)),
}

TRUTHY = ("1", "true", "yes", "on")


@dataclass
class DesiredResource:
    """A resource and the properties the manifest manages on it."""

    resource: Resource
    properties: List[NetInfoProperty] = field(default_factory=list)


def load_manifest(path: Path, context: ReconcileContext) -> List[DesiredResource]:
    """Parse a manifest file into resources with desired property values."""
    if not path.exists():
        raise ManifestError(f"Manifest not found: {path}")
    parser = etree.XMLParser(remove_comments=True, remove_pis=True, resolve_entities=False)
    try:
        root = etree.parse(str(path), parser).getroot()
    except etree.XMLSyntaxError as e:
        raise ManifestError(f"XML parse error in {path} at line {e.lineno}: {e.msg}") from e
    return parse_resources(root, context)


def parse_resources(root: etree._Element, context: ReconcileContext) -> List[DesiredResource]:
    if root.tag != "resources":
        raise ManifestError(f"Root element must be <resources>, found <{root.tag}>")

    desired: List[DesiredResource] = []
    seen = set()
    for element in root:
        if not isinstance(element.tag, str):
            continue
        if element.tag not in RESOURCE_TYPES:
            raise ManifestError(f"Unknown resource type <{element.tag}> (line {element.sourceline})")
        resource_class, allowed = RESOURCE_TYPES[element.tag]
        name = (element.get("name") or "").strip()
        if not name:
            raise ManifestError(f"<{element.tag}> at line {element.sourceline} has no name")
        if (element.tag, name) in seen:
            raise ManifestError(f"Duplicate {element.tag} {name!r}")
        seen.add((element.tag, name))

        resource = resource_class(
            name,
            noop=(element.get("noop") or "").strip().lower() in TRUTHY,
            loglevel=element.get("loglevel") or context.loglevel,
        )
        values = _property_values(element, allowed)
        entry = DesiredResource(resource=resource)
        for prop_name, prop_values in values.items():
            prop_class = registry.get(NETINFO.name, prop_name)
            try:
                entry.properties.append(prop_class(parent=resource, should=prop_values, context=context))
            except StateSyncError as e:
                raise ManifestError(f"{element.tag} {name!r}: {e}") from e
        desired.append(entry)
    return desired


def _property_values(element: etree._Element, allowed: Tuple[str, ...]) -> Dict[str, List[Any]]:
    values: Dict[str, List[Any]] = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue
        if child.tag not in allowed:
            raise ManifestError(
                f"Unknown property <{child.tag}> for {element.tag} (line {child.sourceline})"
            )
        if (child.get("ensure") or "").strip().lower() == "absent":
            value: Any = NOT_FOUND
        else:
            value = (child.text or "").strip()
        values.setdefault(child.tag, []).append(value)
    return values
