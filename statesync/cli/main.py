"""CLI main entry point."""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from statesync.core.applier import PropertyApplier
from statesync.core.audit import AuditChain, AuditLogger, AuditResult
from statesync.core.commands import CommandPlan
from statesync.core.context import ReconcileContext
from statesync.core.errors import StateSyncError
from statesync.core.property import NOT_FOUND
from statesync.core.report import ChangeReporter
from statesync.core.resource import Group, User
from statesync.nameservice import netinfo
from statesync.nameservice.manifest import load_manifest


RESOURCE_CLASSES = {"user": User, "group": Group}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Statesync - name-service property reconciliation")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Data directory for the audit log (default: $STATESYNC_DATA_DIR or ~/.statesync)",
    )
    parser.add_argument("--noop", action="store_true", default=None, help="Report changes without applying them")
    parser.add_argument("--loglevel", default=None, help="Default log level for resources")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("probe", help="Check that the NetInfo tools are installed")

    read_parser = subparsers.add_parser("read", help="Read the current value of a property")
    read_parser.add_argument("type", choices=sorted(RESOURCE_CLASSES), help="Resource type")
    read_parser.add_argument("name", help="Resource name")
    read_parser.add_argument("property", help="Property name")

    plan_parser = subparsers.add_parser("plan", help="Show the commands a manifest needs")
    plan_parser.add_argument("manifest", type=Path, help="Path to desired-state manifest (XML)")
    plan_parser.add_argument("--output", type=Path, help="Also write the plan as JSON")

    sync_parser = subparsers.add_parser("sync", help="Converge properties to a manifest")
    sync_parser.add_argument("manifest", type=Path, help="Path to desired-state manifest (XML)")
    sync_parser.add_argument("--approve", action="store_true", help="Explicitly approve applying changes")

    audit_parser = subparsers.add_parser("audit", help="View audit log")
    audit_parser.add_argument("--resource", help="Filter by resource path")
    audit_parser.add_argument("--limit", type=int, default=100, help="Limit results")

    subparsers.add_parser("verify", help="Verify audit chain integrity")
    return parser


def cmd_probe(context: ReconcileContext) -> int:
    available, missing = netinfo.probe(context.executor)
    if available:
        print("[OK] NetInfo tools available")
        return 0
    print(f"[FAIL] Could not find {missing}", file=sys.stderr)
    return 1


def cmd_read(context: ReconcileContext, type_name: str, name: str, property_name: str) -> int:
    prop_class = netinfo.registry.get(netinfo.NETINFO.name, property_name)
    if prop_class is None:
        print(f"Error: Unknown property '{property_name}'", file=sys.stderr)
        return 1
    resource = RESOURCE_CLASSES[type_name](name, loglevel=context.loglevel)
    prop = prop_class(parent=resource, context=context)
    value = prop.retrieve()
    print(json.dumps({"resource": resource.path, "property": prop.name, "is": None if value is NOT_FOUND else value}))
    return 0


def cmd_plan(context: ReconcileContext, manifest: Path, output: Path = None) -> int:
    applier = PropertyApplier()
    plan = CommandPlan(created_at=datetime.now(timezone.utc), description=f"converge {manifest}")
    for entry in load_manifest(manifest, context):
        for prop in entry.properties:
            prop.retrieve()
            commands = applier.plan(prop)
            if not commands:
                continue
            plan.changes.append(f"{prop.parent.path}: {prop.change_description()}")
            for command in commands:
                plan.add(command)

    print(plan.get_summary())
    for change in plan.changes:
        print(f"  ~ {change}")
    for command in plan.commands:
        print(f"  $ {command.text}")
    if output:
        plan.to_json(output)
        print(f"Plan written: {output}")
    return 0


def cmd_sync(context: ReconcileContext, manifest: Path, approve: bool) -> int:
    if not approve and not context.noop:
        print("Error: --approve flag required to apply changes", file=sys.stderr)
        print("Review the changes with 'plan' first, then use --approve to apply.", file=sys.stderr)
        return 1

    audit_logger = AuditLogger(AuditChain(context.data_dir / "audit.db"))
    applier = PropertyApplier(ChangeReporter(audit_logger))

    failures = 0
    for entry in load_manifest(manifest, context):
        for prop in entry.properties:
            result = applier.sync(prop)
            if result.result == AuditResult.IN_SYNC:
                continue
            status = {AuditResult.SUCCESS: "[OK]", AuditResult.NOOP: "[NOOP]"}.get(result.result, "[FAIL]")
            print(f"{status} {prop.parent.path}: {result.event.message}")
            for error in result.errors:
                print(f"  {error}", file=sys.stderr)
            if result.result == AuditResult.FAILURE:
                failures += 1
    return 1 if failures else 0


def cmd_audit(context: ReconcileContext, resource: str, limit: int) -> int:
    entries = AuditChain(context.data_dir / "audit.db").query(resource=resource, limit=limit)
    print(f"Found {len(entries)} audit entries")
    for entry in entries:
        print(
            f"{entry.timestamp.isoformat()} | {entry.user} | {entry.resource} | {entry.property} | "
            f"{entry.result.value} | {entry.details.get('message', '')}"
        )
    return 0


def cmd_verify(context: ReconcileContext) -> int:
    is_valid, errors = AuditChain(context.data_dir / "audit.db").verify_chain()
    if is_valid:
        print("[OK] Audit chain integrity verified")
        return 0
    print("[FAIL] Audit chain integrity failed:")
    for error in errors:
        print(f"  {error}")
    return 1


def main(argv=None):
    """CLI main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    context = ReconcileContext.from_env(noop=args.noop, loglevel=args.loglevel, data_dir=args.data_dir)

    try:
        if args.command == "probe":
            code = cmd_probe(context)
        elif args.command == "read":
            code = cmd_read(context, args.type, args.name, args.property)
        elif args.command == "plan":
            code = cmd_plan(context, args.manifest, args.output)
        elif args.command == "sync":
            code = cmd_sync(context, args.manifest, args.approve)
        elif args.command == "audit":
            code = cmd_audit(context, args.resource, args.limit)
        else:
            code = cmd_verify(context)
    except StateSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
