"""Append-only audit trail of property transitions with hash chain verification."""

import hashlib
import json
import os
import sqlite3
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple


GENESIS_HASH = "0" * 64

COLUMNS = (
    "entry_id, timestamp, previous_hash, current_hash, user, action, "
    "resource, property, result, details"
)


class AuditResult(Enum):
    """Outcome of an audited transition."""

    SUCCESS = "success"
    FAILURE = "failure"
    NOOP = "noop"
    IN_SYNC = "in_sync"


@dataclass
class AuditEntry:
    """Single audit log entry."""

    timestamp: datetime
    entry_id: str
    previous_hash: str
    current_hash: str
    user: str
    action: str
    resource: str
    property: str
    result: AuditResult
    details: Dict[str, Any] = None

    def __post_init__(self):
        if self.details is None:
            self.details = {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["result"] = self.result.value
        return data

    @classmethod
    def from_row(cls, row: Tuple) -> "AuditEntry":
        (entry_id, timestamp, prev_hash, curr_hash, user, action, resource, prop, result, details_json) = row
        return cls(
            timestamp=datetime.fromisoformat(timestamp),
            entry_id=entry_id,
            previous_hash=prev_hash,
            current_hash=curr_hash,
            user=user,
            action=action,
            resource=resource,
            property=prop,
            result=AuditResult(result),
            details=json.loads(details_json),
        )


class AuditChain:
    """SQLite-backed audit log where each entry hashes its predecessor."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS audit_log (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                entry_id TEXT NOT NULL UNIQUE,
                timestamp TEXT NOT NULL,
                previous_hash TEXT NOT NULL,
                current_hash TEXT NOT NULL,
                user TEXT NOT NULL,
                action TEXT NOT NULL,
                resource TEXT NOT NULL,
                property TEXT NOT NULL,
                result TEXT NOT NULL,
                details TEXT NOT NULL
            )
            """
        )
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_resource ON audit_log(resource)")
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS audit_log_no_delete
            BEFORE DELETE ON audit_log
            BEGIN
                SELECT RAISE(ABORT, 'audit_log is append-only (DELETE not allowed)');
            END;
            """
        )
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS audit_log_no_update
            BEFORE UPDATE ON audit_log
            BEGIN
                SELECT RAISE(ABORT, 'audit_log is append-only (UPDATE not allowed)');
            END;
            """
        )
        conn.commit()
        conn.close()

    def _get_last_hash(self, cursor: sqlite3.Cursor) -> str:
        cursor.execute("SELECT current_hash FROM audit_log ORDER BY seq DESC LIMIT 1")
        row = cursor.fetchone()
        return row[0] if row else GENESIS_HASH

    @staticmethod
    def _payload(entry_id, timestamp, user, action, resource, prop, result, details) -> str:
        return json.dumps(
            {
                "entry_id": entry_id,
                "timestamp": timestamp,
                "user": user,
                "action": action,
                "resource": resource,
                "property": prop,
                "result": result,
                "details": details,
            },
            sort_keys=True,
        )

    @staticmethod
    def _compute_hash(previous_hash: str, entry_payload: str) -> str:
        combined = f"{previous_hash}:{entry_payload}"
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()

    def append(
        self,
        user: str,
        action: str,
        resource: str,
        property: str,
        result: AuditResult,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        """Append a new entry to the audit chain."""
        details = details or {}
        timestamp = datetime.now(timezone.utc)
        entry_id = hashlib.sha256(
            f"{timestamp.isoformat()}:{user}:{resource}:{property}:{os.urandom(8).hex()}".encode()
        ).hexdigest()[:16]

        conn = self._connect()
        try:
            cursor = conn.cursor()
            previous_hash = self._get_last_hash(cursor)
            payload = self._payload(
                entry_id, timestamp.isoformat(), user, action, resource, property, result.value, details
            )
            entry = AuditEntry(
                timestamp=timestamp,
                entry_id=entry_id,
                previous_hash=previous_hash,
                current_hash=self._compute_hash(previous_hash, payload),
                user=user,
                action=action,
                resource=resource,
                property=property,
                result=result,
                details=details,
            )
            cursor.execute(
                f"INSERT INTO audit_log ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    entry.entry_id,
                    entry.timestamp.isoformat(),
                    entry.previous_hash,
                    entry.current_hash,
                    entry.user,
                    entry.action,
                    entry.resource,
                    entry.property,
                    entry.result.value,
                    json.dumps(entry.details, sort_keys=True),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return entry

    def verify_chain(self) -> Tuple[bool, List[str]]:
        """Verify integrity of the audit chain. Returns (is_valid, errors)."""
        conn = self._connect()
        cursor = conn.cursor()
        errors: List[str] = []

        cursor.execute("SELECT name FROM sqlite_master WHERE type='trigger' AND tbl_name='audit_log'")
        trigger_names = {row[0] for row in cursor.fetchall()}
        missing = sorted({"audit_log_no_delete", "audit_log_no_update"} - trigger_names)
        if missing:
            errors.append(f"Audit immutability triggers missing: {', '.join(missing)}")

        cursor.execute(f"SELECT {COLUMNS} FROM audit_log ORDER BY seq ASC")
        rows = cursor.fetchall()
        conn.close()

        previous_hash = GENESIS_HASH
        for row in rows:
            (entry_id, timestamp, stored_prev, stored_curr, user, action, resource, prop, result, details_json) = row
            if stored_prev != previous_hash:
                errors.append(
                    f"Hash chain broken at entry {entry_id}: expected previous_hash {previous_hash}, got {stored_prev}"
                )
            payload = self._payload(
                entry_id, timestamp, user, action, resource, prop, result, json.loads(details_json)
            )
            computed = self._compute_hash(previous_hash, payload)
            if stored_curr != computed:
                errors.append(f"Hash mismatch at entry {entry_id}: expected {computed}, got {stored_curr}")
            previous_hash = stored_curr

        return len(errors) == 0, errors

    def query(
        self,
        resource: Optional[str] = None,
        property: Optional[str] = None,
        result: Optional[AuditResult] = None,
        user: Optional[str] = None,
        limit: int = 1000,
    ) -> List[AuditEntry]:
        """Query audit log with filters, newest first."""
        conditions = []
        params: List[Any] = []
        if resource:
            conditions.append("resource = ?")
            params.append(resource)
        if property:
            conditions.append("property = ?")
            params.append(property)
        if result:
            conditions.append("result = ?")
            params.append(result.value)
        if user:
            conditions.append("user = ?")
            params.append(user)

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        params.append(limit)

        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {COLUMNS} FROM audit_log WHERE {where_clause} ORDER BY seq DESC LIMIT ?",
            params,
        )
        rows = cursor.fetchall()
        conn.close()
        return [AuditEntry.from_row(row) for row in rows]

    def export_jsonl(self, output_path: Path) -> None:
        """Export audit log to JSONL format."""
        with open(output_path, "w", encoding="utf-8") as f:
            for entry in reversed(self.query(limit=-1)):
                f.write(json.dumps(entry.to_dict()) + "\n")


class AuditLogger:
    """Convenience wrapper that stamps the current user on each entry."""

    def __init__(self, audit_chain: AuditChain, user: Optional[str] = None):
        self.audit_chain = audit_chain
        self.user = user or os.getenv("USER", "unknown")

    def log(
        self,
        action: str,
        resource: str,
        property: str,
        result: AuditResult,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        return self.audit_chain.append(
            user=self.user,
            action=action,
            resource=resource,
            property=property,
            result=result,
            details=details or {},
        )
