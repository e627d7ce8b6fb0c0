"""Audit logging for configuration pushes.

One structured JSON record per (node, port) target of every orchestration
run, written to a dedicated rotating log file.
"""
import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Dedicated audit logger
audit_logger = logging.getLogger("tsn_config.audit")

AUDIT_FILE_NAME = "audit.log"


def default_audit_dir() -> str:
    return os.environ.get("TSNCONF_AUDIT_DIR") or os.path.expanduser("~/.tsn-config")


def setup_audit_logging(log_dir: Optional[str] = None) -> str:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to TSNCONF_AUDIT_DIR or ~/.tsn-config/

    Returns:
        Path of the audit log file
    """
    log_dir = log_dir or default_audit_dir()
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    audit_file = os.path.join(log_dir, AUDIT_FILE_NAME)

    audit_logger.setLevel(logging.INFO)
    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    # JSON lines for machine-readability
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.propagate = False
    return audit_file


@dataclass
class PushRecord:
    """Record of one configuration push to one target."""
    timestamp: str
    node_id: str
    interface: str
    feature: str
    plugin: Optional[str]
    schedule_id: str
    status: str  # success, failed, cancelled
    dry_run: bool = False
    intent_checksum: Optional[str] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "PushRecord":
        data = json.loads(json_str)
        return cls(**data)


def record_push(
    node_id: str,
    interface: str,
    feature: str,
    plugin: Optional[str],
    schedule_id: str,
    status: str,
    dry_run: bool = False,
    intent_checksum: Optional[str] = None,
    error: Optional[str] = None,
) -> PushRecord:
    """Write a push record to the audit log and return it."""
    record = PushRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        node_id=node_id,
        interface=interface,
        feature=feature,
        plugin=plugin,
        schedule_id=schedule_id,
        status=status,
        dry_run=dry_run,
        intent_checksum=intent_checksum,
        error=error[:1000] if error else None,  # Truncate long errors
    )
    audit_logger.info(record.to_json())
    return record


def get_recent_pushes(
    log_file: Optional[str] = None,
    node_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 100,
) -> list[PushRecord]:
    """Read recent pushes from the audit log.

    Args:
        log_file: Path to audit log. Defaults to <audit dir>/audit.log
        node_id: Filter by node ID
        status: Filter by status
        limit: Maximum number of records to return

    Returns:
        List of PushRecords, most recent first
    """
    if log_file is None:
        log_file = os.path.join(default_audit_dir(), AUDIT_FILE_NAME)

    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = PushRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if node_id and record.node_id != node_id:
                continue
            if status and record.status != status:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
