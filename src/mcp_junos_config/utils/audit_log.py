"""Audit trail for configuration changes.

One JSON record per create/update/delete, written to a dedicated rotating
log file so it can be read back independently of the application log.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

audit_logger = logging.getLogger("junoscraft.audit")

DEFAULT_AUDIT_DIR = "~/.junoscraft"
AUDIT_FILE_NAME = "audit.log"


def default_audit_file() -> str:
    return os.path.join(os.path.expanduser(DEFAULT_AUDIT_DIR), AUDIT_FILE_NAME)


def setup_audit_logging(log_dir: Optional[str] = None) -> str:
    """Send audit records to `<log_dir>/audit.log`.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.junoscraft/

    Returns:
        Path of the audit log file
    """
    if log_dir is None:
        log_dir = os.path.expanduser(DEFAULT_AUDIT_DIR)
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    audit_file = os.path.join(log_dir, AUDIT_FILE_NAME)

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.propagate = False
    return audit_file


@dataclass
class ChangeRecord:
    """One configuration change attempt."""
    timestamp: str
    device_id: str
    operation: str  # create, update, delete
    resource_type: str
    resource_id: str
    dry_run: bool
    success: bool
    lines: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    config: Optional[dict] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        return cls(**json.loads(json_str))


class ChangeTracker:
    """Write change records for one device."""

    def __init__(self, device_id: str):
        self.device_id = device_id

    def log_change(
        self,
        operation: str,
        resource_type: str,
        resource_id: str,
        success: bool,
        lines: Optional[list[str]] = None,
        warnings: Optional[list[str]] = None,
        config: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
        dry_run: bool = False,
    ) -> ChangeRecord:
        """Log a configuration change.

        Args:
            operation: create, update or delete
            resource_type: Resource type name
            resource_id: Resource id
            success: Whether the change was committed
            lines: Set/delete lines sent to the device
            warnings: Commit warnings returned by the device
            config: Resource configuration after the change
            error: Error message if failed
            dry_run: Whether lines were only rendered

        Returns:
            The ChangeRecord that was logged
        """
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            device_id=self.device_id,
            operation=operation,
            resource_type=resource_type,
            resource_id=resource_id,
            dry_run=dry_run,
            success=success,
            lines=list(lines or []),
            warnings=list(warnings or []),
            config=config,
            error=error,
        )
        audit_logger.info(record.to_json())
        return record


def get_recent_changes(
    log_file: Optional[str] = None,
    device_id: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from the audit log.

    Args:
        log_file: Path to audit log. Defaults to ~/.junoscraft/audit.log
        device_id: Filter by device ID
        operation: Filter by operation
        limit: Maximum number of records to return

    Returns:
        List of ChangeRecords, most recent first
    """
    if log_file is None:
        log_file = default_audit_file()
    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                audit_logger.debug(f"Skipping malformed audit line: {line[:80]}")
                continue
            if device_id and record.device_id != device_id:
                continue
            if operation and record.operation != operation:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
