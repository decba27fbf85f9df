"""Audit logging for binary swaps.

Every install of a variant over the target (swap or first-run bootstrap)
is written as one JSON line to a separate audit log, including drift
observed before the swap.
"""
import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .logging_config import get_home_dir

# Dedicated audit logger, kept out of the console output
audit_logger = logging.getLogger("oc_swapper.audit")
audit_logger.propagate = False


def get_audit_file() -> Path:
    return get_home_dir() / "audit.log"


def setup_audit_logging(log_dir: Optional[str] = None) -> None:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to OC_SWAPPER_HOME (~/.oc_swapper/)
    """
    audit_file = Path(log_dir) / "audit.log" if log_dir else get_audit_file()
    audit_file.parent.mkdir(parents=True, exist_ok=True)

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    # One JSON object per line
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)


@dataclass
class SwapRecord:
    """Record of one install over the target file."""
    timestamp: str
    operation: str  # swap, bootstrap
    target: str
    source: str
    from_state: str
    to_state: str
    success: bool
    drift_detected: bool = False
    user: str = ""
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "SwapRecord":
        data = json.loads(json_str)
        return cls(**data)


def log_swap(
    operation: str,
    target: Path,
    source: Path,
    from_state: str,
    to_state: str,
    success: bool,
    drift_detected: bool = False,
    error: Optional[str] = None,
) -> SwapRecord:
    """Write a swap to the audit log.

    Args:
        operation: "swap" or "bootstrap"
        target: The target file that was (or would have been) replaced
        source: The storage file copied from
        from_state: State observed before the install
        to_state: State the install moved to
        success: Whether the install succeeded
        drift_detected: Whether the target changed outside this tool first
        error: Error message if failed

    Returns:
        The SwapRecord that was logged
    """
    record = SwapRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        target=str(target),
        source=str(source),
        from_state=from_state,
        to_state=to_state,
        success=success,
        drift_detected=drift_detected,
        user=os.environ.get("USERNAME") or os.environ.get("USER", ""),
        error=error,
    )

    audit_logger.info(record.to_json())

    return record


def get_recent_swaps(
    log_file: Optional[Path] = None,
    operation: Optional[str] = None,
    limit: int = 20,
) -> list[SwapRecord]:
    """Read recent swaps from the audit log.

    Args:
        log_file: Path to audit log. Defaults to OC_SWAPPER_HOME/audit.log
        operation: Filter by operation type
        limit: Maximum number of records to return

    Returns:
        List of SwapRecords, most recent first
    """
    log_file = Path(log_file) if log_file else get_audit_file()

    if not log_file.exists():
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = SwapRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if operation and record.operation != operation:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
