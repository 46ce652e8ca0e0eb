"""Edit journal for the tool layer.

Dual logging:
- Quick reference log: ~/.htmledit/failures.log
- Full session data: ~/.htmledit/sessions/<timestamp>.json

The root directory can be moved with HTMLEDIT_HOME.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional


def journal_dir() -> Path:
    """Root of the journal (HTMLEDIT_HOME or ~/.htmledit)."""
    env_home = os.environ.get("HTMLEDIT_HOME")
    return Path(env_home) if env_home else Path.home() / ".htmledit"


def failures_log() -> Path:
    return journal_dir() / "failures.log"


def sessions_dir() -> Path:
    return journal_dir() / "sessions"


def ensure_dirs():
    """Ensure journal directories exist."""
    sessions_dir().mkdir(parents=True, exist_ok=True)


def _write_session(data: dict[str, Any], timestamp: datetime) -> Path:
    session_id = timestamp.strftime("%Y%m%d_%H%M%S_%f")
    session_file = sessions_dir() / f"{session_id}.json"
    with open(session_file, "w") as f:
        json.dump(data, f, indent=2)
    return session_file


def log_failure(
    file: str,
    reason: str,
    operations: Optional[list[dict]] = None,
    original: Optional[str] = None,
    failed: Optional[list[dict]] = None,
    extra: Optional[dict[str, Any]] = None,
) -> Path:
    """Log a failed or partial edit to both quick log and full session.

    Args:
        file: File name that was edited
        reason: Failure reason (the engine's error string)
        operations: Requested operations
        original: Document before the edit
        failed: Serialized failed operations with diagnostics
        extra: Additional data to log

    Returns:
        Path to the session file.
    """
    ensure_dirs()
    timestamp = datetime.now()
    timestamp_str = timestamp.strftime("%Y-%m-%d %H:%M:%S")

    # Quick reference log (one line per failure)
    with open(failures_log(), "a") as f:
        short_reason = reason[:100].replace("\n", " ")
        f.write(f"{timestamp_str} | {file} | FAIL | {short_reason}\n")

    session_data: dict[str, Any] = {
        "timestamp": timestamp_str,
        "file": file,
        "status": "failed",
        "reason": reason,
    }
    if operations:
        session_data["operations"] = operations
    if original:
        session_data["original"] = original
    if failed:
        session_data["failed_operations"] = failed
    if extra:
        session_data.update(extra)

    return _write_session(session_data, timestamp)


def log_success(
    file: str,
    operations: Optional[list[dict]] = None,
    match_tiers: Optional[list[str]] = None,
    extra: Optional[dict[str, Any]] = None,
) -> Path:
    """Log a fully applied edit to a session file.

    Args:
        file: File name that was edited
        operations: Applied operations
        match_tiers: Tier that matched each operation
        extra: Additional data to log

    Returns:
        Path to the session file.
    """
    ensure_dirs()
    timestamp = datetime.now()

    session_data: dict[str, Any] = {
        "timestamp": timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        "file": file,
        "status": "success",
    }
    if operations:
        session_data["operations"] = operations
    if match_tiers:
        session_data["match_tiers"] = match_tiers
    if extra:
        session_data.update(extra)

    return _write_session(session_data, timestamp)


def get_recent_failures(limit: int = 10) -> list[str]:
    """Last ``limit`` lines of the quick-reference failure log, oldest first."""
    log_path = failures_log()
    if limit <= 0 or not log_path.exists():
        return []
    lines = [line for line in log_path.read_text().splitlines() if line.strip()]
    return lines[-limit:]


def get_session(session_id: str) -> Optional[dict]:
    """Full record of one journaled edit, keyed by its file stem."""
    session_file = sessions_dir() / f"{session_id}.json"
    if not session_file.is_file():
        return None
    return json.loads(session_file.read_text())


def clear_old_sessions(days: int = 7) -> int:
    """Remove session records last written more than ``days`` ago.

    Returns:
        Number of sessions deleted.
    """
    cutoff = datetime.now() - timedelta(days=days)
    stale = [
        path
        for path in sessions_dir().glob("*.json")
        if datetime.fromtimestamp(path.stat().st_mtime) < cutoff
    ]
    for path in stale:
        path.unlink()
    return len(stale)


__all__ = [
    "clear_old_sessions",
    "ensure_dirs",
    "failures_log",
    "get_recent_failures",
    "get_session",
    "journal_dir",
    "log_failure",
    "log_success",
    "sessions_dir",
]
