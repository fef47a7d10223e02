"""Delivery audit trail — JSON Lines, one record per webhook outcome, with rotation."""

from __future__ import annotations

import json
import os
import threading
from collections import Counter
from pathlib import Path

from src.models import AuditEvent


def summarize_audit_log(log_path: Path) -> dict[str, int]:
    """Count audit records per event type."""
    counts: Counter[str] = Counter()
    if not log_path.exists():
        return {}
    for line in log_path.read_text().splitlines():
        if not line.strip():
            continue
        entry = json.loads(line)
        counts[entry.get("event_type", "unknown")] += 1
    return dict(counts)


class AuditLogger:
    """Append-only audit log of what the bridge did with each delivery."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, log_path: str) -> AuditLogger:
        """Create AuditLogger with rotation settings from environment variables."""
        max_bytes = int(os.environ.get("AUDIT_LOG_MAX_BYTES", "10485760"))
        backup_count = int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", "5"))
        return cls(log_path=log_path, max_bytes=max_bytes, backup_count=backup_count)

    def log(self, event: AuditEvent) -> None:
        line = event.model_dump_json(exclude_none=True)
        with self._lock:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._maybe_rotate()
            with open(self.log_path, "a") as f:
                f.write(line + "\n")

    def _backup(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _maybe_rotate(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return
        if self._backup_count < 1:
            self.log_path.unlink()
            return

        # audit.jsonl.N is dropped, .N-1 -> .N, ..., current -> .1
        self._backup(self._backup_count).unlink(missing_ok=True)
        for i in range(self._backup_count - 1, 0, -1):
            if self._backup(i).exists():
                self._backup(i).rename(self._backup(i + 1))
        self.log_path.rename(self._backup(1))
