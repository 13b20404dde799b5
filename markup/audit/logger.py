"""Audit trail for proxy and webhook traffic.

Events are appended as JSON Lines. Each line carries ``prev_hash``, the
SHA-256 of the line before it, so truncation or edits show up in
``validate_audit_chain``. Page content and webhook payloads are never written.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
from dataclasses import dataclass
from pathlib import Path

from markup.config import Settings
from markup.models import AuditEvent


@dataclass
class ChainValidationResult:
    valid: bool
    broken_at_line: int | None = None


def _digest(line: str) -> str:
    return hashlib.sha256(line.encode()).hexdigest()


def validate_audit_chain(log_path: Path) -> ChainValidationResult:
    """Check every ``prev_hash`` against the line that precedes it."""
    text = log_path.read_text().strip()
    if not text:
        return ChainValidationResult(valid=True)

    previous: str | None = None
    for lineno, line in enumerate(text.split("\n"), start=1):
        expected = _digest(previous) if previous is not None else None
        if json.loads(line).get("prev_hash") != expected:
            return ChainValidationResult(valid=False, broken_at_line=lineno)
        previous = line
    return ChainValidationResult(valid=True)


class AuditLogger:
    """Append-only, size-rotated, hash-chained audit log."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._tail: str | None = self._read_tail()

    @classmethod
    def from_settings(cls, settings: Settings) -> AuditLogger | None:
        if not settings.audit_log_path:
            return None
        return cls(
            log_path=settings.audit_log_path,
            max_bytes=settings.audit_log_max_bytes,
            backup_count=settings.audit_log_backup_count,
        )

    def _read_tail(self) -> str | None:
        if not self.log_path.exists():
            return None
        lines = self.log_path.read_text().strip().split("\n")
        return lines[-1] or None

    def _backup(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _rotate_if_full(self) -> bool:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return False
        if self._backup_count == 0:
            self.log_path.unlink()
            return True
        self._backup(self._backup_count).unlink(missing_ok=True)
        for index in range(self._backup_count - 1, 0, -1):
            if self._backup(index).exists():
                self._backup(index).rename(self._backup(index + 1))
        self.log_path.rename(self._backup(1))
        return True

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        record = event.model_dump(mode="json")

        lock_path = self.log_path.with_name(f".{self.log_path.name}.lock")
        with open(lock_path, "w") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                # A fresh file starts a fresh chain.
                if self._rotate_if_full():
                    self._tail = None
                record["prev_hash"] = _digest(self._tail) if self._tail is not None else None
                line = json.dumps(record, separators=(",", ":"))
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

        self._tail = line
