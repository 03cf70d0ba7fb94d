"""In-memory activity log surfaced through the /logs command."""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Deque, Literal

LogCategory = Literal["network", "transfer", "accounts", "wallet", "system"]
LogSeverity = Literal["info", "warning", "error"]

VALID_CATEGORIES: set[str] = {"network", "transfer", "accounts", "wallet", "system"}
VALID_SEVERITIES: set[str] = {"info", "warning", "error"}

# Addresses and signatures (32-88 base58 chars) are masked before storage
_BASE58_PATTERN = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{32,88}\b")


def mask(token: str) -> str:
    if len(token) <= 8:
        return "••••"
    return f"{token[:4]}…{token[-4:]}"


def _redact(text: str) -> str:
    return _BASE58_PATTERN.sub(lambda match: mask(match.group(0)), text)


@dataclass(slots=True)
class LogEntry:
    """Represents a single structured log entry."""

    timestamp: datetime
    category: LogCategory
    severity: LogSeverity
    message: str


class LogBuffer:
    """Fixed-size FIFO of user-facing events with base58 redaction."""

    def __init__(
        self,
        *,
        max_entries: int = 200,
        redaction_enabled: bool = True,
    ) -> None:
        self.max_entries = max(max_entries, 1)
        self._redaction_enabled = redaction_enabled
        self._entries: Deque[LogEntry] = deque(maxlen=self.max_entries)
        self._subscribers: list[Callable[[LogEntry], None]] = []

    def record(self, category: str, message: str, *, severity: str = "info") -> LogEntry:
        normalized_category = category.lower()
        if normalized_category not in VALID_CATEGORIES:
            normalized_category = "system"
        normalized_severity = severity.lower()
        if normalized_severity not in VALID_SEVERITIES:
            normalized_severity = "info"
        entry = LogEntry(
            timestamp=datetime.now(UTC),
            category=normalized_category,  # type: ignore[arg-type]
            severity=normalized_severity,  # type: ignore[arg-type]
            message=_redact(message) if self._redaction_enabled else message,
        )
        self._entries.append(entry)
        for callback in list(self._subscribers):
            callback(entry)
        return entry

    def recent(self, *, category: str | None = None, limit: int = 50) -> list[LogEntry]:
        if limit <= 0:
            return []
        entries = list(self._entries)
        if category is not None:
            normalized = category.lower()
            if normalized not in VALID_CATEGORIES:
                normalized = "system"
            entries = [entry for entry in entries if entry.category == normalized]
        return entries[-limit:]

    def latest(self) -> LogEntry | None:
        if not self._entries:
            return None
        return self._entries[-1]

    def subscribe(self, callback: Callable[[LogEntry], None]) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogEntry], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)


__all__ = ["LogBuffer", "LogEntry", "LogCategory", "LogSeverity", "VALID_CATEGORIES", "VALID_SEVERITIES", "mask"]
