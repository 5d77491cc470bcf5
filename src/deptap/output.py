"""In-memory output channel: the timestamped log stream shown to the user."""

from __future__ import annotations

import logging
from collections import deque
from datetime import UTC, datetime

from deptap.models import LogEntry

logger = logging.getLogger(__name__)

_DEFAULT_CAPACITY = 500


def _now_iso() -> str:
    """Return current UTC time as an ISO 8601 string with Z suffix."""
    return datetime.now(tz=UTC).isoformat().replace("+00:00", "Z")


class OutputChannel:
    """Bounded log of user-facing messages, mirrored to ``logging``.

    Entries appended with ``show=True`` are ones the UI should bring to the
    user's attention (errors, install output, dependency details).
    """

    def __init__(self, capacity: int = _DEFAULT_CAPACITY) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def append(self, message: str, *, show: bool = False) -> LogEntry:
        entry = LogEntry(timestamp=_now_iso(), message=message, show=show)
        self._entries.append(entry)
        logger.info(message)
        return entry

    def entries(self, limit: int | None = None) -> list[LogEntry]:
        items = list(self._entries)
        if limit is not None and limit >= 0:
            return items[-limit:] if limit else []
        return items

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
