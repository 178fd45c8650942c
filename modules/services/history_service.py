"""Generated description history."""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One successful description result."""

    id: int
    text: str
    model: str
    timestamp: str


class ClipboardBuffer:
    """Clipboard stand-in for the web UI; the browser performs the actual write."""

    def __init__(self) -> None:
        self.last_text: Optional[str] = None

    def __call__(self, text: str) -> None:
        self.last_text = text

    def take(self) -> Optional[str]:
        """Return and forget the pending text."""
        text, self.last_text = self.last_text, None
        return text


class HistoryStore:
    """Append-only, most-recent-first history of descriptions."""

    def __init__(self, clipboard: Optional[ClipboardWriter] = None) -> None:
        self._entries: Deque[HistoryEntry] = deque()
        self._ids = itertools.count(1)
        self._clipboard = clipboard

    def next_id(self) -> int:
        """Return a fresh id, unique within this store."""
        return next(self._ids)

    def prepend(self, entry: HistoryEntry) -> None:
        self._entries.appendleft(entry)

    def all(self) -> Tuple[HistoryEntry, ...]:
        """Return every entry, newest first."""
        return tuple(self._entries)

    def get(self, entry_id: int) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def copy_text(self, entry_id: int) -> bool:
        """Best-effort copy of an entry's text to the clipboard.

        Never raises; returns True only when the writer accepted the text.
        """
        entry = self.get(entry_id)
        if entry is None:
            logger.warning("Copy requested for unknown history entry %s", entry_id)
            return False
        if self._clipboard is None:
            logger.warning("No clipboard configured; entry %s not copied", entry_id)
            return False
        try:
            self._clipboard(entry.text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Clipboard write failed for entry %s: %s", entry_id, exc)
            return False
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))
