from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass

from nf_metadata.client.state_store import STORAGE_KEY_HISTORY, JsonStateStore

MAX_HISTORY = 20


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    title: str
    timestamp: int  # epoch milliseconds


def _now_ms() -> int:
    return int(time.time() * 1000)


def _coerce_entries(raw: list) -> list[HistoryEntry]:
    entries: list[HistoryEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        entry_id, title, timestamp = item.get("id"), item.get("title"), item.get("timestamp")
        if not isinstance(entry_id, str) or not isinstance(title, str):
            continue
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            continue
        if isinstance(timestamp, float) and not math.isfinite(timestamp):
            continue
        entries.append(HistoryEntry(id=entry_id, title=title, timestamp=int(timestamp)))
    return entries[:MAX_HISTORY]


class HistoryTracker:
    """Newest-first, deduplicated list of past lookups, persisted after every change."""

    def __init__(
        self,
        store: JsonStateStore,
        *,
        capacity: int = MAX_HISTORY,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._capacity = capacity
        self._clock = clock
        self._entries = _coerce_entries(store.get(STORAGE_KEY_HISTORY, []))[:capacity]

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, video_id: str, title: str) -> HistoryEntry:
        entry = HistoryEntry(id=video_id, title=title, timestamp=self._clock())
        remaining = [item for item in self._entries if item.id != video_id]
        self._entries = [entry, *remaining][: self._capacity]
        self._persist()
        return entry

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def filter(self, query: str) -> list[HistoryEntry]:
        """Entries whose id contains `query` or whose title contains it (case-insensitive)."""
        needle = query.lower()
        return [item for item in self._entries if query in item.id or needle in item.title.lower()]

    def _persist(self) -> None:
        self._store.set(STORAGE_KEY_HISTORY, [asdict(item) for item in self._entries])
