from __future__ import annotations

import math
from dataclasses import dataclass, field

from nf_metadata.client.state_store import STORAGE_KEY_ANALYTICS, JsonStateStore

MAX_SAMPLES = 50
MAX_RECENT = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class RecentSearch:
    id: str
    time: int  # milliseconds


@dataclass
class AnalyticsWindow:
    total_searches: int = 0
    avg_response_time: int = 0
    search_times: list[int] = field(default_factory=list)
    recent_searches: list[RecentSearch] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "totalSearches": self.total_searches,
            "avgResponseTime": self.avg_response_time,
            "searchTimes": list(self.search_times),
            "recentSearches": [{"id": r.id, "time": r.time} for r in self.recent_searches],
        }

    @classmethod
    def from_json(cls, raw: dict) -> AnalyticsWindow:
        times = [t for t in (_as_int(v) for v in _as_list(raw.get("searchTimes"))) if t is not None]
        recent: list[RecentSearch] = []
        for item in _as_list(raw.get("recentSearches")):
            if not isinstance(item, dict) or not isinstance(item.get("id"), str):
                continue
            elapsed = _as_int(item.get("time"))
            if elapsed is not None:
                recent.append(RecentSearch(id=item["id"], time=elapsed))
        times = times[-MAX_SAMPLES:]
        return cls(
            total_searches=_as_int(raw.get("totalSearches")) or 0,
            avg_response_time=round_half_up(sum(times) / len(times)) if times else 0,
            search_times=times,
            recent_searches=recent[:MAX_RECENT],
        )


class AnalyticsTracker:
    """
    Rolling latency window.

    Keeps the last `MAX_SAMPLES` round-trip times and the average of exactly
    that window, plus the last `MAX_RECENT` (id, time) pairs for display.
    """

    def __init__(self, store: JsonStateStore) -> None:
        self._store = store
        raw = store.get(STORAGE_KEY_ANALYTICS, {})
        self._window = AnalyticsWindow.from_json(raw)

    @property
    def window(self) -> AnalyticsWindow:
        return self._window

    @property
    def avg_response_time(self) -> int:
        return self._window.avg_response_time

    @property
    def total_searches(self) -> int:
        return self._window.total_searches

    def track(self, search_id: str, response_time_ms: int) -> AnalyticsWindow:
        prev = self._window
        search_times = [*prev.search_times, int(response_time_ms)][-MAX_SAMPLES:]
        recent = [RecentSearch(id=search_id, time=int(response_time_ms)), *prev.recent_searches][:MAX_RECENT]
        self._window = AnalyticsWindow(
            total_searches=prev.total_searches + 1,
            avg_response_time=round_half_up(sum(search_times) / len(search_times)),
            search_times=search_times,
            recent_searches=recent,
        )
        self._store.set(STORAGE_KEY_ANALYTICS, self._window.to_json())
        return self._window
