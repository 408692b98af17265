from __future__ import annotations

import json

import pytest

from nf_metadata.client.analytics import MAX_RECENT, MAX_SAMPLES, AnalyticsTracker, round_half_up
from nf_metadata.client.history import MAX_HISTORY, HistoryTracker
from nf_metadata.client.rate_budget import RateBudget, RateBudgetTracker
from nf_metadata.client.state_store import (
    STORAGE_KEY_ANALYTICS,
    STORAGE_KEY_HISTORY,
    STORAGE_KEY_THEME,
    JsonStateStore,
)
from nf_metadata.client.theme import ThemePreference
from nf_metadata.client.url_state import URLState, get_video_id_from_url, set_video_id_in_url


class _Clock:
    def __init__(self) -> None:
        self.now = 1_000

    def __call__(self) -> int:
        self.now += 1
        return self.now


# --- State store ---


def test_state_store_round_trip_and_defaults(tmp_path) -> None:
    store = JsonStateStore(tmp_path)
    assert store.get("missing", []) == []
    store.set("k", {"a": 1})
    assert store.get("k", {}) == {"a": 1}
    assert not list(tmp_path.glob("*.tmp"))


def test_state_store_corrupt_or_wrong_type_falls_back(tmp_path) -> None:
    (tmp_path / f"{STORAGE_KEY_HISTORY}.json").write_text("{not json", encoding="utf-8")
    (tmp_path / f"{STORAGE_KEY_ANALYTICS}.json").write_text("[1, 2]", encoding="utf-8")
    store = JsonStateStore(tmp_path)

    assert store.get(STORAGE_KEY_HISTORY, []) == []
    assert store.get(STORAGE_KEY_ANALYTICS, {}) == {}


@pytest.mark.parametrize(
    "raw",
    [
        '{"searchTimes": 5}',
        '{"recentSearches": 7}',
        '{"searchTimes": [Infinity, NaN, 40]}',
        '{"totalSearches": NaN}',
        '{"recentSearches": [{"id": "1", "time": Infinity}]}',
    ],
)
def test_analytics_ignores_corrupt_fields(tmp_path, raw: str) -> None:
    (tmp_path / f"{STORAGE_KEY_ANALYTICS}.json").write_text(raw, encoding="utf-8")

    analytics = AnalyticsTracker(JsonStateStore(tmp_path))

    assert analytics.total_searches == 0
    assert all(isinstance(t, int) for t in analytics.window.search_times)
    assert analytics.window.recent_searches == []
    analytics.track("2", 10)
    assert analytics.total_searches == 1


def test_history_skips_entries_with_non_finite_timestamps(tmp_path) -> None:
    (tmp_path / f"{STORAGE_KEY_HISTORY}.json").write_text(
        '[{"id": "1", "title": "t", "timestamp": Infinity}, {"id": "2", "title": "u", "timestamp": NaN},'
        ' {"id": "3", "title": "v", "timestamp": 5}]',
        encoding="utf-8",
    )

    history = HistoryTracker(JsonStateStore(tmp_path))

    assert [e.id for e in history.entries] == ["3"]


def test_state_store_uses_env_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("NF_METADATA_STATE_DIR", str(tmp_path))
    assert JsonStateStore().root == tmp_path


# --- History ---


def test_history_is_newest_first_and_deduplicated(tmp_path) -> None:
    history = HistoryTracker(JsonStateStore(tmp_path), clock=_Clock())
    history.add("1", "One")
    history.add("2", "Two")
    history.add("1", "One again")

    assert [e.id for e in history.entries] == ["1", "2"]
    assert history.entries[0].title == "One again"
    assert history.entries[0].timestamp > history.entries[1].timestamp


def test_history_caps_at_capacity(tmp_path) -> None:
    history = HistoryTracker(JsonStateStore(tmp_path), clock=_Clock())
    for i in range(MAX_HISTORY + 5):
        history.add(str(i), f"Title {i}")

    assert len(history) == MAX_HISTORY
    assert history.entries[0].id == str(MAX_HISTORY + 4)
    assert history.entries[-1].id == "5"


def test_history_persists_and_reloads(tmp_path) -> None:
    store = JsonStateStore(tmp_path)
    HistoryTracker(store, clock=_Clock()).add("7", "Seven")

    raw = json.loads((tmp_path / f"{STORAGE_KEY_HISTORY}.json").read_text(encoding="utf-8"))
    assert raw == [{"id": "7", "title": "Seven", "timestamp": 1001}]
    assert [e.id for e in HistoryTracker(JsonStateStore(tmp_path)).entries] == ["7"]


def test_history_filter_and_clear(tmp_path) -> None:
    history = HistoryTracker(JsonStateStore(tmp_path), clock=_Clock())
    history.add("80100172", "Dark")
    history.add("81040344", "Squid Game")

    assert [e.id for e in history.filter("squid")] == ["81040344"]
    assert [e.id for e in history.filter("8010")] == ["80100172"]
    assert len(history.filter("")) == 2

    history.clear()
    assert history.entries == []
    assert HistoryTracker(JsonStateStore(tmp_path)).entries == []


# --- Analytics ---


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4) == 2


def test_analytics_mean_and_total(tmp_path) -> None:
    analytics = AnalyticsTracker(JsonStateStore(tmp_path))
    analytics.track("1", 100)
    analytics.track("2", 201)

    assert analytics.total_searches == 2
    assert analytics.avg_response_time == 151
    assert [r.id for r in analytics.window.recent_searches] == ["2", "1"]


def test_analytics_window_keeps_last_samples_only(tmp_path) -> None:
    analytics = AnalyticsTracker(JsonStateStore(tmp_path))
    for i in range(MAX_SAMPLES):
        analytics.track(str(i), 1000)
    for i in range(MAX_SAMPLES):
        analytics.track(f"fast-{i}", 10)

    window = analytics.window
    assert len(window.search_times) == MAX_SAMPLES
    assert window.avg_response_time == 10
    assert window.total_searches == 2 * MAX_SAMPLES
    assert len(window.recent_searches) == MAX_RECENT


def test_analytics_reloads_from_store(tmp_path) -> None:
    AnalyticsTracker(JsonStateStore(tmp_path)).track("1", 40)
    reloaded = AnalyticsTracker(JsonStateStore(tmp_path))
    assert reloaded.total_searches == 1
    assert reloaded.avg_response_time == 40


# --- Rate budget ---


def test_rate_budget_defaults_and_low_threshold() -> None:
    tracker = RateBudgetTracker()
    assert tracker.budget == RateBudget(remaining=100, limit=100)
    assert RateBudget(remaining=19, limit=100).is_low is True
    assert RateBudget(remaining=20, limit=100).is_low is False


def test_rate_budget_updates_only_with_both_numeric_headers() -> None:
    tracker = RateBudgetTracker()
    assert tracker.update_from_headers({}) is False
    assert tracker.update_from_headers({"X-RateLimit-Remaining": "5"}) is False
    assert tracker.update_from_headers({"X-RateLimit-Remaining": "x", "X-RateLimit-Limit": "10"}) is False
    assert tracker.budget == RateBudget()

    assert tracker.update_from_headers({"x-ratelimit-remaining": "5", "x-ratelimit-limit": "60"}) is True
    assert tracker.budget == RateBudget(remaining=5, limit=60)


# --- Theme ---


def test_theme_defaults_to_dark_and_toggles(tmp_path) -> None:
    store = JsonStateStore(tmp_path)
    store.set(STORAGE_KEY_THEME, "purple")
    theme = ThemePreference(store)
    assert theme.theme == "dark"
    assert theme.toggle() == "light"
    assert ThemePreference(JsonStateStore(tmp_path)).theme == "light"


# --- URL state ---


def test_url_state_sets_and_removes_param() -> None:
    assert set_video_id_in_url("https://x.example/?tab=a", "123") == "https://x.example/?tab=a&v=123"
    assert set_video_id_in_url("https://x.example/?v=1&tab=a", "") == "https://x.example/?tab=a"
    assert get_video_id_from_url("https://x.example/?tab=a&v=9") == "9"
    assert get_video_id_from_url("https://x.example/") == ""


def test_url_state_initial_id_does_not_follow_updates() -> None:
    state = URLState("https://x.example/?v=5")
    state.set_video_id("6")
    assert state.initial_video_id() == "5"
    assert state.current_video_id() == "6"
