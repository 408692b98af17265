"""
Search orchestrator: sequences single and batch lookups against the gateway.

State per cycle is `idle -> loading -> success | error`. Starting a new lookup
resets result and error immediately. Each lookup takes a generation number and
its response is applied only while that generation is still the latest, so a
superseded response never overwrites newer state. In-flight requests are not
aborted.

Batch lookups are issued one at a time, so at most one upstream call is
outstanding per orchestrator.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from nf_metadata.client.analytics import AnalyticsTracker, round_half_up
from nf_metadata.client.gateway_client import GatewayRequestError, MetadataGateway
from nf_metadata.client.history import HistoryEntry, HistoryTracker
from nf_metadata.client.rate_budget import RateBudgetTracker
from nf_metadata.client.state_store import JsonStateStore
from nf_metadata.client.url_state import URLState
from nf_metadata.models.entity import MetadataEntity, first_entity

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 4

ERROR_FETCH_FAILED = "Failed to fetch metadata"
ERROR_NOT_FOUND = "No content found for this Video ID"
ERROR_BATCH_NOT_FOUND = "No content found for any of the provided IDs"


class SearchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SearchState:
    status: SearchStatus = SearchStatus.IDLE
    video_id: str = ""
    result: MetadataEntity | None = None
    raw: Mapping[str, Any] | None = None
    comparison: tuple[MetadataEntity, ...] = ()
    error: str | None = None
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status is SearchStatus.LOADING


StateListener = Callable[[SearchState], None]


def parse_search_input(text: str, *, batch_mode: bool = False) -> list[str]:
    """
    Split search box input into ids.

    A comma (or batch mode) means a comma-separated list; blank items are dropped.
    """
    trimmed = text.strip()
    if not trimmed:
        return []
    if batch_mode or "," in trimmed:
        return [part.strip() for part in trimmed.split(",") if part.strip()]
    return [trimmed]


class SearchOrchestrator:
    def __init__(
        self,
        gateway: MetadataGateway,
        *,
        history: HistoryTracker,
        analytics: AnalyticsTracker,
        rate_budget: RateBudgetTracker | None = None,
        url_state: URLState | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._gateway = gateway
        self.history = history
        self.analytics = analytics
        self.rate_budget = rate_budget or RateBudgetTracker()
        self.url_state = url_state or URLState()
        self._clock = clock
        self._generation = 0
        self._state = SearchState()
        self._listeners: dict[str, StateListener] = {}
        self._listener_counter = 0

    @classmethod
    def from_state_dir(
        cls,
        gateway: MetadataGateway,
        state_dir: str | None = None,
        *,
        url: str = "",
    ) -> SearchOrchestrator:
        store = JsonStateStore(state_dir)
        return cls(
            gateway,
            history=HistoryTracker(store),
            analytics=AnalyticsTracker(store),
            url_state=URLState(url),
        )

    @property
    def state(self) -> SearchState:
        return self._state

    # --- Listeners ---

    def subscribe(self, callback: StateListener) -> str:
        self._listener_counter += 1
        listener_id = f"listener_{self._listener_counter}"
        self._listeners[listener_id] = callback
        return listener_id

    def unsubscribe(self, listener_id: str) -> None:
        self._listeners.pop(listener_id, None)

    @contextmanager
    def listening(self, callback: StateListener) -> Iterator[str]:
        """Register `callback` for state changes for the duration of the block."""
        listener_id = self.subscribe(callback)
        try:
            yield listener_id
        finally:
            self.unsubscribe(listener_id)

    # --- Lookups ---

    def start(self) -> SearchState:
        """Run the initial lookup when the starting URL carries an id."""
        initial = self.url_state.initial_video_id()
        if initial:
            return self.search(initial)
        return self._state

    def submit(self, text: str, *, batch_mode: bool = False) -> SearchState:
        ids = parse_search_input(text, batch_mode=batch_mode)
        if not ids:
            return self._state
        if batch_mode or "," in text:
            return self.batch_search(ids)
        return self.search(ids[0])

    def search(self, video_id: str) -> SearchState:
        generation = self._begin(video_id)
        self.url_state.set_video_id(video_id)
        started = self._clock()

        try:
            response = self._gateway.lookup(video_id)
        except GatewayRequestError as exc:
            return self._fail(generation, str(exc) or ERROR_FETCH_FAILED)

        if not self._is_current(generation):
            logger.debug(f"Discarding stale response for {video_id} (generation {generation})")
            return self._state

        self.rate_budget.update_from_headers(response.headers)

        if not response.ok:
            return self._fail(generation, response.error_message or ERROR_FETCH_FAILED)

        entity = first_entity(response.payload)
        if entity is None:
            return self._fail(generation, ERROR_NOT_FOUND)

        self.history.add(video_id, entity.title)
        self.analytics.track(video_id, self._elapsed_ms(started))

        return self._publish(
            replace(
                self._state,
                status=SearchStatus.SUCCESS,
                result=entity,
                raw=response.payload,
            )
        )

    def batch_search(self, ids: Sequence[str]) -> SearchState:
        """
        Look up at most `MAX_BATCH_SIZE` ids one after another for comparison.

        Items that fail or come back empty are skipped; the batch fails only when
        none resolve. One analytics sample covers the whole pass.
        """
        ids = list(ids)
        generation = self._begin(self._state.video_id)
        started = self._clock()
        entities: list[MetadataEntity] = []

        for video_id in ids[:MAX_BATCH_SIZE]:
            try:
                response = self._gateway.lookup(video_id)
            except GatewayRequestError as exc:
                logger.info(f"Batch lookup for {video_id} failed: {exc}")
                response = None
            if not self._is_current(generation):
                logger.debug(f"Batch superseded after {video_id}; stopping")
                return self._state
            if response is None:
                continue
            self.rate_budget.update_from_headers(response.headers)
            entity = first_entity(response.payload) if response.ok else None
            if entity is not None:
                entities.append(entity)

        if not self._is_current(generation):
            return self._state

        if not entities:
            return self._fail(generation, ERROR_BATCH_NOT_FOUND)

        self.analytics.track(",".join(ids), self._elapsed_ms(started))

        return self._publish(
            replace(
                self._state,
                status=SearchStatus.SUCCESS,
                comparison=tuple(entities),
            )
        )

    def escape(self) -> SearchState:
        """Drop any pending response when it arrives; the request itself keeps running."""
        if self._state.is_loading:
            self._generation += 1
            return self._publish(replace(self._state, status=SearchStatus.IDLE, generation=self._generation))
        return self._state

    def clear(self) -> SearchState:
        self._generation += 1
        self.url_state.set_video_id("")
        return self._publish(SearchState(generation=self._generation))

    # --- History ---

    def filter_history(self, query: str) -> list[HistoryEntry]:
        return self.history.filter(query)

    def clear_history(self) -> None:
        self.history.clear()

    # --- Internals ---

    def _begin(self, video_id: str) -> int:
        self._generation += 1
        self._publish(
            SearchState(
                status=SearchStatus.LOADING,
                video_id=video_id,
                generation=self._generation,
            )
        )
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _fail(self, generation: int, message: str) -> SearchState:
        if not self._is_current(generation):
            return self._state
        return self._publish(replace(self._state, status=SearchStatus.ERROR, error=message))

    def _elapsed_ms(self, started: float) -> int:
        return round_half_up((self._clock() - started) * 1000)

    def _publish(self, state: SearchState) -> SearchState:
        self._state = state
        for listener_id, callback in list(self._listeners.items()):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Error in state listener {listener_id}: {e}")
        return state
