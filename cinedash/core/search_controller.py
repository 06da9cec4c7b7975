"""
Search Controller
Debounces query-text changes and publishes the filtered result set
"""
from enum import Enum
from typing import Callable, Optional, Tuple
import threading

from ..models.movie import MovieSummary
from .event_bus import EventBus, Events
from .search_index import SearchIndex


class SearchState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"


class SearchController:
    """
    State machine over the latest query text.

    Every non-empty keystroke cancels the armed timer and arms a new one;
    only the timer of the latest keystroke may run a search. Clearing the
    query clears the results immediately, without waiting for a timer.
    """

    DEFAULT_DEBOUNCE_SECONDS = 0.3

    def __init__(
        self,
        index: SearchIndex,
        event_bus: Optional[EventBus] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        timer_factory: Callable = threading.Timer,
    ):
        self.index = index
        self.event_bus = event_bus
        self.debounce_seconds = max(0.0, float(debounce_seconds))
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._query = ""
        self._state = SearchState.IDLE
        self._results: Tuple[MovieSummary, ...] = ()
        self._generation = 0
        self._timer = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def filtered_results(self) -> Tuple[MovieSummary, ...]:
        return self._results

    @property
    def no_results(self) -> bool:
        with self._lock:
            return self._state is SearchState.SETTLED and bool(self._query) and not self._results

    @property
    def is_searching(self) -> bool:
        return bool(self._query)

    def set_query(self, text: str):
        """Feed a new query-text value from the input"""
        text = text or ""
        with self._lock:
            self._generation += 1
            self._cancel_timer()
            self._query = text
            if not text:
                self._state = SearchState.IDLE
                self._results = ()
                event, payload = Events.SEARCH_CLEARED, {"query": ""}
            else:
                self._state = SearchState.PENDING
                generation = self._generation
                timer = self._timer_factory(self.debounce_seconds, self._fire, args=(generation,))
                timer.daemon = True
                self._timer = timer
                timer.start()
                event, payload = Events.SEARCH_PENDING, {"query": text}
        self._emit(event, payload)

    def clear(self):
        self.set_query("")

    def cancel(self):
        """
        Drop any armed timer without touching the published results.

        A pending query stays pending: it was never searched, so it has
        nothing to settle on.
        """
        with self._lock:
            self._generation += 1
            self._cancel_timer()

    def snapshot(self, image_base: Optional[str] = None) -> dict:
        with self._lock:
            return {
                "query": self._query,
                "state": self._state.value,
                "results": [movie.to_dict(image_base) for movie in self._results],
                "noResults": self.no_results,
            }

    def _fire(self, generation: int):
        with self._lock:
            if generation != self._generation:
                return
            query = self._query
            self._timer = None
        results = self.index.search(query)
        with self._lock:
            # A keystroke arrived while searching; its own timer will publish.
            if generation != self._generation:
                return
            self._results = results
            self._state = SearchState.SETTLED
        self._emit(Events.SEARCH_SETTLED, {
            "query": query,
            "count": len(results),
            "no_results": not results,
        })

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _emit(self, event_type: str, data=None):
        if self.event_bus is not None:
            self.event_bus.emit(event_type, data)
