"""
Dashboard Orchestrator
Fetches every category concurrently and reconciles completions into the store
"""
from typing import Dict, Optional
from concurrent.futures import Future, ThreadPoolExecutor, wait
import threading

from ..models.category import Category, TimePeriod
from ..sources.base import MovieSource
from .category_store import CategoryStore
from .errors import ConfigurationError, DashboardError, FetchError
from .event_bus import EventBus, Events


class DashboardOrchestrator:
    """
    Issues one fetch per category on a thread pool.

    A category already being fetched is never issued twice: re-triggering it
    returns the in-flight future. Failures stay inside the category's slot
    and never escape refresh_all().
    """

    def __init__(
        self,
        store: CategoryStore,
        source: MovieSource,
        event_bus: Optional[EventBus] = None,
        max_workers: int = len(Category),
        trending_periods: Optional[Dict] = None,
    ):
        self.store = store
        self.source = source
        self.event_bus = event_bus
        self._trending_periods = self._normalize_periods(trending_periods or {})
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="cinedash-fetch")
        self._lock = threading.RLock()
        self._in_flight: Dict[Category, Future] = {}

    def refresh_all(self) -> Dict[Category, Future]:
        """Refresh all five categories; returns one future per category"""
        self._emit(Events.REFRESH_STARTED, {"categories": [c.value for c in Category]})
        return {category: self.refresh_category(category) for category in Category}

    def refresh_category(self, category: Category) -> Future:
        """Refresh one category with the same contract as refresh_all()"""
        period = None
        if category.is_trending:
            try:
                period = TimePeriod.parse(self._trending_periods.get(category, category.default_period))
            except ConfigurationError as e:
                # Rejected before issuance; the source is never called.
                self.store.set_error(category, e)
                self._emit(Events.CATEGORY_FAILED, {"category": category, "error": e.message})
                done: Future = Future()
                done.set_result(None)
                return done

        with self._lock:
            existing = self._in_flight.get(category)
            if existing is not None and not existing.done():
                return existing
            self.store.set_loading(category)
            self._emit(Events.CATEGORY_LOADING, {"category": category})
            future = self._executor.submit(self._fetch_into_slot, category, period)
            self._in_flight[category] = future
            return future

    def is_in_flight(self, category: Category) -> bool:
        with self._lock:
            future = self._in_flight.get(category)
            return future is not None and not future.done()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the fetches currently in flight finish; False on timeout"""
        with self._lock:
            pending = [f for f in self._in_flight.values() if not f.done()]
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def set_trending_periods(self, periods: Dict):
        """Change the periods trending categories are fetched with; validated on the next refresh"""
        normalized = self._normalize_periods(periods or {})
        with self._lock:
            self._trending_periods.update(normalized)

    def shutdown(self):
        """Shutdown executor"""
        self._executor.shutdown(wait=False)

    def _fetch_into_slot(self, category: Category, period: Optional[TimePeriod]):
        error: Optional[DashboardError] = None
        items = []
        try:
            items = self.source.fetch(category, period) or []
        except DashboardError as e:
            error = e
        except Exception as e:
            print(f"Fetch error in {category.value}: {e}")
            error = FetchError(str(e))

        # Leave the in-flight table before the outcome is visible, so anyone
        # reacting to it can start a fresh fetch.
        with self._lock:
            self._in_flight.pop(category, None)
            if error is not None:
                self._record_failure(category, error)
            else:
                self.store.set_result(category, items)

    def _record_failure(self, category: Category, error: DashboardError):
        self.store.set_error(category, error)
        self._emit(Events.CATEGORY_FAILED, {"category": category, "error": error.message})

    def _emit(self, event_type: str, data=None):
        if self.event_bus is not None:
            self.event_bus.emit(event_type, data)

    @staticmethod
    def _normalize_periods(raw: Dict) -> Dict[Category, object]:
        out: Dict[Category, object] = {}
        for key, value in raw.items():
            try:
                category = key if isinstance(key, Category) else Category.from_key(str(key))
            except KeyError:
                raise ConfigurationError(f"Unknown category {key!r} in trending periods.")
            if category.is_trending:
                out[category] = value
        return out
