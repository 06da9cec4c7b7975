import threading
import time
import unittest

from cinedash.core.category_store import CategoryStore
from cinedash.core.event_bus import EventBus, Events
from cinedash.core.search_controller import SearchController, SearchState
from cinedash.core.search_index import SearchIndex
from cinedash.models.category import Category
from cinedash.models.movie import MovieSummary


class FakeScheduler:
    """Manual clock in milliseconds driving FakeTimer instances."""

    def __init__(self):
        self.now_ms = 0
        self.timers = []

    def timer(self, interval, function, args=()):
        return FakeTimer(self, interval, function, args)

    def advance(self, ms):
        target = self.now_ms + ms
        while True:
            due = [t for t in self.timers if t.armed and t.due_ms <= target]
            if not due:
                break
            current = min(due, key=lambda t: t.due_ms)
            self.now_ms = current.due_ms
            current.fire()
        self.now_ms = target


class FakeTimer:
    def __init__(self, scheduler, interval, function, args):
        self.scheduler = scheduler
        self.interval_ms = int(round(interval * 1000))
        self.function = function
        self.args = args
        self.daemon = False
        self.due_ms = None
        self.armed = False
        self.cancelled = False

    def start(self):
        self.due_ms = self.scheduler.now_ms + self.interval_ms
        self.armed = True
        self.scheduler.timers.append(self)

    def cancel(self):
        self.cancelled = True
        self.armed = False

    def fire(self):
        self.armed = False
        self.function(*self.args)


class RecordingIndex(SearchIndex):
    def __init__(self, store, scheduler=None):
        super().__init__(store)
        self.scheduler = scheduler
        self.searches = []

    def search(self, query):
        self.searches.append((self.scheduler.now_ms if self.scheduler else None, query))
        return super().search(query)


def movie(movie_id, title):
    return MovieSummary(id=str(movie_id), title=title)


class TestSearchController(unittest.TestCase):
    def setUp(self):
        self.store = CategoryStore()
        self.store.set_result(Category.NOW_PLAYING, [movie(1, "abc"), movie(2, "abacus")])
        self.scheduler = FakeScheduler()
        self.index = RecordingIndex(self.store, self.scheduler)
        self.bus = EventBus()
        self.controller = SearchController(
            self.index,
            event_bus=self.bus,
            debounce_seconds=0.3,
            timer_factory=self.scheduler.timer,
        )

    def test_starts_idle(self):
        self.assertEqual(self.controller.state, SearchState.IDLE)
        self.assertEqual(self.controller.filtered_results, ())
        self.assertFalse(self.controller.no_results)
        self.assertFalse(self.controller.is_searching)

    def test_burst_of_keystrokes_runs_one_search_for_last_value(self):
        self.controller.set_query("a")
        self.scheduler.advance(100)
        self.controller.set_query("ab")
        self.scheduler.advance(100)
        self.controller.set_query("abc")
        self.assertEqual(self.controller.state, SearchState.PENDING)

        self.scheduler.advance(299)
        self.assertEqual(self.index.searches, [])
        self.scheduler.advance(1)

        self.assertEqual(self.index.searches, [(500, "abc")])
        self.assertEqual(self.controller.state, SearchState.SETTLED)
        self.assertEqual([m.id for m in self.controller.filtered_results], ["1"])

    def test_quiet_gap_longer_than_window_settles_intermediate_query(self):
        self.controller.set_query("a")
        self.scheduler.advance(100)
        self.controller.set_query("ab")
        self.scheduler.advance(400)
        self.controller.set_query("abc")
        self.scheduler.advance(1000)

        self.assertEqual(self.index.searches, [(400, "ab"), (800, "abc")])
        self.assertEqual(self.controller.query, "abc")

    def test_new_keystroke_cancels_armed_timer(self):
        self.controller.set_query("ab")
        first = self.scheduler.timers[-1]
        self.controller.set_query("abc")
        self.assertTrue(first.cancelled)
        self.assertFalse(self.scheduler.timers[-1].cancelled)

    def test_cancel_keeps_unsearched_query_pending(self):
        self.controller.set_query("abc")
        self.scheduler.advance(300)
        self.controller.set_query("abcd")
        pending = self.scheduler.timers[-1]

        self.controller.cancel()
        self.scheduler.advance(1000)

        self.assertTrue(pending.cancelled)
        self.assertEqual(self.controller.state, SearchState.PENDING)
        self.assertFalse(self.controller.no_results)
        self.assertEqual([q for _, q in self.index.searches], ["abc"])

    def test_stale_timer_callback_is_ignored(self):
        self.controller.set_query("ab")
        stale = self.scheduler.timers[-1]
        self.controller.set_query("zzz")
        stale.function(*stale.args)
        self.assertEqual(self.index.searches, [])
        self.assertEqual(self.controller.state, SearchState.PENDING)

    def test_clearing_is_immediate(self):
        cleared = []
        self.bus.subscribe(Events.SEARCH_CLEARED, cleared.append)
        self.controller.set_query("ab")
        self.scheduler.advance(300)
        self.assertEqual(len(self.controller.filtered_results), 2)

        self.controller.set_query("abc")
        pending = self.scheduler.timers[-1]
        self.controller.set_query("")

        self.assertTrue(pending.cancelled)
        self.assertEqual(self.controller.state, SearchState.IDLE)
        self.assertEqual(self.controller.filtered_results, ())
        self.assertFalse(self.controller.no_results)
        self.assertEqual(len(cleared), 1)
        self.scheduler.advance(1000)
        self.assertEqual(self.index.searches, [(300, "ab")])

    def test_previous_results_stand_while_pending(self):
        self.controller.set_query("abc")
        self.scheduler.advance(300)
        self.controller.set_query("abcd")
        self.assertEqual(self.controller.state, SearchState.PENDING)
        self.assertEqual([m.id for m in self.controller.filtered_results], ["1"])
        self.assertFalse(self.controller.no_results)

        self.scheduler.advance(300)
        self.assertEqual(self.controller.filtered_results, ())
        self.assertTrue(self.controller.no_results)

    def test_search_overtaken_by_keystroke_is_not_published(self):
        controller = self.controller

        class InterruptingIndex(RecordingIndex):
            def search(inner, query):
                result = RecordingIndex.search(inner, query)
                if len(inner.searches) == 1:
                    controller.set_query("abacus")
                return result

        index = InterruptingIndex(self.store, self.scheduler)
        controller.index = index
        controller.set_query("abc")
        self.scheduler.advance(300)

        self.assertEqual(controller.filtered_results, ())
        self.assertEqual(controller.state, SearchState.PENDING)
        self.scheduler.advance(300)
        self.assertEqual([m.id for m in controller.filtered_results], ["2"])
        self.assertEqual([q for _, q in index.searches], ["abc", "abacus"])

    def test_settled_event_reports_no_results(self):
        settled = []
        self.bus.subscribe(Events.SEARCH_SETTLED, settled.append)
        self.controller.set_query("nothing-here")
        self.scheduler.advance(300)
        self.assertEqual(settled, [{"query": "nothing-here", "count": 0, "no_results": True}])
        self.assertTrue(self.controller.no_results)

    def test_snapshot_shape(self):
        self.controller.set_query("abc")
        self.scheduler.advance(300)
        snap = self.controller.snapshot()
        self.assertEqual(snap["query"], "abc")
        self.assertEqual(snap["state"], "settled")
        self.assertEqual([r["id"] for r in snap["results"]], ["1"])
        self.assertFalse(snap["noResults"])


class TestSearchControllerRealTimer(unittest.TestCase):
    def test_threading_timer_debounces(self):
        store = CategoryStore()
        store.set_result(Category.TOP_RATED, [movie(1, "Dune"), movie(2, "Dunkirk")])
        index = RecordingIndex(store)
        bus = EventBus()
        settled = threading.Event()
        bus.subscribe(Events.SEARCH_SETTLED, lambda d: settled.set())
        controller = SearchController(index, event_bus=bus, debounce_seconds=0.2)

        for text in ["d", "du", "dun", "dune"]:
            controller.set_query(text)
            time.sleep(0.005)

        self.assertTrue(settled.wait(timeout=2))
        self.assertEqual([q for _, q in index.searches], ["dune"])
        self.assertEqual([m.id for m in controller.filtered_results], ["1"])


if __name__ == "__main__":
    unittest.main()
