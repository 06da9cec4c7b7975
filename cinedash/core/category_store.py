"""
Category Store
Latest listing, loading flag and error for each dashboard category
"""
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple
import threading
import time

from ..models.category import Category
from ..models.movie import MovieSummary
from .errors import DashboardError
from .event_bus import EventBus, Events


@dataclass(frozen=True)
class CategorySlot:
    """Immutable snapshot of one category's state"""
    category: Category
    items: Tuple[MovieSummary, ...] = ()
    is_loading: bool = False
    last_error: Optional[DashboardError] = None
    # Orders errors across slots; 0 means no error was ever recorded here.
    error_seq: int = 0
    updated_at: float = 0.0

    @property
    def error_message(self) -> Optional[str]:
        return self.last_error.message if self.last_error is not None else None

    def to_dict(self, image_base: Optional[str] = None) -> Dict:
        return {
            "category": self.category.value,
            "label": self.category.label,
            "items": [item.to_dict(image_base) for item in self.items],
            "isLoading": self.is_loading,
            "error": self.error_message,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class AggregateStatus:
    any_loading: bool = False
    latest_error: Optional[str] = None
    loading: Tuple[Category, ...] = ()

    @property
    def has_error(self) -> bool:
        return self.latest_error is not None

    def to_dict(self) -> Dict:
        return {
            "anyLoading": self.any_loading,
            "hasError": self.has_error,
            "latestError": self.latest_error,
            "loading": [category.value for category in self.loading],
        }


class _SlotCell:
    """Holds the current snapshot of one slot plus the lock serializing its writes"""

    def __init__(self, category: Category):
        self.lock = threading.Lock()
        self.slot = CategorySlot(category=category)
        # Snapshots waiting to be announced, in write order.
        self.outbox = deque()
        self.emit_lock = threading.Lock()


class CategoryStore:
    """
    One slot per category, created up front and never removed.

    Writers take the lock of the slot they address, so unrelated categories
    never wait on each other. Readers get the current immutable snapshot
    without locking.
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self._cells: Dict[Category, _SlotCell] = {category: _SlotCell(category) for category in Category}
        self._seq_lock = threading.Lock()
        self._error_seq = 0

    def get(self, category: Category) -> CategorySlot:
        """Read-only snapshot of a slot"""
        return self._cells[category].slot

    def snapshot(self) -> Dict[Category, CategorySlot]:
        """Snapshots of every slot in category order"""
        return {category: cell.slot for category, cell in self._cells.items()}

    def set_loading(self, category: Category):
        """Mark a slot as refreshing; stale items and error stay visible"""
        self._mutate(category, is_loading=True)

    def set_result(self, category: Category, items: Iterable[MovieSummary]):
        """Store a successful fetch and clear the slot's error"""
        self._mutate(category, items=tuple(items), is_loading=False, last_error=None)

    def set_error(self, category: Category, error: DashboardError):
        """Record a failed fetch; previously fetched items survive"""
        self._mutate(category, is_loading=False, last_error=error, error_seq=self._next_error_seq())

    def aggregate_status(self) -> AggregateStatus:
        """Recompute the any-loading flag and the most recent error across slots"""
        slots = list(self.snapshot().values())
        loading = tuple(slot.category for slot in slots if slot.is_loading)
        failed = [slot for slot in slots if slot.last_error is not None]
        latest = max(failed, key=lambda slot: slot.error_seq) if failed else None
        return AggregateStatus(
            any_loading=bool(loading),
            latest_error=latest.error_message if latest else None,
            loading=loading,
        )

    def _next_error_seq(self) -> int:
        with self._seq_lock:
            self._error_seq += 1
            return self._error_seq

    def _mutate(self, category: Category, **changes):
        cell = self._cells[category]
        with cell.lock:
            # Swap in a whole new snapshot so readers never see a half-applied change.
            cell.slot = replace(cell.slot, updated_at=time.time(), **changes)
            if self.event_bus is not None:
                cell.outbox.append(cell.slot)
        if self.event_bus is not None:
            self._drain(cell)

    def _drain(self, cell: _SlotCell):
        """
        Announce queued snapshots of one slot in the order they were written.

        Whoever holds emit_lock delivers everything queued, including writes
        made by other threads or by subscribers while it was emitting. No slot
        lock is held while handlers run.
        """
        while cell.outbox:
            if not cell.emit_lock.acquire(blocking=False):
                return
            try:
                while cell.outbox:
                    slot = cell.outbox.popleft()
                    self.event_bus.emit(Events.CATEGORY_UPDATED, {"category": slot.category, "slot": slot})
                    self.event_bus.emit(Events.STATUS_CHANGED, self.aggregate_status())
            finally:
                cell.emit_lock.release()
