"""
Event Bus - Central event dispatching system
Announces slot, status and search changes to the presentation layer
"""
from typing import Callable, Dict, List
import threading


class EventBus:
    """Thread-safe event bus for component communication"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, callback: Callable):
        """Subscribe to an event type"""
        with self._lock:
            callbacks = self._subscribers.setdefault(event_type, [])
            if callback not in callbacks:
                callbacks.append(callback)

    def unsubscribe(self, event_type: str, callback: Callable):
        """Unsubscribe from an event type"""
        with self._lock:
            callbacks = self._subscribers.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def emit(self, event_type: str, data=None):
        """Emit an event to all subscribers; a failing handler does not stop the others"""
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, []))
        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                print(f"Error in event handler for {event_type}: {e}")

    def clear(self):
        """Clear all subscriptions"""
        with self._lock:
            self._subscribers.clear()


# Event types
class Events:
    # Dashboard events
    REFRESH_STARTED = "refresh_started"
    CATEGORY_LOADING = "category_loading"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_FAILED = "category_failed"
    STATUS_CHANGED = "status_changed"

    # Search events
    SEARCH_PENDING = "search_pending"
    SEARCH_SETTLED = "search_settled"
    SEARCH_CLEARED = "search_cleared"

    # Settings events
    SETTINGS_CHANGED = "settings_changed"
