"""Runtime bootstrap for the Cinedash web API."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.category_store import CategoryStore
from ..core.dashboard import DashboardOrchestrator
from ..core.errors import ConfigurationError
from ..core.event_bus import EventBus, Events
from ..core.search_controller import SearchController
from ..core.search_index import SearchIndex
from ..core.settings_manager import SettingsManager
from ..sources.base import MovieSource
from ..sources.tmdb import TMDbSource


@dataclass
class CinedashRuntime:
    """Shared service graph used by web endpoints."""

    settings: SettingsManager
    event_bus: EventBus
    source: MovieSource
    store: CategoryStore
    orchestrator: DashboardOrchestrator
    index: SearchIndex
    search: SearchController

    def shutdown(self) -> None:
        self.search.cancel()
        self.orchestrator.shutdown()


def build_runtime(
    settings_dir: Optional[Path] = None,
    source: Optional[MovieSource] = None,
) -> CinedashRuntime:
    """Create and wire core services."""

    event_bus = EventBus()
    settings = SettingsManager(settings_dir=settings_dir, event_bus=event_bus)
    source = source or TMDbSource(settings)
    store = CategoryStore(event_bus)
    max_workers = settings.get_int("dashboard_max_workers", minimum=1)
    try:
        orchestrator = DashboardOrchestrator(
            store,
            source,
            event_bus=event_bus,
            max_workers=max_workers,
            trending_periods=settings.get_trending_periods(),
        )
    except ConfigurationError as e:
        print(f"Ignoring trending_periods setting: {e}")
        orchestrator = DashboardOrchestrator(store, source, event_bus=event_bus, max_workers=max_workers)
    index = SearchIndex(store)
    search = SearchController(
        index,
        event_bus=event_bus,
        debounce_seconds=settings.get_float("search_debounce_seconds"),
    )

    def _on_settings_changed(data) -> None:
        keys = set((data or {}).get("keys") or [])
        if any(key.startswith("tmdb_") for key in keys):
            source.reload_from_settings()
        if "search_debounce_seconds" in keys:
            search.debounce_seconds = settings.get_float("search_debounce_seconds")
        if "trending_periods" in keys:
            orchestrator.set_trending_periods(settings.get_trending_periods())

    event_bus.subscribe(Events.SETTINGS_CHANGED, _on_settings_changed)

    return CinedashRuntime(
        settings=settings,
        event_bus=event_bus,
        source=source,
        store=store,
        orchestrator=orchestrator,
        index=index,
        search=search,
    )
