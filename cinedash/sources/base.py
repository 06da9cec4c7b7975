"""
Movie Source SDK
Base interface for anything that can fetch a dashboard category listing.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models.category import Category, TimePeriod
from ..models.movie import MovieSummary


class MovieSource(ABC):
    """
    Contract consumed by the dashboard orchestrator.

    fetch() returns the listing in API order or raises FetchError. It is
    called concurrently for distinct categories, so implementations must
    not share per-call state.
    """
    api_version = 1
    name = "UnnamedSource"
    last_error = ""

    @abstractmethod
    def fetch(self, category: Category, time_period: Optional[TimePeriod] = None) -> List[MovieSummary]:
        """Return the movies listed under a category."""
        raise NotImplementedError

    def reload_from_settings(self) -> None:
        """Optional hook called when settings change."""
        return None

    def healthcheck(self) -> Dict[str, Any]:
        """Optional lightweight health payload for status endpoints."""
        return {
            "name": self.name,
            "ok": not bool(self.last_error),
            "error": self.last_error,
            "api_version": self.api_version,
        }
