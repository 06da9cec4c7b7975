"""
Settings Manager
Handles persistent application settings in the user's data directory
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
import threading

from .errors import ConfigurationError
from .event_bus import EventBus, Events


class SettingsManager:
    """Manages application settings with persistence"""

    DEFAULT_SETTINGS = {
        # TMDb
        "tmdb_base_url": "https://api.themoviedb.org/3",
        "tmdb_image_base": "https://image.tmdb.org/t/p/w500",
        "tmdb_api_key": "",
        "tmdb_access_token": "",
        "tmdb_language": "en-US",
        "tmdb_region": "",
        "tmdb_request_timeout_seconds": 12.0,
        "tmdb_request_retries": 1,
        "tmdb_retry_backoff_seconds": 0.5,

        # Dashboard
        "dashboard_max_workers": 5,
        "trending_periods": {
            "trending_day": "day",
            "trending_week": "week",
        },

        # Search
        "search_debounce_seconds": 0.3,
    }

    # Environment variables that fill an empty setting.
    ENV_FALLBACKS = {
        "tmdb_api_key": "TMDB_API_KEY",
        "tmdb_access_token": "TMDB_ACCESS_TOKEN",
    }

    def __init__(self, settings_dir: Optional[Path] = None, event_bus: Optional[EventBus] = None):
        if settings_dir is None:
            data_dir = str(os.environ.get("CINEDASH_DATA_DIR", "") or "").strip()
            settings_dir = Path(data_dir).expanduser() if data_dir else (Path.home() / ".cinedash")
        self.settings_dir = Path(settings_dir)
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.settings_dir / "settings.json"
        self.event_bus = event_bus

        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load settings from file"""
        with self._lock:
            self._settings = self._defaults()
            if not self.settings_file.exists():
                return
            try:
                with open(self.settings_file, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
            except (OSError, ValueError) as e:
                print(f"Error loading settings: {e}")
                return
            if not isinstance(loaded, dict):
                print(f"Error loading settings: expected an object in {self.settings_file}")
                return
            # Merge with defaults (adds new keys if they don't exist)
            self._settings.update(loaded)
            default_periods = self.DEFAULT_SETTINGS["trending_periods"]
            loaded_periods = loaded.get("trending_periods")
            if isinstance(loaded_periods, dict):
                self._settings["trending_periods"] = {**default_periods, **loaded_periods}
            else:
                self._settings["trending_periods"] = dict(default_periods)

    def _defaults(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self.DEFAULT_SETTINGS))

    def _save(self):
        """Save settings to file"""
        with self._lock:
            try:
                with open(self.settings_file, "w", encoding="utf-8") as f:
                    json.dump(self._settings, f, indent=2)
            except OSError as e:
                print(f"Error saving settings: {e}")

    def get(self, key: str, default=None) -> Any:
        """Get a setting value"""
        with self._lock:
            value = self._settings.get(key, default)
        env_name = self.ENV_FALLBACKS.get(key)
        if env_name and not value:
            return str(os.environ.get(env_name, "") or "").strip() or value
        return value

    def get_float(self, key: str, minimum: float = 0.0) -> float:
        """Numeric setting; invalid or out-of-range values fall back to the default"""
        default = float(self.DEFAULT_SETTINGS.get(key, 0.0))
        try:
            value = float(self.get(key, default))
        except (TypeError, ValueError):
            return default
        return value if value >= minimum else default

    def get_int(self, key: str, minimum: int = 0) -> int:
        default = int(self.DEFAULT_SETTINGS.get(key, 0))
        try:
            value = int(self.get(key, default))
        except (TypeError, ValueError):
            return default
        return value if value >= minimum else default

    def get_trending_periods(self) -> Dict[str, Any]:
        value = self.get("trending_periods", {})
        if not isinstance(value, dict):
            raise ConfigurationError("trending_periods must be an object mapping category to period.")
        return dict(value)

    def set(self, key: str, value: Any):
        """Set a setting value and save"""
        with self._lock:
            self._settings[str(key)] = value
            self._save()
        self._emit_changed([str(key)])

    def update(self, settings_dict: Dict[str, Any]):
        """Update multiple settings at once"""
        settings_dict = dict(settings_dict or {})
        with self._lock:
            self._settings.update(settings_dict)
            self._save()
        self._emit_changed(list(settings_dict.keys()))

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        with self._lock:
            return dict(self._settings)

    def reset(self):
        """Reset to default settings"""
        with self._lock:
            self._settings = self._defaults()
            self._save()
        self._emit_changed(list(self.DEFAULT_SETTINGS.keys()))

    def _emit_changed(self, keys):
        if self.event_bus is not None:
            self.event_bus.emit(Events.SETTINGS_CHANGED, {"keys": keys})
