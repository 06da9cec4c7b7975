import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from cinedash.core.errors import ConfigurationError
from cinedash.core.event_bus import EventBus, Events
from cinedash.core.settings_manager import SettingsManager


class TestSettingsManager(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults_without_file(self):
        settings = SettingsManager(self.dir)
        self.assertEqual(settings.get("tmdb_language"), "en-US")
        self.assertEqual(settings.get_float("search_debounce_seconds"), 0.3)
        self.assertEqual(settings.get_int("dashboard_max_workers", minimum=1), 5)
        self.assertEqual(settings.get_trending_periods(), {"trending_day": "day", "trending_week": "week"})

    def test_values_persist_across_instances(self):
        SettingsManager(self.dir).update({"tmdb_region": "GB", "search_debounce_seconds": 0.5})
        reloaded = SettingsManager(self.dir)
        self.assertEqual(reloaded.get("tmdb_region"), "GB")
        self.assertEqual(reloaded.get_float("search_debounce_seconds"), 0.5)
        on_disk = json.loads((self.dir / "settings.json").read_text(encoding="utf-8"))
        self.assertEqual(on_disk["tmdb_region"], "GB")

    def test_trending_periods_merge_over_defaults(self):
        (self.dir / "settings.json").write_text(
            json.dumps({"trending_periods": {"trending_day": "week"}}), encoding="utf-8"
        )
        settings = SettingsManager(self.dir)
        self.assertEqual(settings.get_trending_periods(), {"trending_day": "week", "trending_week": "week"})

    def test_non_object_trending_periods_is_a_configuration_error(self):
        settings = SettingsManager(self.dir)
        settings.set("trending_periods", "day")
        with self.assertRaises(ConfigurationError):
            settings.get_trending_periods()

    def test_corrupt_file_falls_back_to_defaults(self):
        (self.dir / "settings.json").write_text("{not json", encoding="utf-8")
        with patch("builtins.print") as printed:
            settings = SettingsManager(self.dir)
        self.assertEqual(settings.get("tmdb_base_url"), "https://api.themoviedb.org/3")
        printed.assert_called_once()

    def test_environment_fills_empty_credentials(self):
        settings = SettingsManager(self.dir)
        with patch.dict("os.environ", {"TMDB_API_KEY": " envkey "}):
            self.assertEqual(settings.get("tmdb_api_key"), "envkey")
            settings.set("tmdb_api_key", "stored")
            self.assertEqual(settings.get("tmdb_api_key"), "stored")

    def test_invalid_numbers_fall_back_to_defaults(self):
        settings = SettingsManager(self.dir)
        settings.update({"search_debounce_seconds": "soon", "dashboard_max_workers": 0})
        self.assertEqual(settings.get_float("search_debounce_seconds"), 0.3)
        self.assertEqual(settings.get_int("dashboard_max_workers", minimum=1), 5)

    def test_changes_are_published(self):
        bus = EventBus()
        changes = []
        bus.subscribe(Events.SETTINGS_CHANGED, changes.append)
        settings = SettingsManager(self.dir, event_bus=bus)

        settings.set("tmdb_language", "fr-FR")
        settings.update({"tmdb_region": "FR", "tmdb_request_retries": 2})
        settings.reset()

        self.assertEqual(changes[0], {"keys": ["tmdb_language"]})
        self.assertEqual(sorted(changes[1]["keys"]), ["tmdb_region", "tmdb_request_retries"])
        self.assertIn("trending_periods", changes[2]["keys"])
        self.assertEqual(settings.get("tmdb_language"), "en-US")

    def test_data_dir_from_environment(self):
        target = self.dir / "nested" / "data"
        with patch.dict("os.environ", {"CINEDASH_DATA_DIR": str(target)}):
            settings = SettingsManager()
        self.assertEqual(settings.settings_dir, target)
        self.assertTrue(target.is_dir())


if __name__ == "__main__":
    unittest.main()
