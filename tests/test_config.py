"""Tests for the typed settings store.

Covers: tracker.core.config
"""

import json
import tempfile
import unittest
from pathlib import Path


class TestSettings(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "settings.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_gives_defaults(self):
        from tracker.core import config
        s = config.Settings(self.path)
        self.assertFalse(s.get_boolean(config.BACKUP_ENABLED_KEY))
        self.assertEqual(s.get_string(config.BACKUP_PATH_KEY), "~/timers")
        self.assertEqual(s.get_string(config.BACKUP_FREQUENCY_KEY), "1h")
        self.assertEqual(s.get_string(config.BACKUP_FILENAME_FORMAT_KEY), "timers_%Y-%m-%d_%H-%M-%S")
        self.assertEqual(s.get_strv(config.TIMERS_KEY), [])
        self.assertFalse(self.path.exists())

    def test_values_persist(self):
        from tracker.core import config
        s = config.Settings(self.path)
        s.set_boolean(config.BACKUP_ENABLED_KEY, True)
        s.set_string(config.BACKUP_FREQUENCY_KEY, "30m")
        s.set_strv(config.TIMERS_KEY, ['{"id": "a"}'])

        on_disk = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(on_disk["schema_version"], 1)
        self.assertTrue(on_disk["values"][config.BACKUP_ENABLED_KEY])

        reloaded = config.Settings(self.path)
        self.assertTrue(reloaded.get_boolean(config.BACKUP_ENABLED_KEY))
        self.assertEqual(reloaded.get_string(config.BACKUP_FREQUENCY_KEY), "30m")
        self.assertEqual(reloaded.get_strv(config.TIMERS_KEY), ['{"id": "a"}'])

    def test_corrupt_file_falls_back_to_defaults(self):
        from tracker.core import config
        self.path.write_text("{ this is not json", encoding="utf-8")
        with self.assertLogs("timertracker", level="WARNING"):
            s = config.Settings(self.path)
        self.assertEqual(s.get_string(config.BACKUP_FREQUENCY_KEY), "1h")

    def test_flat_file_and_wrong_types_defaulted(self):
        from tracker.core import config
        self.path.write_text(json.dumps({
            config.BACKUP_ENABLED_KEY: "yes",
            config.BACKUP_PATH_KEY: "/tmp/elsewhere",
        }), encoding="utf-8")
        with self.assertLogs("timertracker", level="WARNING"):
            s = config.Settings(self.path)
        self.assertFalse(s.get_boolean(config.BACKUP_ENABLED_KEY))
        self.assertEqual(s.get_string(config.BACKUP_PATH_KEY), "/tmp/elsewhere")

    def test_type_checks(self):
        from tracker.core import config
        s = config.Settings(self.path)
        with self.assertRaises(KeyError):
            s.get_string("no-such-key")
        with self.assertRaises(TypeError):
            s.get_string(config.BACKUP_ENABLED_KEY)
        with self.assertRaises(TypeError):
            s.set_string(config.BACKUP_PATH_KEY, 5)
        with self.assertRaises(TypeError):
            s.set_strv(config.TIMERS_KEY, [1, 2])

    def test_get_strv_returns_copy(self):
        from tracker.core import config
        s = config.Settings(self.path)
        s.get_strv(config.TIMERS_KEY).append("leak")
        self.assertEqual(s.get_strv(config.TIMERS_KEY), [])

    def test_change_notification(self):
        from tracker.core import config
        s = config.Settings(self.path)
        seen = []
        handler_id = s.connect(config.BACKUP_FREQUENCY_KEY, seen.append)

        s.set_string(config.BACKUP_FREQUENCY_KEY, "2h")
        s.set_string(config.BACKUP_FREQUENCY_KEY, "2h")  # unchanged, no notification
        s.set_string(config.BACKUP_PATH_KEY, "~/other")  # other key
        self.assertEqual(seen, [config.BACKUP_FREQUENCY_KEY])

        s.disconnect(handler_id)
        s.set_string(config.BACKUP_FREQUENCY_KEY, "3h")
        self.assertEqual(len(seen), 1)

    def test_connect_unknown_key(self):
        from tracker.core import config
        s = config.Settings(self.path)
        with self.assertRaises(KeyError):
            s.connect("nope", lambda key: None)


if __name__ == "__main__":
    unittest.main()
