"""Settings store: a typed key-value file with per-key change notification.

Every key has a declared type and default. Getters and setters are typed the
same way a schema-backed settings backend is (string, boolean, string array)
and each write goes straight to disk.
"""

import copy
import itertools
import json
from tracker.common.logger import log
from tracker.common.setup import PATHS


_SCHEMA_VERSION = 1

#region === Schema ===

TIMERS_KEY = "timers"
BACKUP_ENABLED_KEY = "backup-enabled"
BACKUP_PATH_KEY = "backup-path"
BACKUP_FREQUENCY_KEY = "backup-frequency"
BACKUP_FILENAME_FORMAT_KEY = "backup-filename-format"

# key -> (type, default)
SCHEMA = {
    TIMERS_KEY: (list, []),
    BACKUP_ENABLED_KEY: (bool, False),
    BACKUP_PATH_KEY: (str, "~/timers"),
    BACKUP_FREQUENCY_KEY: (str, "1h"),
    BACKUP_FILENAME_FORMAT_KEY: (str, "timers_%Y-%m-%d_%H-%M-%S"),
}

def build_default_settings():
    return {key: copy.deepcopy(default) for key, (_, default) in SCHEMA.items()}

def _valid(key, value):
    kind, _ = SCHEMA[key]
    if kind is list:
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    if kind is bool:
        return isinstance(value, bool)
    return isinstance(value, kind)

#endregion === Schema ===


class Settings:

    def __init__(self, path=None):
        self.path = path or PATHS.settings
        self._values = {}
        self._handlers = {}  # handler id -> (key, callback)
        self._ids = itertools.count(1)
        self.load()

    #region === Loading and Saving ===

    # Loads the settings file, filling defaults for missing or wrongly typed keys. A missing file gives fresh
    # defaults, a broken one falls back to defaults with a warning.
    def load(self):
        values = build_default_settings()
        try:
            if not self.path.exists():
                log.info(f"No settings file found at '{self.path}', using defaults.")
            else:
                with open(self.path, "r", encoding="utf-8") as f:
                    stored = json.load(f)
                if isinstance(stored, dict) and "values" in stored:
                    stored = stored["values"]
                if not isinstance(stored, dict):
                    raise TypeError(f"settings values must be an object, got {type(stored).__name__}")

                defaulted_values = set()
                for key in SCHEMA:
                    if key in stored and _valid(key, stored[key]):
                        values[key] = stored[key]
                    else:
                        defaulted_values.add(key)
                if defaulted_values:
                    log.warning(f"Loaded settings from '{self.path}', but with missing values that were defaulted: {', '.join(sorted(defaulted_values))}")
                else:
                    log.info(f"Successfully loaded settings from '{self.path}'.")
        except (json.JSONDecodeError, OSError, TypeError):
            log.warning(f"Ran into an error while trying to load '{self.path}', falling back to default settings.", exc_info=True)
            values = build_default_settings()
        self._values = values
        return values

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"schema_version": _SCHEMA_VERSION, "values": self._values}, f, indent=2)
        log.debug(f"Saved settings to '{self.path}'")

    #endregion === Loading and Saving ===

    #region === Typed access ===

    def get_string(self, key):
        return self._get(key, str)
    def set_string(self, key, value):
        self._set(key, str, value)

    def get_boolean(self, key):
        return self._get(key, bool)
    def set_boolean(self, key, value):
        self._set(key, bool, value)

    def get_strv(self, key):
        return list(self._get(key, list))
    def set_strv(self, key, value):
        self._set(key, list, list(value))

    def _get(self, key, kind):
        self._check(key, kind)
        return self._values[key]

    # Writes the value, persists, and notifies listeners of that key. Setting the same value is a no-op.
    def _set(self, key, kind, value):
        self._check(key, kind)
        if not _valid(key, value):
            raise TypeError(f"Invalid value for setting '{key}': {value!r}")
        if self._values.get(key) == value:
            return
        self._values[key] = value
        self.save()
        for key_name, callback in list(self._handlers.values()):
            if key_name == key:
                callback(key)

    @staticmethod
    def _check(key, kind):
        if key not in SCHEMA:
            raise KeyError(f"Unknown setting '{key}'")
        if SCHEMA[key][0] is not kind:
            raise TypeError(f"Setting '{key}' is a {SCHEMA[key][0].__name__}, not a {kind.__name__}")

    #endregion === Typed access ===

    #region === Change notification ===

    # Registers `callback(key)` for changes to `key`. Returns a handler id for disconnect().
    def connect(self, key, callback):
        if key not in SCHEMA:
            raise KeyError(f"Unknown setting '{key}'")
        handler_id = next(self._ids)
        self._handlers[handler_id] = (key, callback)
        return handler_id

    def disconnect(self, handler_id):
        self._handlers.pop(handler_id, None)

    #endregion === Change notification ===
