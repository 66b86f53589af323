import os
import re
from pathlib import Path
from tracker.common.logger import log
from tracker.core import config
from tracker.core.scheduler import MAX_TICK_SECONDS
from tracker.core.timer import clock
from tracker.util.misc import format_time, now_local

BACKUP_TICK = "backup"
EXPORT_FILENAME_FORMAT = "timers_%Y-%m-%d_%H-%M-%S"

_FREQUENCY = re.compile(r"([0-9]+)([mh])")
_UNIT_SECONDS = {"m": 60, "h": 3600}
_PLACEHOLDERS = ("%Y", "%m", "%d", "%H", "%M", "%S")


class BackupError(RuntimeError):
    pass

#region === Helpers ===

# Turns a frequency like "30m" or "2h" into seconds. Anything else is 0, which disables scheduled backups.
def parse_frequency(text):
    match = _FREQUENCY.fullmatch(text or "")
    if not match:
        return 0
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]

# Builds the CSV text for the given timers: a Name,Time header and one row per timer, with the name always
# quoted and the time at `now` as HH:MM:SS.
def generate_csv(timers, now=None):
    now = clock() if now is None else now
    lines = ["Name,Time\n"]
    for t in timers:
        name = t.name.replace('"', '""')
        lines.append(f'"{name}",{format_time(t.current_elapsed(now))}\n')
    return "".join(lines)

# Substitutes only the %Y %m %d %H %M %S placeholders from `when`, other % sequences are left as typed.
def format_backup_filename(template, when=None):
    when = when or now_local()
    formatted = template
    for placeholder in _PLACEHOLDERS:
        formatted = formatted.replace(placeholder, when.strftime(placeholder))
    if not formatted.endswith(".csv"):
        formatted += ".csv"
    return formatted

# Expands ~ and makes sure the directory exists.
def resolve_backup_dir(path):
    if not path or not str(path).strip():
        raise BackupError("No backup path configured")
    directory = Path(os.path.expanduser(str(path).strip()))
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BackupError(f"Could not create backup directory '{directory}': {e}") from e
    if not directory.is_dir():
        raise BackupError(f"Backup path '{directory}' is not a directory")
    return directory

def _write(target_path, text):
    with open(target_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

#endregion === Helpers ===

#region === Writing ===

# Writes a CSV snapshot of the timers into `directory` under the templated filename, replacing an existing file.
def write_backup(timers, directory, template, now=None, when=None):
    target_path = resolve_backup_dir(directory) / format_backup_filename(template, when)
    _write(target_path, generate_csv(timers, now))
    log.info(f"Wrote backup of {len(timers)} timers to '{target_path}'")
    return target_path

# Manual "download CSV": timers_<timestamp>.csv in the home folder (or the given directory).
def export_csv(timers, now=None, directory=None, when=None):
    directory = Path(directory) if directory is not None else Path.home()
    return write_backup(timers, directory, EXPORT_FILENAME_FORMAT, now, when)

#endregion === Writing ===


# Runs the periodic CSV backup from the backup-* settings. Starts, stops and reschedules itself when those
# settings change.
class BackupScheduler:

    def __init__(self, settings, scheduler, timers_provider, clock_fn=clock, on_backup=None):
        self._settings = settings
        self._scheduler = scheduler
        self._timers_provider = timers_provider
        self._clock = clock_fn
        self._on_backup = on_backup
        self._handler_ids = []

    @property
    def active(self):
        return self._scheduler.is_active(BACKUP_TICK)

    # Hooks up settings listeners and schedules the tick if backups are enabled.
    def start(self):
        if not self._handler_ids:
            self._handler_ids = [
                self._settings.connect(config.BACKUP_ENABLED_KEY, self._on_enabled_changed),
                self._settings.connect(config.BACKUP_FREQUENCY_KEY, self._on_frequency_changed),
            ]
        if self._settings.get_boolean(config.BACKUP_ENABLED_KEY):
            self._schedule()

    def stop(self):
        self._unschedule()
        for handler_id in self._handler_ids:
            self._settings.disconnect(handler_id)
        self._handler_ids = []

    def _schedule(self):
        self._unschedule()
        frequency = self._settings.get_string(config.BACKUP_FREQUENCY_KEY)
        seconds = parse_frequency(frequency)
        if seconds <= 0:
            log.warning(f"Backup frequency {frequency!r} is not valid (expected e.g. 30m or 2h), scheduled backups are disabled")
            return
        if seconds > MAX_TICK_SECONDS:
            log.warning(f"Backup frequency {frequency!r} is too long to schedule, scheduled backups are disabled")
            return
        self._scheduler.add(BACKUP_TICK, seconds, lambda: self.perform_backup(notify=False))
        log.info(f"Scheduled backups every {seconds}s ({frequency})")

    def _unschedule(self):
        self._scheduler.remove(BACKUP_TICK)

    def _on_enabled_changed(self, _key):
        if self._settings.get_boolean(config.BACKUP_ENABLED_KEY):
            self._schedule()
        else:
            self._unschedule()
            log.info("Scheduled backups disabled")

    def _on_frequency_changed(self, _key):
        if self._settings.get_boolean(config.BACKUP_ENABLED_KEY):
            self._schedule()

    # Writes one backup with the current path and filename settings. Failures are logged and swallowed so
    # the next scheduled tick still runs. Manual runs (notify=True) report the path through on_backup.
    def perform_backup(self, notify=True):
        try:
            target_path = write_backup(
                list(self._timers_provider()),
                self._settings.get_string(config.BACKUP_PATH_KEY),
                self._settings.get_string(config.BACKUP_FILENAME_FORMAT_KEY),
                now=self._clock(),
            )
        except (BackupError, OSError):
            log.warning("Backup failed", exc_info=True)
            return None
        if notify and self._on_backup is not None:
            self._on_backup(target_path)
        return target_path
