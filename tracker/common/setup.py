import os
import sys
from pathlib import Path
from dataclasses import dataclass

APP_DIR_NAME = "TimerTracker"

# Lil helper function to create missing directories if missing, and optionally error out when a path
# doesn't exist.
def ensure_directory(path: Path,must_exist=False):
    if must_exist:
        if not path.exists():
            raise FileNotFoundError(f"Required directory is missing: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Expected a directory, got a file: {path}")
    else:
        path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the per-user base folder for app data. TIMER_TRACKER_HOME always wins (used by tests and portable
# installs), then APPDATA on Windows, then the XDG data dir everywhere else.
def _user_data_root() -> Path:
    override = os.getenv("TIMER_TRACKER_HOME")
    if override:
        return Path(override).expanduser()
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        if not appdata:
            raise RuntimeError("Missing APPDATA environment variable, cannot determine data directories.")
        return Path(appdata) / APP_DIR_NAME
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME.lower()

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    data: Path
    logs: Path
    settings: Path

    @staticmethod
    def build():
        data = ensure_directory(_user_data_root())
        logs = ensure_directory(data / "logs")

        return ProjectPaths(
            data = data,
            logs = logs,
            settings = data / "settings.json",
        )
PATHS = ProjectPaths.build()
