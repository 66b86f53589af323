import math
import time
import uuid
from dataclasses import dataclass, field
from tracker.common.logger import log

DEFAULT_NAME = "<empty>"

# Record keys in the order they are written. The resume timestamp is never persisted.
RECORD_KEYS = ("id", "name", "elapsed", "running", "selected", "workspace_id", "auto_paused")

# Keys written by older versions, accepted when loading old records.
_LEGACY_KEYS = {
    "timeElapsed": "elapsed",
    "workspaceId": "workspace_id",
    "wasRunningBeforePause": "auto_paused",
}


# The clock every timer reads from. Monotonic seconds, so wall-clock changes never touch elapsed time.
def clock():
    return time.monotonic()


def new_timer_id():
    return str(uuid.uuid4())


# This object handles time tracking for a single named timer. All time math takes an explicit `now` from `clock()`
# so a whole tick works off one consistent instant.
@dataclass
class Timer:

    id: str = field(default_factory=new_timer_id)
    name: str = DEFAULT_NAME
    elapsed: float = 0.0
    running: bool = False
    selected: bool = False
    workspace_id: int | None = None
    auto_paused: bool = False
    resumed_at: float | None = field(default=None, repr=False, compare=False)

    # Returns how much time the timer shows at `now`. Clock skew never produces a negative delta.
    def current_elapsed(self, now):
        if self.running and self.resumed_at is not None:
            return self.elapsed + max(0.0, now - self.resumed_at)
        return self.elapsed

    #region === Start, pause, reset ===

    def start(self, now):
        if not self.running:
            self.running = True
            self.resumed_at = now
            self.auto_paused = False
            log.debug(f"Started timer '{self.name}' ({self.id}) at {now}")

    # Folds the running time into elapsed and stops. An automatic pause (workspace switch) is remembered so the
    # timer can be resumed automatically later; a manual one clears that.
    def pause(self, now, auto=False):
        if not self.running:
            return
        self.elapsed = self.current_elapsed(now)
        self.running = False
        self.resumed_at = None
        self.auto_paused = auto
        log.debug(f"Paused timer '{self.name}' ({self.id}) at {now}, auto={auto}, elapsed={self.elapsed:.3f}")

    # Zeroes the timer. A running timer keeps running, counting up from zero again.
    def reset(self, now):
        self.elapsed = 0.0
        self.resumed_at = now if self.running else None
        log.debug(f"Reset timer '{self.name}' ({self.id}) to 0.0, running={self.running}")

    # "Freezes" the running time into elapsed without stopping the timer.
    def freeze(self, now):
        if self.running and self.resumed_at is not None:
            self.elapsed = self.current_elapsed(now)
            self.resumed_at = now

    #endregion === Start, pause, reset ===

    #region === Field edits ===

    def rename(self, name):
        self.name = name

    def set_workspace(self, workspace_id):
        self.workspace_id = workspace_id

    # Manually sets the timer to the given time. A running timer keeps counting from the new value.
    def set_elapsed(self, seconds, now):
        self.elapsed = max(0.0, float(seconds))
        if self.running:
            self.resumed_at = now
        log.debug(f"Manually set timer '{self.name}' ({self.id}) to {self.elapsed} seconds")

    #endregion === Field edits ===

    #region === Records ===

    def to_record(self):
        return {
            "id": self.id,
            "name": self.name,
            "elapsed": self.elapsed,
            "running": self.running,
            "selected": self.selected,
            "workspace_id": self.workspace_id,
            "auto_paused": self.auto_paused,
        }

    # Builds a timer from a decoded record, raising ValueError when the record can't describe a timer. A record
    # without an id gets a fresh one. A running timer is re-anchored at `now`, time spent while the app wasn't
    # running is not counted.
    @classmethod
    def from_record(cls, record, now):
        if not isinstance(record, dict):
            raise ValueError(f"expected an object, got {type(record).__name__}")
        data = dict(record)
        for old, new in _LEGACY_KEYS.items():
            if old in data and new not in data:
                data[new] = data.pop(old)

        timer_id = data.get("id") or new_timer_id()
        if not isinstance(timer_id, str):
            raise ValueError(f"id must be a string, got {timer_id!r}")

        name = data.get("name", DEFAULT_NAME)
        if not isinstance(name, str):
            raise ValueError(f"name must be a string, got {name!r}")

        elapsed = data.get("elapsed", 0.0)
        if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)) or not math.isfinite(elapsed):
            raise ValueError(f"elapsed must be a finite number, got {elapsed!r}")
        if elapsed < 0:
            raise ValueError(f"elapsed must not be negative, got {elapsed!r}")

        workspace_id = data.get("workspace_id")
        if workspace_id is not None and (isinstance(workspace_id, bool) or not isinstance(workspace_id, int)):
            raise ValueError(f"workspace_id must be an integer or null, got {workspace_id!r}")

        running = bool(data.get("running", False))
        return cls(
            id=timer_id,
            name=name,
            elapsed=float(elapsed),
            running=running,
            selected=bool(data.get("selected", False)),
            workspace_id=workspace_id,
            auto_paused=bool(data.get("auto_paused", False)) and not running,
            resumed_at=now if running else None,
        )

    #endregion === Records ===


# Sums what the matching timers show at `now`. No predicate means every timer.
def aggregate(timers, now, predicate=None):
    return sum(t.current_elapsed(now) for t in timers if predicate is None or predicate(t))


def is_selected(timer):
    return timer.selected
