"""Named recurring ticks on the Qt event loop.

Every tick is a QTimer owned by the Scheduler under a name, so each one has an
explicit removal path and ``clear()`` tears all of them down at once.
"""

from PySide6.QtCore import QObject, QTimer
from tracker.common.logger import log

TICK_SECONDS = 1
SAVE_SECONDS = 30
# QTimer intervals are a signed 32-bit count of milliseconds.
MAX_TICK_SECONDS = (2**31 - 1) // 1000


class Scheduler(QObject):

    def __init__(self, parent=None):
        super().__init__(parent)
        self._timers = {}  # name -> QTimer

    # Registers (or replaces) a repeating tick under `name` that calls `callback` every `seconds`.
    def add(self, name, seconds, callback):
        if not 0 < seconds <= MAX_TICK_SECONDS:
            raise ValueError(f"Tick '{name}' needs an interval between 0 and {MAX_TICK_SECONDS}s, got {seconds}")
        self.remove(name)
        timer = QTimer(self)
        timer.setInterval(int(seconds * 1000))
        timer.timeout.connect(lambda n=name, cb=callback: self._fire(n, cb))
        timer.start()
        self._timers[name] = timer
        log.debug(f"Scheduled tick '{name}' every {seconds}s")
        return timer

    def remove(self, name):
        timer = self._timers.pop(name, None)
        if timer is None:
            return False
        timer.stop()
        timer.deleteLater()
        log.debug(f"Removed tick '{name}'")
        return True

    def clear(self):
        for name in list(self._timers):
            self.remove(name)

    def is_active(self, name):
        timer = self._timers.get(name)
        return timer is not None and timer.isActive()

    # Interval in seconds, or None when nothing is registered under that name.
    def interval(self, name):
        timer = self._timers.get(name)
        return None if timer is None else timer.interval() / 1000

    def names(self):
        return sorted(self._timers)

    # Runs one tick. A failing callback is logged and the tick keeps firing.
    def _fire(self, name, callback):
        try:
            callback()
        except Exception:
            log.exception(f"Tick '{name}' raised, it will fire again on schedule")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.clear()
        return False
