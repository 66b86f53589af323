"""Timer collection plus the named commands the UI dispatches into it.

Nothing in here knows about Qt. Commands mutate the store and return; the
caller decides when to persist (the window saves after every command and a
30 s tick saves as a safety net).
"""

import json
from tracker.common.logger import log
from tracker.core.timer import Timer, aggregate, clock, is_selected
from tracker.util.misc import parse_time_input

SETTINGS_ID = "settings"

#region === Records ===

# Parses persisted record strings into (timers, total_selected). The sentinel settings record carries the
# aggregate display mode; every other record is a timer. A bad record is skipped with a warning, never fatal.
def load_timers(records, now=None):
    now = clock() if now is None else now
    timers = []
    total_selected = True
    skipped = 0

    for index, raw in enumerate(records or []):
        try:
            item = json.loads(raw)
        except (TypeError, ValueError):
            log.warning(f"Skipping persisted timer record #{index}, it is not valid JSON: {raw!r}")
            skipped += 1
            continue

        if isinstance(item, dict) and item.get("id") == SETTINGS_ID:
            flag = item.get("total_selected", item.get("totalTimeSelected", True))
            total_selected = flag if isinstance(flag, bool) else True
            continue

        try:
            timers.append(Timer.from_record(item, now))
        except ValueError as e:
            log.warning(f"Skipping malformed timer record #{index}: {e}")
            skipped += 1

    log.info(f"Loaded {len(timers)} timers from {len(records or [])} records ({skipped} skipped), total_selected={total_selected}")
    return timers, total_selected

# Serializes timers (in order) followed by the settings sentinel.
def save_timers(timers, total_selected):
    records = [json.dumps(t.to_record()) for t in timers]
    records.append(json.dumps({"id": SETTINGS_ID, "total_selected": bool(total_selected)}))
    return records

#endregion === Records ===


class TimerStore:

    def __init__(self, timers=None, total_selected=True, clock_fn=clock):
        self.timers = list(timers or [])
        self.total_selected = total_selected
        self._clock = clock_fn

    @classmethod
    def from_records(cls, records, clock_fn=clock):
        timers, total_selected = load_timers(records, clock_fn())
        return cls(timers, total_selected, clock_fn)

    # Freezes running timers first so the persisted elapsed is current, then serializes.
    def to_records(self, now=None):
        now = self.now() if now is None else now
        for t in self.timers:
            t.freeze(now)
        return save_timers(self.timers, self.total_selected)

    def now(self):
        return self._clock()

    def get(self, timer_id):
        for t in self.timers:
            if t.id == timer_id:
                return t
        raise KeyError(timer_id)

    def __iter__(self):
        return iter(self.timers)

    def __len__(self):
        return len(self.timers)

    #region === Commands ===

    def add(self, name=None):
        timer = Timer() if name is None else Timer(name=name)
        self.timers.append(timer)
        log.info(f"Added timer '{timer.name}' ({timer.id})")
        return timer

    def remove(self, timer_id):
        timer = self.get(timer_id)
        self.timers.remove(timer)
        log.info(f"Removed timer '{timer.name}' ({timer.id})")
        return timer

    def start(self, timer_id, now=None):
        self.get(timer_id).start(self._at(now))

    def pause(self, timer_id, now=None):
        self.get(timer_id).pause(self._at(now))

    # Play/pause button. Returns the new running state.
    def toggle(self, timer_id, now=None):
        timer = self.get(timer_id)
        if timer.running:
            timer.pause(self._at(now))
        else:
            timer.start(self._at(now))
        return timer.running

    def reset(self, timer_id, now=None):
        self.get(timer_id).reset(self._at(now))

    def reset_all(self, now=None):
        now = self._at(now)
        for t in self.timers:
            t.reset(now)
        log.info(f"Reset all {len(self.timers)} timers")

    def pause_all(self, now=None):
        now = self._at(now)
        paused = [t.id for t in self.timers if t.running]
        for t in self.timers:
            t.pause(now)
        if paused:
            log.info(f"Paused {len(paused)} running timers")
        return paused

    def rename(self, timer_id, name):
        self.get(timer_id).rename(name)

    def set_workspace(self, timer_id, workspace_id):
        self.get(timer_id).set_workspace(workspace_id)

    def set_elapsed(self, timer_id, seconds, now=None):
        self.get(timer_id).set_elapsed(seconds, self._at(now))

    # Applies the edit dialog: a running timer is paused first, then name, time and workspace are written.
    # Time text that doesn't parse is ignored and the timer keeps its previous value. None means the time
    # field wasn't touched, so the elapsed time (fractional seconds included) is kept as is.
    def edit(self, timer_id, name, time_text, workspace_id, now=None):
        now = self._at(now)
        timer = self.get(timer_id)
        timer.pause(now)
        timer.rename(name)
        if time_text is not None:
            seconds = parse_time_input(time_text)
            if seconds is not None:
                timer.set_elapsed(seconds, now)
            else:
                log.debug(f"Ignoring unparseable time input {time_text!r} for timer '{timer.name}'")
        timer.set_workspace(workspace_id)
        return timer

    # Selecting a timer switches the panel to "selected" mode. Deselecting the last one switches back to total.
    def toggle_selected(self, timer_id):
        timer = self.get(timer_id)
        timer.selected = not timer.selected
        if timer.selected:
            self.total_selected = False
        elif not any(t.selected for t in self.timers):
            self.total_selected = True
        return timer.selected

    # Switching to total mode clears every individual selection.
    def toggle_total_selected(self):
        self.total_selected = not self.total_selected
        if self.total_selected:
            for t in self.timers:
                t.selected = False
        return self.total_selected

    #endregion === Commands ===

    #region === Aggregates ===

    def total(self, now=None):
        return aggregate(self.timers, self._at(now))

    # Value for the panel label. With nothing selected in selected-mode, the store falls back to total mode.
    def display_total(self, now=None):
        now = self._at(now)
        if not self.total_selected:
            if any(t.selected for t in self.timers):
                return aggregate(self.timers, now, is_selected)
            self.total_selected = True
        return aggregate(self.timers, now)

    #endregion === Aggregates ===

    #region === Session events ===

    # Timers bound to another workspace are auto-paused, timers bound to the new one that were auto-paused are
    # resumed. Unbound timers are never touched. Returns the ids whose running state changed.
    def on_workspace_changed(self, workspace_id, now=None):
        now = self._at(now)
        changed = []
        for t in self.timers:
            if t.workspace_id is None:
                continue
            if t.workspace_id != workspace_id:
                if t.running:
                    t.pause(now, auto=True)
                    changed.append(t.id)
            elif t.auto_paused:
                t.start(now)
                changed.append(t.id)
        log.info(f"Workspace changed to {workspace_id}, {len(changed)} timers switched")
        return changed

    # Locking the screen pauses everything, as if the user did it.
    def on_screen_locked(self, now=None):
        paused = self.pause_all(now)
        log.info(f"Screen locked, paused {len(paused)} timers")
        return paused

    #endregion === Session events ===

    def _at(self, now):
        return self._clock() if now is None else now
