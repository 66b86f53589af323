"""Desktop session events: active workspace changes and screen lock."""

import shutil
import subprocess
from PySide6.QtCore import QObject, QTimer, SLOT, Signal, Slot
from PySide6.QtDBus import QDBusConnection
from tracker.common.logger import log

_SCREENSAVER_SLOT = SLOT("_on_screensaver_active(bool)")

# (service, path, interface) of screensavers that emit ActiveChanged(bool)
_SCREENSAVERS = (
    ("org.freedesktop.ScreenSaver", "/org/freedesktop/ScreenSaver", "org.freedesktop.ScreenSaver"),
    ("org.gnome.ScreenSaver", "/org/gnome/ScreenSaver", "org.gnome.ScreenSaver"),
)


# Reads (current workspace, workspace count) from the X root window through xprop. Returns None when that
# isn't possible (no xprop, Wayland without XWayland props, etc).
def xprop_workspace_probe():
    if shutil.which("xprop") is None:
        return None
    try:
        out = subprocess.run(
            ["xprop", "-root", "_NET_CURRENT_DESKTOP", "_NET_NUMBER_OF_DESKTOPS"],
            capture_output=True, text=True, timeout=0.5, check=True,
        ).stdout
    except (OSError, subprocess.SubprocessError):
        return None
    return parse_xprop_output(out)


# "_NET_CURRENT_DESKTOP(CARDINAL) = 2" style lines -> (current, count), or None without a current desktop.
def parse_xprop_output(out):
    values = {}
    for line in out.splitlines():
        key, _, value = line.partition("=")
        try:
            values[key.split("(")[0].strip()] = int(value.strip())
        except ValueError:
            continue
    if "_NET_CURRENT_DESKTOP" not in values:
        return None
    return values["_NET_CURRENT_DESKTOP"], values.get("_NET_NUMBER_OF_DESKTOPS", 1)


class SessionMonitor(QObject):

    workspace_changed = Signal(int, int)  # from, to
    screen_locked = Signal()

    def __init__(self, parent=None, workspace_probe=xprop_workspace_probe, poll_ms=1000):
        super().__init__(parent)
        self._probe = workspace_probe
        self._poll = QTimer(self)
        self._poll.setInterval(poll_ms)
        self._poll.timeout.connect(self.poll_workspace)
        self._bus_connected = []
        self.current_workspace = None
        self.workspace_count = 1

    def start(self):
        state = self._probe() if self._probe is not None else None
        if state is None:
            log.info("No workspace information available, workspace-bound timers will not auto-pause")
        else:
            self.current_workspace, self.workspace_count = state
            self._poll.start()
            log.info(f"Watching workspaces, currently on {self.current_workspace} of {self.workspace_count}")
        self._connect_screensaver()

    def stop(self):
        self._poll.stop()
        bus = QDBusConnection.sessionBus()
        for service, path, interface in self._bus_connected:
            bus.disconnect(service, path, interface, "ActiveChanged", self, _SCREENSAVER_SLOT)
        self._bus_connected = []

    # One workspace poll. Emits workspace_changed when the active workspace differs from the last one seen.
    @Slot()
    def poll_workspace(self):
        state = self._probe()
        if state is None:
            return
        workspace, self.workspace_count = state
        if workspace == self.current_workspace:
            return
        previous = self.current_workspace
        self.current_workspace = workspace
        log.debug(f"Workspace changed {previous} -> {workspace}")
        self.workspace_changed.emit(-1 if previous is None else previous, workspace)

    def _connect_screensaver(self):
        bus = QDBusConnection.sessionBus()
        if not bus.isConnected():
            log.info("No D-Bus session bus, screen lock will not pause timers")
            return
        for service, path, interface in _SCREENSAVERS:
            if bus.connect(service, path, interface, "ActiveChanged", self, _SCREENSAVER_SLOT):
                self._bus_connected.append((service, path, interface))
        if not self._bus_connected:
            log.warning("Could not subscribe to any screensaver ActiveChanged signal")

    @Slot(bool)
    def _on_screensaver_active(self, active):
        if active:
            log.info("Screen locked")
            self.screen_locked.emit()
