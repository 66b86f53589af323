import sys
from PySide6.QtCore import Qt, QTimer, QUrl
from PySide6.QtGui import QDesktopServices, QIcon
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStyle,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)
from tracker.common.logger import log
from tracker.core import config
from tracker.core.backup import BackupError, BackupScheduler, export_csv
from tracker.core.scheduler import SAVE_SECONDS, TICK_SECONDS, Scheduler
from tracker.core.store import TimerStore
from tracker.ui.dialogs.edit_timer import EditTimerDialog
from tracker.ui.dialogs.settings import PreferencesDialog
from tracker.ui.session import SessionMonitor
from tracker.ui.theme import GLYPHS, build_stylesheet
from tracker.ui.widgets import build_footer, build_separator, build_timer_row, play_glyph, row_state
from tracker.util.misc import format_time


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of the tracker. Shows the panel total, one row per timer and the footer actions. Timer state lives
# in the TimerStore; this window only keeps a timer id -> widgets map for display.
class MainWindow(QMainWindow):

    def __init__(self, settings=None, session=None):
        super().__init__()
        self.setWindowTitle("Timer Tracker")
        self.setWindowIcon(self._app_icon())

        # -- Load state --
        self.settings = settings or config.Settings()
        self.store = TimerStore.from_records(self.settings.get_strv(config.TIMERS_KEY))

        self._widgets = {}        # timer id -> widget dict
        self._last_export_path = None

        # -- Build UI skeleton --
        central = QWidget()
        central.setObjectName("central")
        self.setCentralWidget(central)
        self._main_lay = QVBoxLayout(central)
        self._main_lay.setContentsMargins(8, 8, 8, 8)
        self._main_lay.setSpacing(4)

        self._panel_label = QLabel("00:00:00")
        self._panel_label.setObjectName("panelLabel")
        self._panel_label.setAlignment(Qt.AlignCenter)
        self._main_lay.addWidget(self._panel_label)

        self._rows_widget = QWidget()
        self._rows = QVBoxLayout(self._rows_widget)
        self._rows.setContentsMargins(0, 0, 0, 0)
        self._rows.setSpacing(2)
        self._main_lay.addWidget(self._rows_widget)

        self._main_lay.addWidget(build_separator())
        footer, self._footer = build_footer(
            self.store.total_selected,
            on_total_toggle=self._on_total_toggle,
            on_export=self._on_export,
            on_backup=self._on_backup_now,
            on_pause_all=self._on_pause_all,
            on_reset_all=self._on_reset_all,
            on_add=self._on_add,
            on_settings=self._on_settings,
        )
        self._main_lay.addWidget(footer)

        self.setStyleSheet(build_stylesheet())
        self._rebuild_rows()

        # -- Tray (panel label + notifications) --
        self._tray = self._build_tray()

        # -- Session events --
        self.session = session or SessionMonitor(self)
        self.session.workspace_changed.connect(self._on_workspace_changed)
        self.session.screen_locked.connect(self._on_screen_locked)
        self.session.start()
        # Timers restored as running may be bound to a workspace we're not on
        if self.session.current_workspace is not None:
            self.store.on_workspace_changed(self.session.current_workspace)
            self._update_all_rows()

        # -- Ticks --
        self.scheduler = Scheduler(self)
        self.scheduler.add("tick", TICK_SECONDS, self._tick)
        self.scheduler.add("save", SAVE_SECONDS, self._save_timers)
        self.backup = BackupScheduler(
            self.settings, self.scheduler, lambda: self.store.timers,
            on_backup=lambda path: self._notify("Tracker Backup", f"Backup saved to: {path}", path),
        )
        self.backup.start()

        self._refresh_totals()
        QTimer.singleShot(0, self.adjustSize)

    @staticmethod
    def _app_icon():
        icon = QIcon.fromTheme("alarm-symbolic", QIcon.fromTheme("chronometer"))
        if icon.isNull():
            icon = QApplication.style().standardIcon(QStyle.SP_BrowserReload)
        return icon

    # ------------------------------------------------------------------ #
    #  Rows                                                                #
    # ------------------------------------------------------------------ #

    def _rebuild_rows(self):
        """Tear down and recreate every timer row."""
        self._widgets.clear()
        while self._rows.count():
            item = self._rows.takeAt(0)
            w = item.widget()
            if w:
                w.hide()
                w.deleteLater()

        if not self.store.timers:
            lbl = QLabel("No timers. Add one to begin!")
            lbl.setAlignment(Qt.AlignCenter)
            self._rows.addWidget(lbl)
            return

        now = self.store.now()
        for timer in self.store.timers:
            row, wd = build_timer_row(
                timer, now,
                on_select=self._on_select,
                on_toggle=self._on_toggle,
                on_reset=self._on_reset,
                on_edit=self._on_edit,
                on_delete=self._on_delete,
            )
            self._widgets[timer.id] = wd
            self._rows.addWidget(row)

    # Repaints the running state of one row (play glyph + state property for the stylesheet).
    def _update_row_state(self, timer_id):
        w = self._widgets.get(timer_id)
        if w is None:
            return
        timer = self.store.get(timer_id)
        w["play"].setText(play_glyph(timer))
        w["select"].setText(GLYPHS["selected"] if timer.selected else GLYPHS["unselected"])
        w["name"].setText(timer.name)
        badge = w["workspace"]
        badge.setText("" if timer.workspace_id is None else str(timer.workspace_id))
        badge.setVisible(timer.workspace_id is not None)
        row = w["row"]
        row.setProperty("state", row_state(timer))
        row.style().unpolish(row)
        row.style().polish(row)
        self._update_display(timer_id)

    def _update_display(self, timer_id, now=None):
        w = self._widgets.get(timer_id)
        if w is not None:
            timer = self.store.get(timer_id)
            w["time"].setText(format_time(timer.current_elapsed(self.store.now() if now is None else now)))

    def _update_all_rows(self):
        for tid in list(self._widgets):
            self._update_row_state(tid)

    def _refresh_totals(self, now=None):
        now = self.store.now() if now is None else now
        self._footer["total_label"].setText(f"Total: {format_time(self.store.total(now))}")
        panel = format_time(self.store.display_total(now))
        self._panel_label.setText(panel)
        self._footer["total_btn"].setText(
            GLYPHS["selected"] if self.store.total_selected else GLYPHS["unselected"])
        if self._tray is not None:
            self._tray.setToolTip(f"Timer Tracker: {panel}")

    # ------------------------------------------------------------------ #
    #  Row handlers                                                        #
    # ------------------------------------------------------------------ #

    def _on_select(self, timer_id):
        self.store.toggle_selected(timer_id)
        self._update_row_state(timer_id)
        self._refresh_totals()
        self._save_timers()

    def _on_toggle(self, timer_id):
        self.store.toggle(timer_id)
        self._update_row_state(timer_id)
        self._refresh_totals()
        self._save_timers()

    def _on_reset(self, timer_id):
        self.store.reset(timer_id)
        self._update_display(timer_id)
        self._refresh_totals()
        self._save_timers()

    def _on_edit(self, timer_id):
        timer = self.store.get(timer_id)
        # Cancelling leaves the timer untouched; store.edit pauses it once the edit is accepted.
        dlg = EditTimerDialog(self, timer, timer.current_elapsed(self.store.now()), self.session.workspace_count)
        if dlg.exec() != QDialog.Accepted:
            return
        self.store.edit(timer_id, dlg.chosen_name, dlg.chosen_time_text, dlg.chosen_workspace)
        self._update_row_state(timer_id)
        self._refresh_totals()
        self._save_timers()
        QTimer.singleShot(0, self.adjustSize)

    def _on_delete(self, timer_id):
        self.store.remove(timer_id)
        self._rebuild_rows()
        self._refresh_totals()
        self._save_timers()
        QTimer.singleShot(0, self.adjustSize)

    # ------------------------------------------------------------------ #
    #  Footer handlers                                                     #
    # ------------------------------------------------------------------ #

    def _on_total_toggle(self):
        self.store.toggle_total_selected()
        self._update_all_rows()
        self._refresh_totals()
        self._save_timers()

    def _on_add(self):
        self.store.add()
        self._rebuild_rows()
        self._refresh_totals()
        self._save_timers()
        QTimer.singleShot(0, self.adjustSize)

    def _on_pause_all(self):
        self.store.pause_all()
        self._update_all_rows()
        self._refresh_totals()
        self._save_timers()

    def _on_reset_all(self):
        if QMessageBox.question(
                self, "Confirm", "Reset all times to zero?"
        ) != QMessageBox.Yes:
            return
        self.store.reset_all()
        self._update_all_rows()
        self._refresh_totals()
        self._save_timers()

    def _on_export(self):
        try:
            path = export_csv(self.store.timers, self.store.now())
        except (BackupError, OSError) as e:
            log.warning("CSV export failed", exc_info=True)
            self._notify("Tracker", f"Failed to export CSV: {e}", warning=True)
            return
        self._notify("Tracker", f"CSV exported to: {path}", path)

    def _on_backup_now(self):
        if self.backup.perform_backup(notify=True) is None:
            self._notify("Tracker Backup", "Backup failed, see the log for details.", warning=True)

    def _on_settings(self):
        PreferencesDialog(self, self.settings).exec()

    # ------------------------------------------------------------------ #
    #  Session events                                                      #
    # ------------------------------------------------------------------ #

    def _on_workspace_changed(self, previous, workspace):
        changed = self.store.on_workspace_changed(workspace)
        for tid in changed:
            self._update_row_state(tid)
        self._refresh_totals()
        self._save_timers()

    def _on_screen_locked(self):
        for tid in self.store.on_screen_locked():
            self._update_row_state(tid)
        self._refresh_totals()
        self._save_timers()

    # ------------------------------------------------------------------ #
    #  Tray / notifications                                                #
    # ------------------------------------------------------------------ #

    def _build_tray(self):
        if not QSystemTrayIcon.isSystemTrayAvailable():
            log.warning("System tray unavailable, notifications will not be shown")
            return None
        tray = QSystemTrayIcon(self.windowIcon(), self)
        tray.activated.connect(self._on_tray_activated)
        tray.messageClicked.connect(self._on_message_clicked)
        tray.show()
        return tray

    def _on_tray_activated(self, reason):
        if reason in (QSystemTrayIcon.Trigger, QSystemTrayIcon.DoubleClick):
            if self.isVisible():
                self.hide()
            else:
                self.show()
                self.raise_()
                self.activateWindow()

    # Shows a tray message. When it refers to a file, clicking it opens the containing folder.
    def _notify(self, title, body, path=None, warning=False):
        log.info(f"{title}: {body}")
        self._last_export_path = path
        if self._tray is None:
            return
        icon = QSystemTrayIcon.Warning if warning else QSystemTrayIcon.Information
        self._tray.showMessage(title, body, icon, 5000)

    def _on_message_clicked(self):
        if self._last_export_path is None:
            return
        folder = QUrl.fromLocalFile(str(self._last_export_path.parent))
        if not QDesktopServices.openUrl(folder):
            log.warning(f"Could not open folder '{self._last_export_path.parent}'")

    # ------------------------------------------------------------------ #
    #  Tick / persistence                                                  #
    # ------------------------------------------------------------------ #

    def _tick(self):
        now = self.store.now()
        for timer in self.store.timers:
            if timer.running:
                self._update_display(timer.id, now)
        self._refresh_totals(now)

    def _save_timers(self):
        self.settings.set_strv(config.TIMERS_KEY, self.store.to_records())

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        self.scheduler.clear()
        self.backup.stop()
        self.session.stop()
        try:
            self.store.pause_all()
            self._save_timers()
        except OSError as e:
            log.exception("Failed to save timers on exit")
            QMessageBox.warning(self, "Save Error", f"Failed to save timers:\n{e}")
        if self._tray is not None:
            self._tray.hide()
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    app.setApplicationName("Timer Tracker")
    window = MainWindow()
    window.show()
    sys.exit(app.exec())
