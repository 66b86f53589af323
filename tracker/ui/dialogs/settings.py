"""Preferences dialog for the automatic CSV backup."""

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices, QFont
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)
from tracker.core import config
from tracker.core.backup import BackupError, format_backup_filename, parse_frequency, resolve_backup_dir
from tracker.common.logger import log

# Opens from the gear button in the main window. Values are written to Settings on Apply, which in turn
# reschedules the backup tick through its change listeners.
class PreferencesDialog(QDialog):

    def __init__(self, parent, settings):
        super().__init__(parent)
        self.setWindowTitle("Tracker Backup")
        self.setModal(True)
        self._settings = settings

        outer = QVBoxLayout(self)
        title = QLabel("Automatic Backup Settings")
        title.setFont(QFont(title.font().family(), 13, QFont.Bold))
        outer.addWidget(title)
        outer.addWidget(self._helper("Configure automatic timer backups"))

        self._enabled = QCheckBox("Enable Automatic Backup")
        self._enabled.setToolTip("Automatically save timers at configured intervals")
        self._enabled.setChecked(settings.get_boolean(config.BACKUP_ENABLED_KEY))
        outer.addWidget(self._enabled)
        outer.addWidget(self._helper("Automatically save timers at configured intervals"))

        self._path = self._entry(outer, "Backup Path:", settings.get_string(config.BACKUP_PATH_KEY),
                                 "Directory where backup files will be saved (e.g., ~/timers)")
        self._frequency = self._entry(outer, "Backup Frequency:", settings.get_string(config.BACKUP_FREQUENCY_KEY),
                                      "How often to perform backups (e.g., 1h, 30m, 24h)")
        self._filename = self._entry(outer, "Filename Format:", settings.get_string(config.BACKUP_FILENAME_FORMAT_KEY),
                                     "Timestamp placeholders: %Y, %m, %d, %H, %M, %S")

        self._preview = self._helper("")
        outer.addWidget(self._preview)
        for entry in (self._frequency, self._filename):
            entry.textChanged.connect(self._refresh_preview)

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setFrameShadow(QFrame.Sunken)
        outer.addWidget(sep)

        btn_row = QHBoxLayout()
        folder_btn = QPushButton("Open Backup Folder")
        folder_btn.setAutoDefault(False)
        folder_btn.clicked.connect(self._open_folder)
        btn_row.addWidget(folder_btn)
        btn_row.addStretch()
        apply_btn = QPushButton("Apply")
        apply_btn.setDefault(True)
        apply_btn.clicked.connect(self._apply)
        btn_row.addWidget(apply_btn)
        outer.addLayout(btn_row)

        self._refresh_preview()

    @staticmethod
    def _helper(text):
        lbl = QLabel(text)
        lbl.setWordWrap(True)
        lbl.setStyleSheet("color: #888888;")
        return lbl

    def _entry(self, outer, label, value, helper):
        row = QHBoxLayout()
        lbl = QLabel(label)
        lbl.setFont(QFont(lbl.font().family(), -1, QFont.Bold))
        lbl.setToolTip(helper)
        entry = QLineEdit(value)
        entry.setMinimumWidth(240)
        entry.setToolTip(helper)
        row.addWidget(lbl)
        row.addWidget(entry, 1)
        outer.addLayout(row)
        outer.addWidget(self._helper(helper))
        return entry

    def _refresh_preview(self):
        seconds = parse_frequency(self._frequency.text().strip())
        if seconds <= 0:
            self._preview.setText("Frequency not recognised, scheduled backups will not run.")
            return
        name = format_backup_filename(self._filename.text())
        self._preview.setText(f"Next file would be named: {name}")

    def _open_folder(self):
        try:
            directory = resolve_backup_dir(self._path.text())
        except BackupError:
            log.warning("Could not open backup folder", exc_info=True)
            return
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(directory)))

    # Path/format first so that a newly enabled or rescheduled backup already uses them.
    def _apply(self):
        self._settings.set_string(config.BACKUP_PATH_KEY, self._path.text().strip())
        self._settings.set_string(config.BACKUP_FILENAME_FORMAT_KEY, self._filename.text())
        self._settings.set_string(config.BACKUP_FREQUENCY_KEY, self._frequency.text().strip())
        self._settings.set_boolean(config.BACKUP_ENABLED_KEY, self._enabled.isChecked())
        log.info("Applied backup preferences")
        self.accept()
