"""Edit dialog for one timer: name, time and workspace binding."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)
from tracker.util.misc import format_time


def workspace_label(workspace_id):
    return "No WS" if workspace_id is None else f"WS {workspace_id}"


# Next value of the workspace button: No WS -> 0 -> 1 -> ... -> count-1 -> No WS
def next_workspace(workspace_id, workspace_count):
    nxt = 0 if workspace_id is None else workspace_id + 1
    return None if nxt >= max(1, workspace_count) else nxt


# Enter saves, Escape cancels (QDialog default), Tab moves between the two entries.
class EditTimerDialog(QDialog):

    def __init__(self, parent, timer, elapsed, workspace_count):
        super().__init__(parent)
        self.setWindowTitle("Edit Timer")
        self.setModal(True)

        # Output attributes, read by MainWindow after the dialog is accepted
        self.chosen_name = timer.name
        self._seeded_time = format_time(elapsed)
        self.chosen_time_text = None
        self.chosen_workspace = timer.workspace_id
        self._workspace_count = workspace_count

        outer = QVBoxLayout(self)

        row = QHBoxLayout()
        lbl = QLabel("Name:")
        lbl.setFont(QFont(lbl.font().family(), -1, QFont.Bold))
        self._name = QLineEdit(timer.name)
        self._name.setPlaceholderText("Timer name")
        self._name.setMinimumWidth(220)
        row.addWidget(lbl)
        row.addWidget(self._name, 1)
        outer.addLayout(row)

        row = QHBoxLayout()
        lbl = QLabel("Time:")
        lbl.setFont(QFont(lbl.font().family(), -1, QFont.Bold))
        self._time = QLineEdit(self._seeded_time)
        self._time.setPlaceholderText("hh:mm:ss")
        self._time.setFixedWidth(90)
        self._workspace_btn = QPushButton(workspace_label(self.chosen_workspace))
        self._workspace_btn.setToolTip("Bind this timer to a workspace. It pauses when you leave it and resumes when you come back.")
        self._workspace_btn.setAutoDefault(False)
        self._workspace_btn.clicked.connect(self._cycle_workspace)
        row.addWidget(lbl)
        row.addWidget(self._time)
        row.addStretch()
        row.addWidget(self._workspace_btn)
        outer.addLayout(row)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.setAutoDefault(False)
        cancel_btn.clicked.connect(self.reject)
        save_btn = QPushButton("Save")
        save_btn.setDefault(True)
        save_btn.clicked.connect(self._apply)
        btn_row.addWidget(cancel_btn)
        btn_row.addWidget(save_btn)
        outer.addLayout(btn_row)

        self.setTabOrder(self._name, self._time)
        self._name.setFocus(Qt.OtherFocusReason)
        self._name.selectAll()

    def _cycle_workspace(self):
        self.chosen_workspace = next_workspace(self.chosen_workspace, self._workspace_count)
        self._workspace_btn.setText(workspace_label(self.chosen_workspace))

    # An untouched time field reports None, the displayed value is rounded down to whole seconds.
    def _apply(self):
        self.chosen_name = self._name.text()
        text = self._time.text()
        self.chosen_time_text = None if text.strip() == self._seeded_time else text
        self.accept()
