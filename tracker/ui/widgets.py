"""Row widget builders for timer rows and the footer.

Each builder returns a (container, widget_dict) tuple. The widget_dict maps
logical names to sub-widgets so the window can update them later without the
timer records ever holding widget references.
"""

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QWidget,
)
from tracker.ui.theme import GLYPHS
from tracker.util.misc import format_time


def _button(glyph, tooltip, on_click):
    btn = QPushButton(GLYPHS[glyph])
    btn.setToolTip(tooltip)
    btn.setCursor(Qt.PointingHandCursor)
    btn.setFocusPolicy(Qt.NoFocus)
    btn.clicked.connect(on_click)
    return btn


def row_state(timer):
    if timer.running:
        return "running"
    if timer.auto_paused:
        return "auto_paused"
    return "paused"


def play_glyph(timer):
    if timer.running:
        return GLYPHS["pause"]
    if timer.auto_paused:
        return GLYPHS["auto_paused"]
    return GLYPHS["play"]


class _ClickableContainer(QWidget):
    """Name/time area; clicking it toggles the timer like the play button."""

    def __init__(self, on_click):
        super().__init__()
        self._on_click = on_click
        self.setCursor(Qt.PointingHandCursor)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._on_click()
            event.accept()
            return
        super().mousePressEvent(event)


def build_timer_row(timer, now, on_select, on_toggle, on_reset, on_edit, on_delete):
    tid = timer.id
    row = QWidget()
    row.setObjectName("timerRow")
    row.setAttribute(Qt.WA_StyledBackground, True)
    lay = QHBoxLayout(row)
    lay.setContentsMargins(4, 2, 4, 2)
    lay.setSpacing(4)

    select_btn = _button("selected" if timer.selected else "unselected",
                         "Include in the panel total", lambda: on_select(tid))
    lay.addWidget(select_btn)

    labels = _ClickableContainer(lambda: on_toggle(tid))
    labels_lay = QHBoxLayout(labels)
    labels_lay.setContentsMargins(0, 0, 0, 0)
    name = QLabel(timer.name)
    name.setObjectName("timerName")
    time_lbl = QLabel(format_time(timer.current_elapsed(now)))
    time_lbl.setObjectName("timerTime")
    time_lbl.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
    badge = QLabel("" if timer.workspace_id is None else str(timer.workspace_id))
    badge.setObjectName("workspaceBadge")
    badge.setToolTip("Workspace this timer is bound to")
    badge.setVisible(timer.workspace_id is not None)
    labels_lay.addWidget(name, 1)
    labels_lay.addWidget(time_lbl)
    labels_lay.addWidget(badge)
    lay.addWidget(labels, 1)

    play = _button("play", "Start / pause", lambda: on_toggle(tid))
    play.setText(play_glyph(timer))
    reset = _button("reset", "Reset to zero", lambda: on_reset(tid))
    edit = _button("edit", "Edit name, time and workspace", lambda: on_edit(tid))
    delete = _button("delete", "Delete timer", lambda: on_delete(tid))
    for w in (play, reset, edit, delete):
        lay.addWidget(w)

    row.setProperty("state", row_state(timer))

    return row, {
        "row": row,
        "select": select_btn,
        "name": name,
        "time": time_lbl,
        "workspace": badge,
        "play": play,
        "reset": reset,
        "edit": edit,
        "delete": delete,
    }


def build_footer(total_selected, on_total_toggle, on_export, on_backup, on_pause_all,
                 on_reset_all, on_add, on_settings):
    footer = QWidget()
    lay = QHBoxLayout(footer)
    lay.setContentsMargins(4, 2, 4, 2)
    lay.setSpacing(4)

    total_btn = _button("selected" if total_selected else "unselected",
                        "Show the total of all timers in the panel", on_total_toggle)
    total_lbl = QLabel("Total: 00:00:00")
    total_lbl.setObjectName("totalLabel")
    lay.addWidget(total_btn)
    lay.addWidget(total_lbl, 1)

    buttons = {
        "export_btn": _button("save", "Export timers to CSV", on_export),
        "backup_btn": _button("backup", "Back up now to the configured folder", on_backup),
        "pause_all_btn": _button("pause_all", "Pause all timers", on_pause_all),
        "reset_all_btn": _button("reset_all", "Reset all timers", on_reset_all),
        "add_btn": _button("add", "Add a timer", on_add),
        "settings_btn": _button("settings", "Backup preferences", on_settings),
    }
    for btn in buttons.values():
        lay.addWidget(btn)

    return footer, {"total_btn": total_btn, "total_label": total_lbl, **buttons}


def build_separator():
    sep = QFrame()
    sep.setObjectName("footerSeparator")
    sep.setFixedHeight(1)
    return sep
