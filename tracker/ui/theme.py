"""Colors and stylesheet for the tracker window."""

THEME = {
    "bg": "#2b2b2b",
    "row_bg": "#333333",
    "row_hover": "#3d3d3d",
    "row_edit": "#3a3f4b",
    "text": "#eeeeee",
    "text_paused": "#9a9a9a",
    "running_text": "#8fd694",
    "auto_paused_text": "#e5c07b",
    "workspace_bg": "#4a6fa5",
    "button_text": "#dddddd",
    "button_paused_text": "#888888",
    "button_hover": "#505050",
    "separator": "#555555",
}

# Glyphs for the per-row buttons, keyed by what they do.
GLYPHS = {
    "selected": "◉",
    "unselected": "○",
    "play": "▶",
    "pause": "⏸",
    "auto_paused": "↻",
    "reset": "⌫",
    "edit": "✎",
    "delete": "\U0001f5d1",
    "save": "\U0001f4be",
    "pause_all": "⏸",
    "reset_all": "⌧",
    "add": "+",
    "backup": "⇩",
    "settings": "⚙",
}


def build_stylesheet(t=THEME):
    # Rows carry a dynamic "state" property: running, paused or auto_paused.
    return f"""
    QMainWindow, QWidget#central {{ background-color: {t['bg']}; }}
    QLabel {{ color: {t['text']}; }}
    QLabel#panelLabel {{ font-weight: bold; font-size: 15pt; }}
    QWidget#timerRow {{ background-color: {t['row_bg']}; border-radius: 4px; }}
    QWidget#timerRow:hover {{ background-color: {t['row_hover']}; }}
    QWidget#timerRow[state="paused"] QLabel#timerTime {{ color: {t['text_paused']}; }}
    QWidget#timerRow[state="running"] QLabel#timerTime {{ color: {t['running_text']}; font-weight: bold; }}
    QWidget#timerRow[state="auto_paused"] QLabel#timerTime {{ color: {t['auto_paused_text']}; }}
    QWidget#timerRow[state="paused"] QPushButton {{ color: {t['button_paused_text']}; }}
    QLabel#workspaceBadge {{ background-color: {t['workspace_bg']}; border-radius: 6px; padding: 0px 5px; }}
    QPushButton {{ color: {t['button_text']}; background: transparent; border: none; padding: 2px 6px; }}
    QPushButton:hover {{ background-color: {t['button_hover']}; border-radius: 4px; }}
    QFrame#footerSeparator {{ background-color: {t['separator']}; }}
    """
