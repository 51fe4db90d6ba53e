"""Qt Style Sheet (QSS) for the launcher's dark and light themes."""

from __future__ import annotations

import math

from streamlauncher.constants import C, THEMES


def apply_theme(name: str, scale: float = 1.0) -> str:
    """Switch the active palette to *name* and restyle the running app.

    Unknown theme names fall back to ``"dark"``.  Returns the theme applied.
    """
    if name not in THEMES:
        name = "dark"
    C.clear()
    C.update(THEMES[name])

    from PySide6.QtWidgets import QApplication  # noqa: PLC0415
    app = QApplication.instance()
    if app is not None:
        app.setStyleSheet(stylesheet(scale))
    return name


def stylesheet(scale: float = 1.0) -> str:
    """Return the full application QSS stylesheet string."""
    if not math.isfinite(scale) or scale <= 0:
        scale = 1.0
    base_pt = round(10 * scale)
    tile_pt = round(16 * scale)
    return f"""
/* ==========================================================================
   Global
   ========================================================================== */
* {{
    outline: none;
}}

QMainWindow, QWidget {{
    background-color: {C["base"]};
    color: {C["text"]};
    font-family: "Segoe UI", "Inter", "Helvetica Neue", Arial, sans-serif;
    font-size: {base_pt}pt;
}}

/* ==========================================================================
   Menu bar
   ========================================================================== */
QMenuBar {{
    background-color: {C["mantle"]};
    color: {C["text"]};
    padding: 2px 4px;
    border-bottom: 1px solid {C["surface0"]};
}}

QMenuBar::item {{
    padding: 4px 10px;
    border-radius: 4px;
}}

QMenuBar::item:selected {{
    background-color: {C["surface1"]};
}}

QMenu {{
    background-color: {C["surface0"]};
    color: {C["text"]};
    border: 1px solid {C["surface1"]};
    padding: 4px 0;
    border-radius: 6px;
}}

QMenu::item {{
    padding: 5px 28px 5px 16px;
}}

QMenu::item:selected {{
    background-color: {C["blue"]};
    color: {C["base"]};
    border-radius: 3px;
}}

/* ==========================================================================
   Status bar
   ========================================================================== */
QStatusBar {{
    background-color: {C["mantle"]};
    color: {C["subtext0"]};
    border-top: 1px solid {C["surface0"]};
    padding: 2px 8px;
}}

/* ==========================================================================
   Tab bar  (All / Favorites)
   ========================================================================== */
QTabBar {{
    background-color: {C["crust"]};
}}

QTabBar::tab {{
    background-color: {C["surface0"]};
    color: {C["subtext0"]};
    padding: 6px 16px;
    border: none;
    min-width: 80px;
}}

QTabBar::tab:selected {{
    background-color: {C["base"]};
    color: {C["text"]};
    border-bottom: 2px solid {C["blue"]};
}}

/* ==========================================================================
   Buttons and platform tiles
   ========================================================================== */
QPushButton {{
    background-color: {C["surface1"]};
    color: {C["text"]};
    border: none;
    padding: 5px 14px;
    border-radius: 5px;
}}

QPushButton:hover {{
    background-color: {C["surface2"]};
}}

QPushButton#primary {{
    background-color: {C["blue"]};
    color: {C["base"]};
    font-weight: bold;
}}

QPushButton#danger {{
    background-color: {C["red"]};
    color: {C["base"]};
}}

QPushButton#tile {{
    background-color: {C["surface0"]};
    color: {C["text"]};
    font-size: {tile_pt}pt;
    font-weight: bold;
    border-radius: 10px;
    padding: 24px;
}}

QPushButton#tile:hover {{
    background-color: {C["surface1"]};
    border: 2px solid {C["mauve"]};
}}

QToolButton#star {{
    background: transparent;
    color: {C["yellow"]};
    border: none;
    font-size: {tile_pt}pt;
}}

/* ==========================================================================
   Inputs
   ========================================================================== */
QLineEdit, QComboBox, QDoubleSpinBox, QSpinBox {{
    background-color: {C["surface0"]};
    color: {C["text"]};
    border: 1px solid {C["surface1"]};
    border-radius: 5px;
    padding: 4px 8px;
    selection-background-color: {C["blue"]};
    selection-color: {C["base"]};
}}

QLineEdit:focus, QComboBox:focus {{
    border-color: {C["blue"]};
}}

QLabel {{
    color: {C["subtext0"]};
}}

QLabel#title {{
    color: {C["mauve"]};
    font-weight: bold;
}}

QGroupBox {{
    border: 1px solid {C["surface1"]};
    border-radius: 6px;
    margin-top: 8px;
    padding: 10px 8px 8px 8px;
}}

QDialogButtonBox QPushButton {{
    min-width: 80px;
}}
"""
