"""Main application window (QMainWindow) and ``main()`` entry point."""

from __future__ import annotations

import os
import sys
from typing import MutableMapping, Optional

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QStatusBar,
    QTabBar,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from streamlauncher.constants import APP_NAME, APP_VERSION, C, DESKTOP_CONFIG_FILE, TABS
from streamlauncher.errors import ActionFailedError
from streamlauncher.managers.logger import get_logger
from streamlauncher.managers.state import ProfileStore, resolve_config_path
from streamlauncher.models import CATALOG, DesktopSettings, Platform
from streamlauncher.system import ActionRunner, CommandRunner, SystemAction
from streamlauncher.theme import apply_theme

log = get_logger(__name__)

GRID_COLUMNS = 4


def bootstrap_environment(
    settings: DesktopSettings,
    environ: Optional[MutableMapping[str, str]] = None,
) -> None:
    """Force the Wayland backend and GPU flags before QApplication exists.

    Values already present in the environment win.
    """
    env = os.environ if environ is None else environ
    gpu_flags = (
        "--enable-gpu --enable-features=WebRTCPipeWireCapturer"
        if settings.gpu_acceleration
        else "--disable-gpu --enable-features=WebRTCPipeWireCapturer"
    )
    env.setdefault("QT_QPA_PLATFORM", "wayland")
    env.setdefault("QT_LOGGING_RULES", "qt5ct.debug=false;qt5ct.warning=false")
    env.setdefault("QTWEBENGINE_CHROMIUM_FLAGS", gpu_flags)


# ---------------------------------------------------------------------------
# Main Window
# ---------------------------------------------------------------------------

class LauncherWindow(QMainWindow):
    """Main application window."""

    def __init__(self, store: ProfileStore, actions: ActionRunner) -> None:
        super().__init__()
        self._store = store
        self._actions = actions
        self.setWindowTitle(f"{APP_NAME}  {APP_VERSION}")
        self.resize(1280, 800)
        self.setMinimumSize(800, 500)

        self._build_ui()
        self._build_menu()
        self._refresh_profiles()
        self._tab_bar.setCurrentIndex(TABS.index(self._store.active_tab()))
        self._tab_bar.currentChanged.connect(self._on_tab_changed)
        self._refresh_grid()
        self._apply_cinema_mode(self._store.cinema_mode())
        log.info("%s %s started (profile=%s)", APP_NAME, APP_VERSION, store.active_profile())

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self._build_top_bar())

        self._tab_bar = QTabBar()
        self._tab_bar.addTab("All")
        self._tab_bar.addTab("★  Favorites")
        layout.addWidget(self._tab_bar)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        self._grid_host = QWidget()
        self._grid = QGridLayout(self._grid_host)
        self._grid.setContentsMargins(24, 24, 24, 24)
        self._grid.setSpacing(16)
        self._grid.setAlignment(Qt.AlignmentFlag.AlignTop)
        scroll.setWidget(self._grid_host)
        layout.addWidget(scroll, 1)

        self._status_lbl = QLabel(f"{APP_NAME} ready.")
        sb = QStatusBar()
        sb.addWidget(self._status_lbl)
        self.setStatusBar(sb)

        exit_cinema = QShortcut(QKeySequence(Qt.Key.Key_Escape), self)
        exit_cinema.activated.connect(lambda: self.set_cinema_mode(False))

    def _build_top_bar(self) -> QFrame:
        self._top_bar = QFrame()
        self._top_bar.setStyleSheet(f"background-color: {C['crust']};")
        h = QHBoxLayout(self._top_bar)
        h.setContentsMargins(12, 6, 12, 6)

        title = QLabel(APP_NAME)
        title.setObjectName("title")
        h.addWidget(title)
        h.addStretch()

        h.addWidget(QLabel("Profile"))
        self._profile_combo = QComboBox()
        self._profile_combo.setMinimumWidth(160)
        self._profile_combo.currentTextChanged.connect(self._on_profile_changed)
        h.addWidget(self._profile_combo)

        add_btn = QPushButton("+")
        add_btn.setToolTip("New profile")
        add_btn.setFixedWidth(32)
        add_btn.clicked.connect(self._new_profile)
        h.addWidget(add_btn)

        cinema_btn = QPushButton("Cinema")
        cinema_btn.setToolTip("Hide everything but the platforms  (F11, Esc to leave)")
        cinema_btn.clicked.connect(lambda: self.set_cinema_mode(True))
        h.addWidget(cinema_btn)
        return self._top_bar

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def _build_menu(self) -> None:
        bar = self.menuBar()

        # ── Launcher ────────────────────────────────────────────────────
        launcher_m = bar.addMenu("&Launcher")
        act_settings = launcher_m.addAction("&Settings…")
        act_settings.setShortcut(QKeySequence("Ctrl+,"))
        act_settings.triggered.connect(self._open_settings)
        self._act_cinema = launcher_m.addAction("&Cinema Mode")
        self._act_cinema.setCheckable(True)
        self._act_cinema.setShortcut(QKeySequence("F11"))
        self._act_cinema.toggled.connect(self.set_cinema_mode)
        self.addAction(self._act_cinema)  # keep F11 live while the menu bar is hidden
        launcher_m.addSeparator()
        act_quit = launcher_m.addAction("&Quit")
        act_quit.setShortcut(QKeySequence("Ctrl+Q"))
        act_quit.triggered.connect(self.close)

        # ── System ──────────────────────────────────────────────────────
        system_m = bar.addMenu("S&ystem")
        for action in SystemAction:
            act = system_m.addAction(f"{action.label}…")
            act.triggered.connect(lambda _checked=False, a=action: self.run_system_action(a))
            if action is SystemAction.RESTART_APP:
                system_m.addSeparator()

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def _refresh_profiles(self) -> None:
        self._profile_combo.blockSignals(True)
        self._profile_combo.clear()
        self._profile_combo.addItems(self._store.profile_names())
        self._profile_combo.setCurrentText(self._store.active_profile())
        self._profile_combo.blockSignals(False)

    def _on_profile_changed(self, name: str) -> None:
        if not name or name == self._store.active_profile():
            return
        self._store.switch_profile(name)
        self._status(f"Profile '{name}' active.")

    def _new_profile(self) -> None:
        name, ok = QInputDialog.getText(self, "New Profile", "Profile name:")
        if ok:
            self.create_profile(name)

    def create_profile(self, name: str) -> bool:
        created = self._store.create_profile(name)
        self._refresh_profiles()
        if created:
            self._status(f"Profile '{name.strip()}' created.")
        return created

    # ------------------------------------------------------------------
    # Platform grid
    # ------------------------------------------------------------------

    def visible_platforms(self) -> list[str]:
        if TABS[self._tab_bar.currentIndex()] == "favorites":
            favorites = set(self._store.favorites())
            return [p.name for p in CATALOG if p.name in favorites]
        return [p.name for p in CATALOG]

    def _refresh_grid(self) -> None:
        while self._grid.count():
            item = self._grid.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

        names = self.visible_platforms()
        if not names:
            empty = QLabel("No favorites yet. Tap ☆ on a platform to add it.")
            empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self._grid.addWidget(empty, 0, 0, 1, GRID_COLUMNS)
            return
        for i, platform in enumerate(p for p in CATALOG if p.name in names):
            self._grid.addWidget(self._make_tile(platform), i // GRID_COLUMNS, i % GRID_COLUMNS)

    def _make_tile(self, platform: Platform) -> QWidget:
        tile = QFrame()
        v = QVBoxLayout(tile)
        v.setContentsMargins(0, 0, 0, 0)
        v.setSpacing(4)

        open_btn = QPushButton(platform.name)
        open_btn.setObjectName("tile")
        open_btn.setMinimumHeight(120)
        open_btn.setToolTip(platform.url)
        open_btn.clicked.connect(lambda: self._open_platform(platform))
        v.addWidget(open_btn)

        row = QHBoxLayout()
        star = QToolButton()
        star.setObjectName("star")
        star.setText("★" if self._store.is_favorite(platform.name) else "☆")
        star.setToolTip("Toggle favorite")
        star.clicked.connect(lambda: self.toggle_favorite(platform.name))
        row.addWidget(star)
        row.addStretch()
        login_btn = QToolButton()
        login_btn.setText("Login…")
        login_btn.clicked.connect(lambda: self._edit_login(platform))
        row.addWidget(login_btn)
        v.addLayout(row)
        return tile

    def toggle_favorite(self, name: str) -> bool:
        now = self._store.toggle_favorite(name)
        self._refresh_grid()
        return now

    def _on_tab_changed(self, index: int) -> None:
        if index < 0:
            return
        tab = TABS[index]
        if tab != self._store.active_tab():
            self._store.set_active_tab(tab)
        self._refresh_grid()

    def _open_platform(self, platform: Platform) -> None:
        log.info("Opening %s (%s)", platform.name, platform.url)
        if not QDesktopServices.openUrl(QUrl(platform.url)):
            self._status(f"Could not open {platform.name}.")
            return
        self._status(f"Opened {platform.name}.")

    def _edit_login(self, platform: Platform) -> None:
        from streamlauncher.dialogs.login import LoginDialog  # noqa: PLC0415
        dlg = LoginDialog(self._store, platform, self)
        if dlg.exec():
            self._status(f"{platform.name} login updated.")

    # ------------------------------------------------------------------
    # Cinema mode
    # ------------------------------------------------------------------

    def set_cinema_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled != self._store.cinema_mode():
            self._store.set_cinema_mode(enabled)
        self._apply_cinema_mode(enabled)

    def _apply_cinema_mode(self, enabled: bool) -> None:
        self._top_bar.setVisible(not enabled)
        self._tab_bar.setVisible(not enabled)
        self.menuBar().setVisible(not enabled)
        self.statusBar().setVisible(not enabled)
        self._act_cinema.blockSignals(True)
        self._act_cinema.setChecked(enabled)
        self._act_cinema.blockSignals(False)

    # ------------------------------------------------------------------
    # System actions
    # ------------------------------------------------------------------

    def run_system_action(self, action: SystemAction, confirm: bool = True) -> bool:
        if confirm:
            reply = QMessageBox.question(
                self,
                action.label,
                f"{action.label} now?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            )
            if reply != QMessageBox.StandardButton.Yes:
                return False
        try:
            self._actions.perform(action)
        except ActionFailedError as exc:
            log.error("System action %s failed: %s", action.value, exc)
            QMessageBox.critical(self, action.label, f"Failed to execute {action.value}: {exc}")
            return False
        self._status(f"{action.label} requested.")
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _open_settings(self) -> None:
        from streamlauncher.dialogs.settings import SettingsDialog  # noqa: PLC0415
        dlg = SettingsDialog(self._store, self)
        if dlg.exec():
            self._status("Settings saved.")

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def closeEvent(self, event) -> None:
        log.info("%s shutting down", APP_NAME)
        super().closeEvent(event)

    def _status(self, msg: str) -> None:
        self._status_lbl.setText(msg)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    store = ProfileStore(resolve_config_path(DESKTOP_CONFIG_FILE))
    store.load()
    settings = store.get_settings()
    bootstrap_environment(settings)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    apply_theme(settings.theme, settings.interface_scale)
    window = LauncherWindow(store, CommandRunner())
    window.showFullScreen()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
