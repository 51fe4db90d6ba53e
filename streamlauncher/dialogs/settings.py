"""Application Settings dialog.

Covers:
  • Display   – interface scale, brightness, theme
  • System    – GPU acceleration, language
  • Accounts  – clear saved logins of the active profile

The dialog has three buttons:
  OK     – save all settings and close
  Apply  – save all settings immediately without closing
  Cancel – discard and close
"""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSlider,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from streamlauncher.constants import THEMES
from streamlauncher.managers.logger import get_logger
from streamlauncher.managers.state import ProfileStore
from streamlauncher.models import DesktopSettings
from streamlauncher.theme import apply_theme

log = get_logger(__name__)

LANGUAGES = ["en_US", "en_GB", "de_DE", "fr_FR", "es_ES", "it_IT", "pl_PL", "pt_BR", "uk_UA"]


class SettingsDialog(QDialog):
    """Application-wide settings with OK / Apply / Cancel."""

    def __init__(self, store: ProfileStore, parent=None) -> None:
        super().__init__(parent)
        self._store = store
        self.setWindowTitle("Settings")
        self.setMinimumSize(460, 360)
        self._build_ui()
        self._load()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        self._tabs = QTabWidget()
        self._tabs.setObjectName("settings-tabs")
        self._tabs.addTab(self._tab_display(),  "Display")
        self._tabs.addTab(self._tab_system(),   "System")
        self._tabs.addTab(self._tab_accounts(), "Accounts")
        root.addWidget(self._tabs)

        # ── Button row: OK | Apply | Cancel ───────────────────────────
        self._btns = QDialogButtonBox()
        ok_btn     = self._btns.addButton(QDialogButtonBox.StandardButton.Ok)
        apply_btn  = self._btns.addButton(QDialogButtonBox.StandardButton.Apply)
        _cancel    = self._btns.addButton(QDialogButtonBox.StandardButton.Cancel)

        ok_btn.setObjectName("primary")
        apply_btn.setObjectName("apply")

        self._btns.clicked.connect(self._on_button_clicked)
        self._btns.rejected.connect(self.reject)
        root.addWidget(self._btns)

    # ── Display tab ────────────────────────────────────────────────────

    def _tab_display(self) -> QWidget:
        w = QWidget()
        form = QFormLayout(w)
        form.setSpacing(12)
        form.setContentsMargins(16, 16, 16, 16)

        self._scale_spin = QDoubleSpinBox()
        self._scale_spin.setRange(0.5, 3.0)
        self._scale_spin.setSingleStep(0.1)
        self._scale_spin.setDecimals(2)
        self._scale_spin.setSuffix("  ×")
        form.addRow("Interface scale", self._scale_spin)

        self._brightness_slider = QSlider(Qt.Orientation.Horizontal)
        self._brightness_slider.setRange(0, 100)
        self._brightness_lbl = QLabel()
        self._brightness_slider.valueChanged.connect(
            lambda v: self._brightness_lbl.setText(f"{v} %")
        )
        form.addRow("Brightness", self._brightness_slider)
        form.addRow("", self._brightness_lbl)

        self._theme_combo = QComboBox()
        for name in THEMES:
            self._theme_combo.addItem(name)
        form.addRow("Theme", self._theme_combo)
        return w

    # ── System tab ─────────────────────────────────────────────────────

    def _tab_system(self) -> QWidget:
        w = QWidget()
        form = QFormLayout(w)
        form.setSpacing(12)
        form.setContentsMargins(16, 16, 16, 16)

        self._gpu_chk = QCheckBox("Enable GPU acceleration")
        form.addRow("", self._gpu_chk)

        self._lang_combo = QComboBox()
        self._lang_combo.setEditable(True)
        self._lang_combo.addItems(LANGUAGES)
        form.addRow("Language", self._lang_combo)

        note = QLabel("GPU changes take effect after restarting the launcher.")
        note.setWordWrap(True)
        form.addRow("", note)
        return w

    # ── Accounts tab ───────────────────────────────────────────────────

    def _tab_accounts(self) -> QWidget:
        w = QWidget()
        layout = QVBoxLayout(w)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        self._profile_lbl = QLabel()
        layout.addWidget(self._profile_lbl)

        clear_btn = QPushButton("Clear saved logins")
        clear_btn.setObjectName("danger")
        clear_btn.clicked.connect(self._clear_logins)
        layout.addWidget(clear_btn)
        layout.addStretch()
        return w

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        s = self._store.get_settings()
        # Widen the widgets so a stored out-of-range value survives OK unchanged.
        self._scale_spin.setRange(
            min(self._scale_spin.minimum(), s.interface_scale),
            max(self._scale_spin.maximum(), s.interface_scale),
        )
        self._scale_spin.setValue(s.interface_scale)
        self._brightness_slider.setRange(
            min(self._brightness_slider.minimum(), s.brightness),
            max(self._brightness_slider.maximum(), s.brightness),
        )
        self._brightness_slider.setValue(s.brightness)
        self._brightness_lbl.setText(f"{s.brightness} %")
        idx = self._theme_combo.findText(s.theme)
        if idx >= 0:
            self._theme_combo.setCurrentIndex(idx)
        self._gpu_chk.setChecked(s.gpu_acceleration)
        self._lang_combo.setCurrentText(s.language)
        self._profile_lbl.setText(f"Active profile:  {s.active_profile}")

    def collect(self) -> DesktopSettings:
        """Return the settings currently shown in the widgets."""
        return DesktopSettings(
            interface_scale=self._scale_spin.value(),
            brightness=self._brightness_slider.value(),
            gpu_acceleration=self._gpu_chk.isChecked(),
            language=self._lang_combo.currentText().strip(),
            theme=self._theme_combo.currentText(),
            active_profile=self._store.active_profile(),
        )

    def _save_settings(self) -> None:
        """Persist current UI values to the store and apply immediately."""
        settings = self.collect()
        self._store.set_settings(settings)
        apply_theme(settings.theme, settings.interface_scale)
        log.info(
            "Settings saved: scale=%.2f  brightness=%d  gpu=%s  lang=%s  theme=%s",
            settings.interface_scale, settings.brightness, settings.gpu_acceleration,
            settings.language, settings.theme,
        )

    def _on_button_clicked(self, btn) -> None:
        role = self._btns.buttonRole(btn)
        if role == QDialogButtonBox.ButtonRole.AcceptRole:   # OK
            self._save_settings()
            self.accept()
        elif role == QDialogButtonBox.ButtonRole.ApplyRole:  # Apply
            self._save_settings()
        # Cancel is handled by the rejected signal → self.reject()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clear_logins(self) -> None:
        profile = self._store.active_profile()
        reply = QMessageBox.question(
            self,
            "Clear Saved Logins",
            f"Forget every saved login of profile '{profile}'?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._store.clear_logins()
            log.info("Saved logins cleared for profile %s", profile)
