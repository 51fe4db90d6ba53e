"""Per-platform login dialog (saved credentials of the active profile)."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QVBoxLayout,
)

from streamlauncher.managers.logger import get_logger
from streamlauncher.managers.state import ProfileStore
from streamlauncher.models import Credential, Platform

log = get_logger(__name__)


class LoginDialog(QDialog):
    """Username / password / remember form for one platform."""

    def __init__(self, store: ProfileStore, platform: Platform, parent=None) -> None:
        super().__init__(parent)
        self._store = store
        self._platform = platform
        self._saved = store.get_login(platform.name)
        self.setWindowTitle(f"{platform.name} Login")
        self.setMinimumWidth(400)
        self._build_ui()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setSpacing(14)
        root.setContentsMargins(20, 20, 20, 20)

        title = QLabel(f"{self._platform.name}  ·  profile '{self._store.active_profile()}'")
        title.setObjectName("title")
        root.addWidget(title)

        form = QFormLayout()
        form.setSpacing(10)
        form.setLabelAlignment(Qt.AlignmentFlag.AlignRight)

        self._user_edit = QLineEdit(self._saved.username)
        self._user_edit.setPlaceholderText("username or e-mail")
        form.addRow("Username", self._user_edit)

        self._pw_edit = QLineEdit()
        self._pw_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self._pw_edit.setPlaceholderText(
            "saved – type to replace" if self._saved.password else "password"
        )
        form.addRow("Password", self._pw_edit)

        self._remember_chk = QCheckBox("Remember on this device")
        self._remember_chk.setChecked(self._saved.remember or self._saved.is_empty())
        form.addRow("", self._remember_chk)
        root.addLayout(form)

        btns = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel
        )
        save_btn = btns.button(QDialogButtonBox.StandardButton.Save)
        save_btn.setObjectName("primary")
        forget_btn = btns.addButton("Forget", QDialogButtonBox.ButtonRole.DestructiveRole)
        forget_btn.setObjectName("danger")
        forget_btn.setEnabled(not self._saved.is_empty())
        forget_btn.clicked.connect(self._forget)
        btns.accepted.connect(self._save)
        btns.rejected.connect(self.reject)
        root.addWidget(btns)

        self._pw_edit.returnPressed.connect(self._save)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _save(self) -> None:
        username = self._user_edit.text().strip()
        password = self._pw_edit.text()
        remember = self._remember_chk.isChecked()
        if remember and not username:
            QMessageBox.warning(self, "Login", "Please enter a username.")
            return
        if remember and not password and not self._saved.password:
            QMessageBox.warning(self, "Login", "Please enter a password.")
            return
        if remember and not password:
            # Username-only edit: the stored digest cannot be re-hashed, so
            # the entry is kept as-is unless the username changed.
            if username == self._saved.username:
                self.accept()
                return
            QMessageBox.warning(self, "Login", "Re-enter the password to change the username.")
            return
        self._store.set_login(
            self._platform.name,
            Credential(username=username, password=password, remember=remember),
        )
        self.accept()

    def _forget(self) -> None:
        self._store.set_login(self._platform.name, Credential())
        log.info("Login for %s forgotten from dialog", self._platform.name)
        self.accept()
