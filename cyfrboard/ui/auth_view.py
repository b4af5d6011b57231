# cyfrboard/ui/auth_view.py
# Rev 0.2.0 - sign in / register tabs
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QFormLayout, QLineEdit, QPushButton, QLabel, QTabWidget,
)

from cyfrboard.services.profile_rules import MIN_PASSWORD_LENGTH
from cyfrboard.viewmodels.auth_viewmodel import AuthViewModel


class AuthView(QWidget):
    def __init__(self, vm: AuthViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm

        # ---------- Sign in ----------
        self._login_email = QLineEdit(); self._login_email.setPlaceholderText("you@company.com")
        self._login_password = QLineEdit(); self._login_password.setEchoMode(QLineEdit.Password)
        self._btn_login = QPushButton("Sign in")
        login = QWidget()
        lf = QFormLayout(login)
        lf.addRow("Email", self._login_email)
        lf.addRow("Password", self._login_password)
        lf.addRow(self._btn_login)

        # ---------- Register ----------
        self._reg_email = QLineEdit(); self._reg_email.setPlaceholderText("you@company.com")
        self._reg_password = QLineEdit(); self._reg_password.setEchoMode(QLineEdit.Password)
        self._reg_password.setPlaceholderText(f"At least {MIN_PASSWORD_LENGTH} characters")
        self._btn_register = QPushButton("Create account")
        register = QWidget()
        rf = QFormLayout(register)
        rf.addRow("Email", self._reg_email)
        rf.addRow("Password", self._reg_password)
        rf.addRow(self._btn_register)

        self._tabs = QTabWidget()
        self._tabs.addTab(login, "Sign in")
        self._tabs.addTab(register, "Register")
        self._tabs.setMaximumWidth(420)

        self._error = QLabel(""); self._error.setObjectName("ErrorLabel"); self._error.setWordWrap(True)
        self._info = QLabel(""); self._info.setWordWrap(True)

        root = QVBoxLayout(self)
        root.addStretch(1)
        root.addWidget(QLabel("<h2>CYFR Board</h2>"), 0, Qt.AlignHCenter)
        root.addWidget(self._tabs, 0, Qt.AlignHCenter)
        root.addWidget(self._error, 0, Qt.AlignHCenter)
        root.addWidget(self._info, 0, Qt.AlignHCenter)
        root.addStretch(2)

        # ---------- Wire ----------
        self._btn_login.clicked.connect(self._on_login)
        self._login_password.returnPressed.connect(self._on_login)
        self._btn_register.clicked.connect(self._on_register)
        self._tabs.currentChanged.connect(lambda _i: self._clear_messages())

        self._vm.errorChanged.connect(self._error.setText)
        self._vm.message.connect(self._info.setText)
        self._vm.busyChanged.connect(self._on_busy)

    def _clear_messages(self) -> None:
        self._error.setText("")
        self._info.setText("")

    def _on_login(self) -> None:
        self._vm.run(self._vm.sign_in(self._login_email.text(), self._login_password.text()))

    def _on_register(self) -> None:
        self._vm.run(self._vm.sign_up(self._reg_email.text(), self._reg_password.text()))

    def _on_busy(self, busy: bool) -> None:
        self._btn_login.setEnabled(not busy)
        self._btn_register.setEnabled(not busy)
