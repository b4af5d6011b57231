# cyfrboard/ui/account_view.py
# Rev 0.2.0
from __future__ import annotations

from PySide6.QtWidgets import QWidget, QVBoxLayout, QFormLayout, QLineEdit, QPushButton, QLabel

from cyfrboard.viewmodels.account_viewmodel import AccountViewModel


class AccountView(QWidget):
    def __init__(self, vm: AccountViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm

        self._email = QLabel("")
        self._first = QLineEdit(); self._first.setPlaceholderText("Surname")
        self._second = QLineEdit(); self._second.setPlaceholderText("Given name")
        self._phone = QLineEdit(); self._phone.setPlaceholderText("+1 555 123-4567")
        self._btn_save = QPushButton("Save")
        self._error = QLabel(""); self._error.setObjectName("ErrorLabel"); self._error.setWordWrap(True)
        self._info = QLabel("")

        form = QFormLayout()
        form.addRow("Email", self._email)
        form.addRow("Surname", self._first)
        form.addRow("Given name", self._second)
        form.addRow("Phone", self._phone)
        form.addRow(self._btn_save)

        root = QVBoxLayout(self)
        root.addWidget(QLabel("<h2>Account</h2>"))
        root.addLayout(form)
        root.addWidget(self._error)
        root.addWidget(self._info)
        root.addStretch(1)

        self._btn_save.clicked.connect(self._on_save)
        self._vm.loaded.connect(self._on_loaded)
        self._vm.errorChanged.connect(self._error.setText)
        self._vm.saved.connect(self._info.setText)
        self._vm.busyChanged.connect(lambda busy: self._btn_save.setEnabled(not busy))

    def _on_loaded(self, email: str, profile) -> None:
        self._email.setText(email)
        self._first.setText(profile.first_name or "" if profile else "")
        self._second.setText(profile.second_name or "" if profile else "")
        self._phone.setText(profile.phone or "" if profile else "")

    def _on_save(self) -> None:
        self._vm.run(self._vm.save(
            first_name=self._first.text(),
            second_name=self._second.text(),
            phone=self._phone.text(),
        ))
