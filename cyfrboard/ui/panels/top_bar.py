# Rev 0.2.0
# cyfrboard – TopBar (brand + account + sign out)
from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QLabel, QPushButton


class TopBar(QWidget):
    accountRequested = Signal()
    signOutRequested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("TopBar")

        badge = QLabel("CY")
        badge.setObjectName("TopBarBadge")
        title = QLabel("<b>CYFR Board</b>")
        subtitle = QLabel("Internal tasks & objects tracker")
        subtitle.setProperty("dim", True)

        brand = QVBoxLayout()
        brand.setSpacing(0)
        brand.addWidget(title)
        brand.addWidget(subtitle)

        self._who = QLabel("")
        self._who.setProperty("dim", True)
        self._btn_account = QPushButton("Account")
        self._btn_sign_out = QPushButton("Sign out")
        self._btn_account.clicked.connect(self.accountRequested.emit)
        self._btn_sign_out.clicked.connect(self.signOutRequested.emit)

        row = QHBoxLayout(self)
        row.setContentsMargins(12, 8, 12, 8)
        row.addWidget(badge)
        row.addLayout(brand)
        row.addStretch(1)
        row.addWidget(self._who)
        row.addWidget(self._btn_account)
        row.addWidget(self._btn_sign_out)

        self.set_identity(None)

    def set_identity(self, identity) -> None:
        signed_in = identity is not None
        self._who.setText(identity.email or "" if signed_in else "")
        self._btn_account.setVisible(signed_in)
        self._btn_sign_out.setVisible(signed_in)
