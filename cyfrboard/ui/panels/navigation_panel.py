# cyfrboard/ui/panels/navigation_panel.py
# Rev 0.2.0 - emit selection on activate/double-click

from __future__ import annotations
from typing import List, Optional
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QListWidget, QListWidgetItem, QPushButton

from cyfrboard.models.entities import Workspace


class NavigationPanel(QWidget):
    """Persistent left column: link to the workspace list plus every workspace the identity belongs to."""

    workspaceSelected = Signal(str)  # workspace_id
    allWorkspacesRequested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._title = QLabel("NAVIGATION")
        self._title.setProperty("dim", True)
        self._btn_all = QPushButton("Workspaces")
        self._btn_all.setFlat(True)
        self._btn_all.clicked.connect(self.allWorkspacesRequested.emit)
        self._list = QListWidget(self)

        lay = QVBoxLayout(self)
        lay.addWidget(self._title)
        lay.addWidget(self._btn_all)
        lay.addWidget(self._list, 1)

        self._list.itemActivated.connect(self._emit_selection)     # Enter/double-click
        self._list.itemClicked.connect(self._emit_selection)

    def set_workspaces(self, rows: List[Workspace]) -> None:
        self._list.clear()
        for ws in rows:
            item = QListWidgetItem(ws.name or ws.id)
            item.setData(Qt.UserRole, ws.id)
            if ws.description:
                item.setToolTip(ws.description)
            self._list.addItem(item)

    def _emit_selection(self, item=None) -> None:
        if item is None:
            item = self._list.currentItem()
        if not item:
            return
        wid = item.data(Qt.UserRole)
        if wid:
            self.workspaceSelected.emit(str(wid))
