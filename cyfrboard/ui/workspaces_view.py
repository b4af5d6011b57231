# cyfrboard/ui/workspaces_view.py
# Rev 0.2.0
from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit, QPushButton, QLabel,
    QTableWidget, QTableWidgetItem, QHeaderView, QGroupBox,
)

from cyfrboard.ui.dialogs.confirm import alert, confirm
from cyfrboard.viewmodels.workspaces_viewmodel import WorkspacesViewModel


class WorkspacesView(QWidget):
    """Create form on top, the identity's workspaces below (Name | Description | Role)."""

    workspaceChosen = Signal(str)

    def __init__(self, vm: WorkspacesViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm

        # ---------- Create form ----------
        self._name = QLineEdit(); self._name.setPlaceholderText("Workspace name")
        self._description = QLineEdit(); self._description.setPlaceholderText("Description (optional)")
        self._btn_create = QPushButton("Create workspace")
        box = QGroupBox("New workspace")
        form = QFormLayout(box)
        form.addRow("Name", self._name)
        form.addRow("Description", self._description)
        form.addRow(self._btn_create)

        self._error = QLabel(""); self._error.setObjectName("ErrorLabel"); self._error.setWordWrap(True)
        self._warning = QLabel(""); self._warning.setWordWrap(True)
        self._status = QLabel(""); self._status.setProperty("dim", True)

        # ---------- Table ----------
        self._table = QTableWidget(0, 3)
        self._table.setHorizontalHeaderLabels(["Name", "Description", "Role"])
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.verticalHeader().setVisible(False)
        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(1, QHeaderView.Stretch)
        hdr.setSectionResizeMode(2, QHeaderView.ResizeToContents)

        self._btn_open = QPushButton("Open")
        self._btn_delete = QPushButton("Delete")
        self._btn_refresh = QPushButton("Refresh")
        self._btn_sign_out = QPushButton("Sign out")
        self._btn_open.setEnabled(False)
        self._btn_delete.setEnabled(False)
        bar = QHBoxLayout()
        bar.addWidget(self._btn_open)
        bar.addWidget(self._btn_delete)
        bar.addStretch(1)
        bar.addWidget(self._status)
        bar.addWidget(self._btn_refresh)
        bar.addWidget(self._btn_sign_out)

        root = QVBoxLayout(self)
        root.addWidget(QLabel("<h2>Workspaces</h2>"))
        root.addWidget(box)
        root.addWidget(self._error)
        root.addWidget(self._warning)
        root.addLayout(bar)
        root.addWidget(self._table, 1)

        # ---------- Wire ----------
        self._btn_create.clicked.connect(self._on_create)
        self._btn_open.clicked.connect(self._on_open)
        self._btn_delete.clicked.connect(self._on_delete)
        self._btn_refresh.clicked.connect(lambda: self._vm.run(self._vm.load()))
        self._btn_sign_out.clicked.connect(lambda: self._vm.run(self._vm.sign_out()))
        self._table.itemDoubleClicked.connect(lambda _it: self._on_open())
        self._table.itemSelectionChanged.connect(self._on_selection_changed)

        self._vm.workspacesChanged.connect(self._on_workspaces)
        self._vm.errorChanged.connect(self._error.setText)
        self._vm.warning.connect(self._warning.setText)
        self._vm.loadingChanged.connect(lambda busy: self._status.setText("Loading…" if busy else ""))
        self._vm.workspaceCreated.connect(self._on_created)
        self._vm.alert.connect(lambda msg: alert(self, msg))

    # ---------- VM → UI ----------
    def _on_workspaces(self, rows) -> None:
        self._table.setRowCount(0)
        for ws in rows:
            r = self._table.rowCount()
            self._table.insertRow(r)
            name = QTableWidgetItem(ws.name or "")
            name.setData(Qt.UserRole, ws.id)
            self._table.setItem(r, 0, name)
            self._table.setItem(r, 1, QTableWidgetItem(ws.description or ""))
            self._table.setItem(r, 2, QTableWidgetItem(ws.role or ""))
        self._on_selection_changed()

    def _on_created(self, _ws) -> None:
        self._name.clear()
        self._description.clear()

    def _on_selection_changed(self) -> None:
        has = self._selected_id() is not None
        self._btn_open.setEnabled(has)
        self._btn_delete.setEnabled(has)

    # ---------- UI → VM ----------
    def _selected_id(self) -> str | None:
        row = self._table.currentRow()
        if row < 0:
            return None
        item = self._table.item(row, 0)
        return item.data(Qt.UserRole) if item else None

    def _on_create(self) -> None:
        self._warning.setText("")
        self._vm.run(self._vm.create_workspace(self._name.text(), self._description.text()))

    def _on_open(self) -> None:
        wid = self._selected_id()
        if wid:
            self.workspaceChosen.emit(str(wid))

    def _on_delete(self) -> None:
        wid = self._selected_id()
        if not wid:
            return
        if confirm(self, "Delete workspace", "Delete this workspace with all its objects and tasks?"):
            self._vm.run(self._vm.delete_workspace(wid))
