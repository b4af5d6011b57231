# cyfrboard/ui/workspace_view.py
# Rev 0.2.0 - workspace details + objects (projects)
from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLineEdit, QTextEdit,
    QPushButton, QLabel, QTableWidget, QTableWidgetItem, QHeaderView,
)

from cyfrboard.ui.dialogs.confirm import alert, confirm
from cyfrboard.ui.markup import heading
from cyfrboard.viewmodels.workspace_viewmodel import WorkspaceViewModel


class WorkspaceView(QWidget):
    projectChosen = Signal(str)
    backRequested = Signal()

    def __init__(self, vm: WorkspaceViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm

        self._btn_back = QPushButton("← Workspaces")
        self._title = QLabel("<h2>Workspace</h2>")
        self._description = QLabel(""); self._description.setWordWrap(True); self._description.setProperty("dim", True)
        self._description.setTextFormat(Qt.PlainText)
        self._error = QLabel(""); self._error.setObjectName("ErrorLabel"); self._error.setWordWrap(True)
        self._status = QLabel(""); self._status.setProperty("dim", True)
        self._btn_delete_ws = QPushButton("Delete workspace")

        # ---------- Create form ----------
        self._new_name = QLineEdit(); self._new_name.setPlaceholderText("Object name")
        self._new_code = QLineEdit(); self._new_code.setPlaceholderText("Code (optional)")
        self._new_address = QLineEdit(); self._new_address.setPlaceholderText("Address (optional)")
        self._new_description = QTextEdit(); self._new_description.setPlaceholderText("Description (optional)")
        self._new_description.setMaximumHeight(70)
        self._btn_create = QPushButton("Create object")
        self._btn_create.setEnabled(False)
        self._create_error = QLabel(""); self._create_error.setObjectName("ErrorLabel"); self._create_error.setWordWrap(True)
        form_box = QGroupBox("New object")
        form = QFormLayout(form_box)
        form.addRow("Name", self._new_name)
        form.addRow("Code", self._new_code)
        form.addRow("Address", self._new_address)
        form.addRow("Description", self._new_description)
        form.addRow(self._btn_create)
        form.addRow(self._create_error)

        # ---------- Table: Name | Code | Address | Status | Created ----------
        self._table = QTableWidget(0, 5)
        self._table.setHorizontalHeaderLabels(["Name", "Code", "Address", "Status", "Created"])
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)
        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(0, QHeaderView.Stretch)
        hdr.setSectionResizeMode(1, QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(2, QHeaderView.Stretch)
        hdr.setSectionResizeMode(3, QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(4, QHeaderView.ResizeToContents)

        self._btn_open = QPushButton("Open board")
        self._btn_delete = QPushButton("Delete object")
        self._btn_open.setEnabled(False)
        self._btn_delete.setEnabled(False)

        head = QHBoxLayout()
        head.addWidget(self._btn_back)
        head.addWidget(self._title, 1)
        head.addWidget(self._btn_delete_ws)

        bar = QHBoxLayout()
        bar.addWidget(self._btn_open)
        bar.addWidget(self._btn_delete)
        bar.addStretch(1)
        bar.addWidget(self._status)

        root = QVBoxLayout(self)
        root.addLayout(head)
        root.addWidget(self._description)
        root.addWidget(self._error)
        root.addWidget(form_box)
        root.addLayout(bar)
        root.addWidget(self._table, 1)

        # ---------- Wire ----------
        self._btn_back.clicked.connect(self.backRequested.emit)
        self._btn_create.clicked.connect(self._on_create)
        self._btn_open.clicked.connect(self._on_open)
        self._btn_delete.clicked.connect(self._on_delete)
        self._btn_delete_ws.clicked.connect(self._on_delete_workspace)
        self._table.itemDoubleClicked.connect(lambda _it: self._on_open())
        self._table.itemSelectionChanged.connect(self._on_selection_changed)

        self._vm.workspaceLoaded.connect(self._on_workspace)
        self._vm.projectsChanged.connect(self._on_projects)
        self._vm.errorChanged.connect(self._error.setText)
        self._vm.loadingChanged.connect(self._on_loading)
        self._vm.projectCreated.connect(self._on_created)
        self._vm.createFailed.connect(self._create_error.setText)
        self._vm.alert.connect(lambda msg: alert(self, msg))

    # ---------- VM → UI ----------
    def _on_workspace(self, ws) -> None:
        self._btn_create.setEnabled(ws is not None)
        if ws is None:
            self._title.setText("<h2>Workspace</h2>")
            self._description.setText("")
            return
        self._title.setText(heading(ws.name))
        self._description.setText(ws.description or "")

    def _on_projects(self, rows) -> None:
        self._table.setRowCount(0)
        for p in rows:
            r = self._table.rowCount()
            self._table.insertRow(r)
            name = QTableWidgetItem(p.name or "")
            name.setData(Qt.UserRole, p.id)
            self._table.setItem(r, 0, name)
            self._table.setItem(r, 1, QTableWidgetItem(p.code or ""))
            self._table.setItem(r, 2, QTableWidgetItem(p.address or ""))
            self._table.setItem(r, 3, QTableWidgetItem(p.status or ""))
            self._table.setItem(r, 4, QTableWidgetItem((p.created_at or "")[:10]))
        self._on_selection_changed()

    def _on_created(self, _project) -> None:
        self._new_name.clear()
        self._new_code.clear()
        self._new_address.clear()
        self._new_description.clear()
        self._create_error.setText("")

    def _on_loading(self, what: str, busy: bool) -> None:
        self._status.setText(f"Loading {what}…" if busy else "")

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
        self._create_error.setText("")
        self._vm.run(self._vm.create_project(
            name=self._new_name.text(),
            code=self._new_code.text(),
            address=self._new_address.text(),
            description=self._new_description.toPlainText(),
        ))

    def _on_open(self) -> None:
        pid = self._selected_id()
        if pid:
            self.projectChosen.emit(str(pid))

    def _on_delete(self) -> None:
        pid = self._selected_id()
        if not pid:
            return
        row = self._table.currentRow()
        name = self._table.item(row, 0).text() if row >= 0 else ""
        if confirm(self, "Delete object", f"Delete object “{name}” with all its tasks?"):
            self._vm.run(self._vm.delete_project(pid))

    def _on_delete_workspace(self) -> None:
        if confirm(self, "Delete workspace", "Delete this workspace with all its objects and tasks?"):
            self._vm.run(self._vm.delete_workspace())
