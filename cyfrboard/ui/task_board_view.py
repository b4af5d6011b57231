# cyfrboard/ui/task_board_view.py
# Rev 0.2.0 - project header, create form, three drag-and-drop lanes
from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import Qt, Signal, QDate
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLabel, QLineEdit,
    QTextEdit, QComboBox, QDateEdit, QCheckBox, QPushButton, QListWidget,
    QListWidgetItem, QSplitter,
)

from cyfrboard.models.types import DEFAULT_PRIORITY, PRIORITY_LABELS, PRIORITY_ORDER, STATUS_LABELS, STATUS_ORDER
from cyfrboard.ui.dialogs.confirm import alert, confirm
from cyfrboard.ui.markup import heading
from cyfrboard.ui.panels.lane_list import LaneList, TaskCard
from cyfrboard.viewmodels.task_board_viewmodel import TaskBoardViewModel


class TaskBoardView(QWidget):
    backRequested = Signal(str)   # workspace_id ("" when the project is unknown)

    def __init__(self, vm: TaskBoardViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm
        self._lanes_state = None

        # ---------- Header ----------
        self._btn_back = QPushButton("← Objects")
        self._title = QLabel("<h2>Object</h2>")
        self._subtitle = QLabel(""); self._subtitle.setProperty("dim", True); self._subtitle.setWordWrap(True)
        self._subtitle.setTextFormat(Qt.PlainText)
        self._btn_delete_project = QPushButton("Delete object")
        self._btn_delete_project.setEnabled(False)
        self._project_error = QLabel(""); self._project_error.setObjectName("ErrorLabel")
        self._tasks_error = QLabel(""); self._tasks_error.setObjectName("ErrorLabel"); self._tasks_error.setWordWrap(True)
        self._status = QLabel(""); self._status.setProperty("dim", True)

        head = QHBoxLayout()
        head.addWidget(self._btn_back)
        head.addWidget(self._title, 1)
        head.addWidget(self._status)
        head.addWidget(self._btn_delete_project)

        # ---------- Create form ----------
        self._new_title = QLineEdit(); self._new_title.setPlaceholderText("Task title")
        self._new_priority = QComboBox()
        for key in PRIORITY_ORDER:
            self._new_priority.addItem(PRIORITY_LABELS[key], key)
        self._new_priority.setCurrentIndex(PRIORITY_ORDER.index(DEFAULT_PRIORITY))
        self._new_has_due = QCheckBox("Due")
        self._new_due = QDateEdit(QDate.currentDate())
        self._new_due.setCalendarPopup(True)
        self._new_due.setDisplayFormat("yyyy-MM-dd")
        self._new_due.setEnabled(False)
        self._new_has_due.toggled.connect(self._new_due.setEnabled)
        self._new_description = QTextEdit(); self._new_description.setPlaceholderText("Description (optional)")
        self._new_description.setMaximumHeight(80)
        self._new_assignees = QListWidget(); self._new_assignees.setMaximumHeight(110)
        self._btn_create = QPushButton("Add task")
        self._btn_create.setEnabled(False)
        self._create_error = QLabel(""); self._create_error.setObjectName("ErrorLabel"); self._create_error.setWordWrap(True)

        due_row = QHBoxLayout()
        due_row.addWidget(self._new_has_due)
        due_row.addWidget(self._new_due, 1)

        form_box = QGroupBox("New task")
        form = QFormLayout(form_box)
        form.addRow("Title", self._new_title)
        form.addRow("Priority", self._new_priority)
        form.addRow("Due date", due_row)
        form.addRow("Description", self._new_description)
        form.addRow("Assignees", self._new_assignees)
        form.addRow(self._btn_create)
        form.addRow(self._create_error)
        form_box.setMaximumWidth(360)

        # ---------- Lanes ----------
        lanes_holder = QWidget()
        lanes_row = QHBoxLayout(lanes_holder)
        lanes_row.setContentsMargins(0, 0, 0, 0)
        self._lanes: dict[str, LaneList] = {}
        self._lane_boxes: dict[str, QGroupBox] = {}
        for key in STATUS_ORDER:
            box = QGroupBox(STATUS_LABELS[key])
            lane = LaneList(key)
            lane.taskDropped.connect(self._on_task_dropped)
            v = QVBoxLayout(box)
            v.addWidget(lane)
            lanes_row.addWidget(box, 1)
            self._lanes[key] = lane
            self._lane_boxes[key] = box

        split = QSplitter(Qt.Horizontal, self)
        split.addWidget(form_box)
        split.addWidget(lanes_holder)
        split.setStretchFactor(0, 1)
        split.setStretchFactor(1, 3)

        root = QVBoxLayout(self)
        root.addLayout(head)
        root.addWidget(self._subtitle)
        root.addWidget(self._project_error)
        root.addWidget(self._tasks_error)
        root.addWidget(split, 1)

        # ---------- Wire ----------
        self._btn_back.clicked.connect(self._on_back)
        self._btn_delete_project.clicked.connect(self._on_delete_project)
        self._btn_create.clicked.connect(self._on_create)

        self._vm.projectLoaded.connect(self._on_project)
        self._vm.projectError.connect(self._project_error.setText)
        self._vm.tasksChanged.connect(self._on_tasks)
        self._vm.tasksError.connect(self._tasks_error.setText)
        self._vm.loadingChanged.connect(self._on_loading)
        self._vm.membersLoaded.connect(self._on_members)
        self._vm.taskCreated.connect(self._on_task_created)
        self._vm.createFailed.connect(self._create_error.setText)
        self._vm.alert.connect(lambda msg: alert(self, msg))

    # ---------- VM → UI ----------
    def _on_project(self, project) -> None:
        self._btn_delete_project.setEnabled(project is not None)
        self._btn_create.setEnabled(project is not None)
        if project is None:
            self._title.setText("<h2>Object</h2>")
            self._subtitle.setText("")
            return
        self._project_error.setText("")
        self._title.setText(heading(project.name))
        bits = [b for b in (project.code, project.address, project.description) if b]
        self._subtitle.setText(" · ".join(bits))

    def _on_tasks(self, lanes) -> None:
        self._lanes_state = lanes
        self._render_lanes()

    def _on_members(self, members) -> None:
        self._new_assignees.clear()
        for m in members:
            item = QListWidgetItem(m.label)
            item.setData(Qt.UserRole, m.user_id)
            item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
            item.setCheckState(Qt.Unchecked)
            self._new_assignees.addItem(item)
        # card labels and assignee menus depend on the member list
        self._render_lanes()

    def _render_lanes(self) -> None:
        if self._lanes_state is None:
            return
        members = self._vm.members
        for key in STATUS_ORDER:
            lane = self._lanes[key]
            rows = self._lanes_state.get(key, [])
            lane.clear()
            for task in rows:
                item = QListWidgetItem()
                item.setData(Qt.UserRole, task.id)
                card = TaskCard(task, members, self._vm.member_label)
                card.statusRequested.connect(self._on_status_requested)
                card.assigneeToggled.connect(self._on_assignee_toggled)
                card.deleteRequested.connect(self._on_delete_task)
                item.setSizeHint(card.sizeHint())
                lane.addItem(item)
                lane.setItemWidget(item, card)
            self._lane_boxes[key].setTitle(f"{STATUS_LABELS[key]} ({len(rows)})")

    def _on_loading(self, what: str, busy: bool) -> None:
        if what == "create":
            self._btn_create.setEnabled(not busy)
        self._status.setText(f"Loading {what}…" if busy and what != "create" else "")

    def _on_task_created(self, _task) -> None:
        self._new_title.clear()
        self._new_description.clear()
        self._new_has_due.setChecked(False)
        self._new_priority.setCurrentIndex(PRIORITY_ORDER.index(DEFAULT_PRIORITY))
        self._create_error.setText("")
        for i in range(self._new_assignees.count()):
            self._new_assignees.item(i).setCheckState(Qt.Unchecked)

    # ---------- UI → VM ----------
    def _checked_assignees(self) -> List[str]:
        out: List[str] = []
        for i in range(self._new_assignees.count()):
            item = self._new_assignees.item(i)
            if item.checkState() == Qt.Checked:
                out.append(str(item.data(Qt.UserRole)))
        return out

    def _due_value(self) -> Optional[str]:
        if not self._new_has_due.isChecked():
            return None
        return self._new_due.date().toString("yyyy-MM-dd")

    def _on_create(self) -> None:
        self._create_error.setText("")
        self._vm.run(self._vm.create_task(
            title=self._new_title.text(),
            description=self._new_description.toPlainText(),
            due_date=self._due_value(),
            priority=self._new_priority.currentData(),
            assignee_ids=self._checked_assignees(),
        ))

    def _on_task_dropped(self, task_id: str, lane: str) -> None:
        self._vm.run(self._vm.change_status(task_id, lane))

    def _on_status_requested(self, task_id: str, status: str) -> None:
        self._vm.run(self._vm.change_status(task_id, status))

    def _on_assignee_toggled(self, task_id: str, user_id: str, present: bool) -> None:
        self._vm.run(self._vm.toggle_assignee(task_id, user_id, present))

    def _on_delete_task(self, task_id: str) -> None:
        if confirm(self, "Delete task", "Delete this task?"):
            self._vm.run(self._vm.delete_task(task_id))

    def _on_delete_project(self) -> None:
        project = self._vm.project
        name = project.name if project else ""
        if confirm(self, "Delete object", f"Delete object “{name}” with all its tasks?"):
            self._vm.run(self._vm.delete_project())

    def _on_back(self) -> None:
        project = self._vm.project
        self.backRequested.emit(project.workspace_id if project else "")
