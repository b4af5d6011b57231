# cyfrboard/ui/panels/lane_list.py
# Rev 0.2.0 - kanban lane + task card
from __future__ import annotations

from typing import Callable, Iterable

from PySide6.QtCore import Qt, Signal, QMimeData
from PySide6.QtWidgets import (
    QAbstractItemView, QComboBox, QFrame, QHBoxLayout, QLabel, QListWidget,
    QMenu, QPushButton, QToolButton, QVBoxLayout,
)

from cyfrboard.models.entities import Member, Task
from cyfrboard.models.types import PRIORITY_LABELS, STATUS_LABELS, STATUS_ORDER, coerce_status
from cyfrboard.ui.markup import heading

TASK_MIME = "application/x-cyfrboard-task"


class LaneList(QListWidget):
    """
    One status lane. Dragging a card out of it carries only the task id;
    the drop never moves the item itself, the board re-renders from VM state.
    """

    taskDropped = Signal(str, str)  # task_id, lane

    def __init__(self, lane: str, parent=None):
        super().__init__(parent)
        self._lane = lane
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setDropIndicatorShown(True)
        self.setDragDropMode(QAbstractItemView.DragDrop)
        self.setDefaultDropAction(Qt.CopyAction)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setVerticalScrollMode(QAbstractItemView.ScrollPerPixel)
        self.setSpacing(4)

    @property
    def lane(self) -> str:
        return self._lane

    def mimeTypes(self):
        return [TASK_MIME]

    def mimeData(self, items):
        md = QMimeData()
        if items:
            md.setData(TASK_MIME, str(items[0].data(Qt.UserRole)).encode("utf-8"))
        return md

    def dragEnterEvent(self, e):
        if e.mimeData().hasFormat(TASK_MIME):
            e.acceptProposedAction()
        else:
            e.ignore()

    def dragMoveEvent(self, e):
        if e.mimeData().hasFormat(TASK_MIME):
            e.acceptProposedAction()
        else:
            e.ignore()

    def dropEvent(self, e):
        if not e.mimeData().hasFormat(TASK_MIME):
            e.ignore()
            return
        task_id = bytes(e.mimeData().data(TASK_MIME)).decode("utf-8")
        # CopyAction keeps the source list from removing its item
        e.setDropAction(Qt.CopyAction)
        e.accept()
        if task_id:
            self.taskDropped.emit(task_id, self._lane)


class TaskCard(QFrame):
    statusRequested = Signal(str, str)          # task_id, status
    assigneeToggled = Signal(str, str, bool)    # task_id, user_id, present
    deleteRequested = Signal(str)               # task_id

    def __init__(self, task: Task, members: Iterable[Member], label_for: Callable[[str], str], parent=None):
        super().__init__(parent)
        self._task = task
        self.setFrameShape(QFrame.StyledPanel)
        self.setObjectName("TaskCard")

        title = QLabel(heading(task.title, "b"))
        title.setWordWrap(True)

        meta = [PRIORITY_LABELS.get(task.priority or "", task.priority or "")]
        if task.due_date:
            meta.append(f"due {task.due_date}")
        meta_lbl = QLabel(" · ".join(m for m in meta if m))
        meta_lbl.setProperty("dim", True)

        names = ", ".join(label_for(uid) for uid in task.assignees)
        who = QLabel(names or "Unassigned")
        who.setWordWrap(True)
        who.setTextFormat(Qt.PlainText)
        who.setProperty("dim", not names)

        # status selector
        self._status = QComboBox()
        for key in STATUS_ORDER:
            self._status.addItem(STATUS_LABELS[key], key)
        self._status.setCurrentIndex(STATUS_ORDER.index(coerce_status(task.status)))
        self._status.currentIndexChanged.connect(self._on_status)

        # assignee toggles
        btn_people = QToolButton()
        btn_people.setText("Assignees")
        btn_people.setPopupMode(QToolButton.InstantPopup)
        menu = QMenu(btn_people)
        known = []
        for m in members:
            known.append(m.user_id)
            self._add_toggle(menu, m.user_id, m.label)
        for uid in task.assignees:
            if uid not in known:
                self._add_toggle(menu, uid, label_for(uid))
        if menu.isEmpty():
            menu.addAction("No members").setEnabled(False)
        btn_people.setMenu(menu)

        btn_delete = QPushButton("Delete")
        btn_delete.clicked.connect(lambda: self.deleteRequested.emit(self._task.id))

        row = QHBoxLayout()
        row.addWidget(self._status, 1)
        row.addWidget(btn_people)
        row.addWidget(btn_delete)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(8, 6, 8, 6)
        lay.addWidget(title)
        if task.description:
            desc = QLabel(task.description)
            desc.setTextFormat(Qt.PlainText)
            desc.setWordWrap(True)
            lay.addWidget(desc)
        lay.addWidget(meta_lbl)
        lay.addWidget(who)
        lay.addLayout(row)

    def _add_toggle(self, menu: QMenu, user_id: str, label: str) -> None:
        act = menu.addAction(label)
        act.setCheckable(True)
        act.setChecked(user_id in self._task.assignees)
        act.toggled.connect(lambda checked, uid=user_id: self.assigneeToggled.emit(self._task.id, uid, checked))

    def _on_status(self, index: int) -> None:
        key = self._status.itemData(index)
        if key:
            self.statusRequested.emit(self._task.id, str(key))
