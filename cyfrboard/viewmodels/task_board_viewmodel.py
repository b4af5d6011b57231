# Rev 0.2.0 - optimistic board + reconcile by full re-fetch
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Member, Project, Task
from cyfrboard.models.types import DEFAULT_PRIORITY
from cyfrboard.repositories.gateway import GatewayError, NoRowsError
from cyfrboard.services.board_rules import (
    Lanes, dedupe, find_task, group_by_status, is_lane_change,
    with_assignee, with_status, without_task,
)
from cyfrboard.services.optimistic import run_optimistic
from cyfrboard.services.profile_rules import display_name, placeholder_label
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found or no access."


class TaskBoardViewModel(QObject):
    """
    VM for one project's kanban board.
    Emits:
      - projectLoaded(project: Project | None)
      - projectError(message: str)
      - tasksChanged(lanes: dict[str, list[Task]])
      - tasksError(message: str)          "" clears
      - loadingChanged(what: str, busy: bool)   what in {"project", "tasks", "members", "create"}
      - membersLoaded(members: list[Member])
      - taskCreated(task: Task)           the form may be cleared
      - createFailed(message: str)        the form keeps its values
      - alert(message: str)               blocking message box
      - projectDeleted(workspace_id: str)
    """

    projectLoaded = Signal(object)
    projectError = Signal(str)
    tasksChanged = Signal(object)
    tasksError = Signal(str)
    loadingChanged = Signal(str, bool)
    membersLoaded = Signal(object)
    taskCreated = Signal(object)
    createFailed = Signal(str)
    alert = Signal(str)
    projectDeleted = Signal(str)

    def __init__(self, session, projects_repo, tasks_repo, workspaces_repo, profiles_repo):
        super().__init__()
        self._session = session
        self._projects = projects_repo
        self._tasks_repo = tasks_repo
        self._workspaces = workspaces_repo
        self._profiles = profiles_repo
        self._scope = ViewScope("task-board")

        self._project_id: Optional[str] = None
        self._project: Optional[Project] = None
        self._tasks: Tuple[Task, ...] = ()
        self._lanes: Optional[Lanes] = None
        self._lanes_for: Optional[Tuple[Task, ...]] = None
        self._members: List[Member] = []
        self._assignee_intent: Dict[Tuple[str, str], bool] = {}

    # ---- state ----
    @property
    def scope(self) -> ViewScope:
        return self._scope

    @property
    def project(self) -> Optional[Project]:
        return self._project

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._tasks

    @property
    def members(self) -> List[Member]:
        return list(self._members)

    def lanes(self) -> Lanes:
        # recomputed only when the collection object is replaced
        if self._lanes is None or self._lanes_for is not self._tasks:
            self._lanes = group_by_status(self._tasks)
            self._lanes_for = self._tasks
        return self._lanes

    def member_label(self, user_id: str) -> str:
        for m in self._members:
            if m.user_id == user_id:
                return m.label
        return placeholder_label(user_id)

    def _set_tasks(self, tasks: Iterable[Task]) -> None:
        if self._scope.closed:
            return
        self._tasks = tuple(tasks)
        self.tasksChanged.emit(self.lanes())

    # ---- lifecycle ----
    def start(self, project_id: str) -> asyncio.Task:
        return self._scope.spawn(self.open(project_id))

    def run(self, coro) -> asyncio.Task:
        """Schedule a UI-triggered operation inside this view's scope."""
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    async def open(self, project_id: str) -> None:
        """session → (project → members) ∥ tasks"""
        self._project_id = project_id
        identity = await self._session.require(self._session_failed)
        if identity is None:
            return
        await asyncio.gather(self._project_then_members(project_id), self.load_tasks())

    def _session_failed(self, message: str) -> None:
        if not self._scope.closed:
            self.tasksError.emit(message)

    async def _project_then_members(self, project_id: str) -> None:
        project = await self.load_project(project_id)
        if project is not None:
            await self.load_members(project.workspace_id)

    # ---- queries ----
    async def load_project(self, project_id: str) -> Optional[Project]:
        self.loadingChanged.emit("project", True)
        try:
            project = await self._projects.get_project(project_id)
        except NoRowsError:
            log.info("Project %s not visible", project_id)
            return self._project_failed(PROJECT_NOT_FOUND)
        except GatewayError as exc:
            log.warning("Loading project %s failed: %s", project_id, exc.message)
            return self._project_failed(exc.message)
        finally:
            self.loadingChanged.emit("project", False)
        if self._scope.closed:
            return None
        self._project = project
        self.projectLoaded.emit(project)
        return project

    def _project_failed(self, message: str) -> None:
        self._project = None
        if not self._scope.closed:
            self.projectError.emit(message)
            self.projectLoaded.emit(None)
        return None

    async def load_tasks(self) -> None:
        """Authoritative re-read; also the reconciliation step after any failed write."""
        if self._project_id is None:
            self._set_tasks(())
            return
        self.loadingChanged.emit("tasks", True)
        self.tasksError.emit("")
        try:
            tasks = await self._tasks_repo.list_tasks(self._project_id)
        except GatewayError as exc:
            log.warning("Loading tasks for %s failed: %s", self._project_id, exc.message)
            self._set_tasks(())
            if not self._scope.closed:
                self.tasksError.emit(exc.message)
            return
        finally:
            self.loadingChanged.emit("tasks", False)
        self._set_tasks(tasks)

    async def load_members(self, workspace_id: str) -> List[Member]:
        self.loadingChanged.emit("members", True)
        try:
            try:
                ids = await self._workspaces.list_workspace_members(workspace_id)
            except GatewayError as exc:
                log.warning("Loading members of %s failed: %s", workspace_id, exc.message)
                ids = []
            try:
                profiles = {p.id: p for p in await self._profiles.get_profiles(ids)}
            except GatewayError as exc:
                # names are cosmetic; keep the candidates with placeholder labels
                log.warning("Profile lookup failed, using placeholders: %s", exc.message)
                profiles = {}
        finally:
            self.loadingChanged.emit("members", False)
        members = [Member(user_id=uid, label=display_name(profiles.get(uid), uid)) for uid in ids]
        if not self._scope.closed:
            self._members = members
            self.membersLoaded.emit(list(members))
        return members

    # ---- commands ----
    async def create_task(
        self,
        *,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
        priority: Optional[str] = DEFAULT_PRIORITY,
        assignee_ids: Iterable[str] = (),
    ) -> Optional[Task]:
        title = (title or "").strip()
        if not title:
            self.createFailed.emit("Task title is required.")
            return None
        if self._project is None:
            self.createFailed.emit(PROJECT_NOT_FOUND)
            return None
        identity = await self._session.require(self.createFailed.emit)
        if identity is None:
            return None

        member_ids = {m.user_id for m in self._members}
        chosen = [uid for uid in dedupe(assignee_ids) if uid in member_ids]

        self.loadingChanged.emit("create", True)
        try:
            try:
                task = await self._tasks_repo.create_task(
                    workspace_id=self._project.workspace_id,
                    project_id=self._project.id,
                    title=title,
                    created_by=identity.id,
                    description=(description or "").strip() or None,
                    priority=priority,
                    due_date=due_date or None,
                )
            except GatewayError as exc:
                log.warning("Creating task failed: %s", exc.message)
                self.createFailed.emit(exc.message or "Could not create the task.")
                return None

            recorded: Tuple[str, ...] = ()
            if chosen:
                try:
                    recorded = tuple(await self._tasks_repo.add_assignees(task.id, chosen))
                except GatewayError as exc:
                    # the task stays; it just starts unassigned
                    log.warning("Task %s created but assignees were not saved: %s", task.id, exc.message)
        finally:
            self.loadingChanged.emit("create", False)

        task = replace(task, assignees=recorded)
        self._set_tasks((*self._tasks, task))
        self.taskCreated.emit(task)
        return task

    async def change_status(self, task_id: str, new_status: str) -> bool:
        """Drag-and-drop between lanes or the card's status selector."""
        task = find_task(self._tasks, task_id)
        if task is None or not is_lane_change(task, new_status):
            return False
        return await run_optimistic(
            apply=lambda: self._set_tasks(with_status(self._tasks, task_id, new_status)),
            commit=lambda: self._tasks_repo.update_task_status(task_id, new_status),
            reconcile=self.load_tasks,
            label=f"status change {task_id}→{new_status}",
        )

    async def toggle_assignee(self, task_id: str, user_id: str, present: bool) -> bool:
        task = find_task(self._tasks, task_id)
        if task is None:
            return False
        if (user_id in task.assignees) == present:
            return True
        key = (task_id, user_id)

        def show(wanted: bool) -> None:
            current = find_task(self._tasks, task_id)
            if current is not None and (user_id in current.assignees) != wanted:
                self._set_tasks(with_assignee(self._tasks, task_id, user_id, wanted))

        def apply() -> None:
            self._assignee_intent[key] = present
            show(present)

        async def commit() -> None:
            if present:
                await self._tasks_repo.add_assignee(task_id, user_id)
            else:
                await self._tasks_repo.remove_assignee(task_id, user_id)
            # a re-read after an earlier failed toggle may have replaced the
            # local state; show the most recent click again
            show(self._assignee_intent.get(key, present))

        # writes for one task go out in click order; a failed write's re-read
        # finishes before the next queued write starts
        return await run_optimistic(
            apply=apply,
            commit=commit,
            reconcile=self.load_tasks,
            on_error=lambda exc: self.alert.emit(exc.message),
            label=f"assignee {'add' if present else 'remove'} {task_id}",
            serial=self._scope.serial(("assignees", task_id)),
        )

    async def delete_task(self, task_id: str) -> bool:
        """Caller has already confirmed with the user."""
        if find_task(self._tasks, task_id) is None:
            return False
        return await run_optimistic(
            apply=lambda: self._set_tasks(without_task(self._tasks, task_id)),
            commit=lambda: self._tasks_repo.delete_task(task_id),
            reconcile=self.load_tasks,
            on_error=lambda exc: self.alert.emit(exc.message),
            label=f"delete task {task_id}",
        )

    async def delete_project(self) -> bool:
        """Not optimistic: success navigates away, failure leaves everything as is."""
        project = self._project
        if project is None:
            return False
        try:
            await self._projects.delete_project(project.id)
        except GatewayError as exc:
            log.warning("Deleting project %s failed: %s", project.id, exc.message)
            self.alert.emit(exc.message)
            return False
        log.info("Project %s deleted", project.id)
        self.projectDeleted.emit(project.workspace_id)
        return True
