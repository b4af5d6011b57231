# Rev 0.2.0
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Project, Workspace
from cyfrboard.repositories.gateway import GatewayError, NoRowsError
from cyfrboard.services.ownership import NOT_OWNER, is_workspace_owner
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)

WORKSPACE_NOT_FOUND = "Workspace not found or no access."


class WorkspaceViewModel(QObject):
    """
    One workspace and its projects ("objects").
    Emits:
      - workspaceLoaded(Workspace | None)
      - projectsChanged(list[Project])
      - errorChanged(str)          "" clears
      - loadingChanged(str, bool)  what in {"workspace", "projects"}
      - projectCreated(Project)
      - createFailed(str)
      - alert(str)
      - workspaceDeleted(str)
    """

    workspaceLoaded = Signal(object)
    projectsChanged = Signal(object)
    errorChanged = Signal(str)
    loadingChanged = Signal(str, bool)
    projectCreated = Signal(object)
    createFailed = Signal(str)
    alert = Signal(str)
    workspaceDeleted = Signal(str)

    def __init__(self, session, workspaces_repo, projects_repo):
        super().__init__()
        self._session = session
        self._workspaces = workspaces_repo
        self._projects_repo = projects_repo
        self._scope = ViewScope("workspace")
        self._workspace_id: Optional[str] = None
        self._workspace: Optional[Workspace] = None
        self._projects: List[Project] = []

    @property
    def workspace(self) -> Optional[Workspace]:
        return self._workspace

    @property
    def projects(self) -> List[Project]:
        return list(self._projects)

    def start(self, workspace_id: str) -> asyncio.Task:
        return self._scope.spawn(self.open(workspace_id))

    def run(self, coro) -> asyncio.Task:
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    def _set_projects(self, projects: List[Project]) -> None:
        if self._scope.closed:
            return
        self._projects = list(projects)
        self.projectsChanged.emit(list(self._projects))

    # ---- queries ----
    async def open(self, workspace_id: str) -> None:
        self._workspace_id = workspace_id
        identity = await self._session.require(self.errorChanged.emit)
        if identity is None:
            return
        await asyncio.gather(self.load_workspace(), self.load_projects())

    async def load_workspace(self) -> Optional[Workspace]:
        self.loadingChanged.emit("workspace", True)
        try:
            ws = await self._workspaces.get_workspace(self._workspace_id)
        except NoRowsError:
            return self._workspace_failed(WORKSPACE_NOT_FOUND)
        except GatewayError as exc:
            log.warning("Loading workspace %s failed: %s", self._workspace_id, exc.message)
            return self._workspace_failed(exc.message)
        finally:
            self.loadingChanged.emit("workspace", False)
        if self._scope.closed:
            return None
        self._workspace = ws
        self.workspaceLoaded.emit(ws)
        return ws

    def _workspace_failed(self, message: str) -> None:
        self._workspace = None
        if not self._scope.closed:
            self.errorChanged.emit(message)
            self.workspaceLoaded.emit(None)
        return None

    async def load_projects(self) -> None:
        self.loadingChanged.emit("projects", True)
        try:
            rows = await self._projects_repo.list_projects(self._workspace_id)
        except GatewayError as exc:
            log.warning("Loading projects of %s failed: %s", self._workspace_id, exc.message)
            if not self._scope.closed:
                self.errorChanged.emit(exc.message)
            return
        finally:
            self.loadingChanged.emit("projects", False)
        self._set_projects(rows)

    # ---- commands ----
    async def create_project(
        self,
        *,
        name: str,
        code: Optional[str] = None,
        address: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Project]:
        name = (name or "").strip()
        if not name:
            self.createFailed.emit("Project name is required.")
            return None
        if self._workspace_id is None:
            return None
        identity = await self._session.require(self.createFailed.emit)
        if identity is None:
            return None
        try:
            project = await self._projects_repo.create_project(
                workspace_id=self._workspace_id,
                name=name,
                created_by=identity.id,
                code=(code or "").strip() or None,
                address=(address or "").strip() or None,
                description=(description or "").strip() or None,
            )
        except GatewayError as exc:
            log.warning("Creating project failed: %s", exc.message)
            self.createFailed.emit(exc.message)
            return None
        self._set_projects([*self._projects, project])
        self.projectCreated.emit(project)
        return project

    async def delete_project(self, project_id: str) -> bool:
        """Caller has already confirmed."""
        try:
            await self._projects_repo.delete_project(project_id)
        except GatewayError as exc:
            log.warning("Deleting project %s failed: %s", project_id, exc.message)
            self.alert.emit(exc.message)
            return False
        self._set_projects([p for p in self._projects if p.id != project_id])
        return True

    async def delete_workspace(self) -> bool:
        if self._workspace_id is None:
            return False
        identity = await self._session.require(self.alert.emit)
        if identity is None:
            return False
        try:
            if not await is_workspace_owner(self._workspaces, self._workspace_id, identity.id):
                self.alert.emit(NOT_OWNER)
                return False
            await self._workspaces.delete_workspace(self._workspace_id)
        except GatewayError as exc:
            log.warning("Deleting workspace %s failed: %s", self._workspace_id, exc.message)
            self.alert.emit(exc.message)
            return False
        self.workspaceDeleted.emit(self._workspace_id)
        return True
