# Rev 0.2.0
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Workspace
from cyfrboard.models.types import OWNER_ROLE
from cyfrboard.repositories.gateway import GatewayError
from cyfrboard.services.ownership import NOT_OWNER, is_workspace_owner
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)

OWNER_NOT_SAVED = "Workspace created, but the owner membership could not be saved."


class WorkspacesViewModel(QObject):
    """
    Workspaces the current identity belongs to.
    Emits:
      - workspacesChanged(list[Workspace])
      - errorChanged(str)        "" clears
      - warning(str)             soft, non-blocking
      - loadingChanged(bool)
      - workspaceCreated(Workspace)
      - alert(str)
    """

    workspacesChanged = Signal(object)
    errorChanged = Signal(str)
    warning = Signal(str)
    loadingChanged = Signal(bool)
    workspaceCreated = Signal(object)
    alert = Signal(str)

    def __init__(self, session, workspaces_repo):
        super().__init__()
        self._session = session
        self._repo = workspaces_repo
        self._scope = ViewScope("workspaces")
        self._workspaces: List[Workspace] = []

    @property
    def workspaces(self) -> List[Workspace]:
        return list(self._workspaces)

    def start(self) -> asyncio.Task:
        return self._scope.spawn(self.open())

    def run(self, coro) -> asyncio.Task:
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    def _set(self, workspaces: List[Workspace]) -> None:
        if self._scope.closed:
            return
        self._workspaces = list(workspaces)
        self.workspacesChanged.emit(list(self._workspaces))

    # ---- queries ----
    async def open(self) -> None:
        identity = await self._session.require(self.errorChanged.emit)
        if identity is None:
            return
        await self.load()

    async def load(self) -> None:
        identity = self._session.identity
        if identity is None:
            return
        self.loadingChanged.emit(True)
        self.errorChanged.emit("")
        try:
            rows = await self._repo.list_workspaces_for_member(identity.id)
        except GatewayError as exc:
            log.warning("Loading workspaces failed: %s", exc.message)
            if not self._scope.closed:
                self.errorChanged.emit(exc.message)
            return
        finally:
            self.loadingChanged.emit(False)
        self._set(rows)

    # ---- commands ----
    async def create_workspace(self, name: str, description: Optional[str] = None) -> Optional[Workspace]:
        name = (name or "").strip()
        if not name:
            self.errorChanged.emit("Workspace name is required.")
            return None
        identity = await self._session.require(self.errorChanged.emit)
        if identity is None:
            return None

        self.errorChanged.emit("")
        try:
            ws = await self._repo.create_workspace(
                name=name,
                description=(description or "").strip() or None,
                created_by=identity.id,
            )
        except GatewayError as exc:
            log.warning("Creating workspace failed: %s", exc.message)
            self.errorChanged.emit(exc.message or "Could not create the workspace.")
            return None

        # best effort: the workspace stays even if this fails
        try:
            await self._repo.add_membership(workspace_id=ws.id, user_id=identity.id, role=OWNER_ROLE)
            ws.role = OWNER_ROLE
        except GatewayError as exc:
            log.warning("Owner membership for workspace %s not saved: %s", ws.id, exc.message)
            self.warning.emit(OWNER_NOT_SAVED)

        self._set([*self._workspaces, ws])
        self.workspaceCreated.emit(ws)
        return ws

    async def delete_workspace(self, workspace_id: str) -> bool:
        """Caller has already confirmed. Only owners get as far as the remote delete."""
        identity = await self._session.require(self.alert.emit)
        if identity is None:
            return False
        try:
            if not await is_workspace_owner(self._repo, workspace_id, identity.id):
                self.alert.emit(NOT_OWNER)
                return False
            await self._repo.delete_workspace(workspace_id)
        except GatewayError as exc:
            log.warning("Deleting workspace %s failed: %s", workspace_id, exc.message)
            self.alert.emit(exc.message)
            return False
        log.info("Workspace %s deleted", workspace_id)
        self._set([w for w in self._workspaces if w.id != workspace_id])
        return True

    async def sign_out(self) -> None:
        await self._session.sign_out()
