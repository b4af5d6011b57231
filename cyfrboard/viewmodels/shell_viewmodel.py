# Rev 0.2.0
# Navigation shell: its own membership fetch, never shared with the list view
from __future__ import annotations

import asyncio
import logging
from typing import List

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Workspace
from cyfrboard.repositories.gateway import GatewayError
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)


class ShellViewModel(QObject):
    workspacesChanged = Signal(object)
    identityChanged = Signal(object)

    def __init__(self, session, workspaces_repo):
        super().__init__()
        self._session = session
        self._repo = workspaces_repo
        self._scope = ViewScope("shell")
        self._workspaces: List[Workspace] = []
        session.identityChanged.connect(self._on_identity_changed)

    @property
    def workspaces(self) -> List[Workspace]:
        return list(self._workspaces)

    def refresh(self) -> asyncio.Task:
        return self._scope.spawn(self.load())

    def run(self, coro) -> asyncio.Task:
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    async def load(self) -> List[Workspace]:
        identity = self._session.identity
        if identity is None:
            self._set([])
            return []
        try:
            rows = await self._repo.list_workspaces_for_member(identity.id)
        except GatewayError as exc:
            # navigation is secondary; keep the last known list
            log.warning("Navigation workspaces failed: %s", exc.message)
            return self.workspaces
        self._set(rows)
        return rows

    async def sign_out(self) -> None:
        await self._session.sign_out()

    def _set(self, rows: List[Workspace]) -> None:
        if self._scope.closed:
            return
        self._workspaces = list(rows)
        self.workspacesChanged.emit(list(self._workspaces))

    def _on_identity_changed(self, identity) -> None:
        self.identityChanged.emit(identity)
        if self._scope.closed:
            return
        if identity is None:
            self._set([])
        else:
            self.refresh()
