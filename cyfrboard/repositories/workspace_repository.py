# Rev 0.2.0
# cyfrboard – WorkspaceRepository (workspaces + workspace_members)
from __future__ import annotations

from typing import Any, Dict, List, Optional

from cyfrboard.models.entities import Membership, Workspace
from cyfrboard.models.types import OWNER_ROLE
from cyfrboard.repositories.gateway import NoRowsError, SupabaseGateway, eq

WORKSPACE_COLUMNS = "id, name, description, created_at"


class WorkspaceRepository:
    """
    Workspaces the caller can see, plus membership rows.
    Ordering is creation ascending everywhere.
    """

    def __init__(self, gateway: SupabaseGateway):
        self._gw = gateway

    # ---------- workspaces ----------

    async def list_workspaces_for_member(self, user_id: str) -> List[Workspace]:
        rows = await self._gw.select(
            "workspace_members",
            f"role, workspaces({WORKSPACE_COLUMNS})",
            filters={"user_id": eq(user_id)},
        )
        out: List[Workspace] = []
        for r in rows:
            ws = r.get("workspaces")
            if not ws:
                continue
            out.append(Workspace.from_row(ws, role=r.get("role")))
        # embedded rows cannot be ordered by the parent query
        out.sort(key=lambda w: (w.created_at or "", w.id))
        return out

    async def get_workspace(self, workspace_id: str) -> Workspace:
        row = await self._gw.select(
            "workspaces", WORKSPACE_COLUMNS,
            filters={"id": eq(workspace_id)},
            single=True,
        )
        return Workspace.from_row(row)

    async def create_workspace(self, *, name: str, description: Optional[str], created_by: str) -> Workspace:
        row = await self._gw.insert(
            "workspaces",
            {"name": name, "description": description or None, "created_by": created_by},
            columns=WORKSPACE_COLUMNS,
            single=True,
        )
        return Workspace.from_row(row)

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._gw.delete("workspaces", filters={"id": eq(workspace_id)})

    # ---------- memberships ----------

    async def add_membership(self, *, workspace_id: str, user_id: str, role: str = OWNER_ROLE) -> Membership:
        await self._gw.insert(
            "workspace_members",
            {"workspace_id": workspace_id, "user_id": user_id, "role": role},
            columns="workspace_id",
        )
        return Membership(workspace_id=workspace_id, user_id=user_id, role=role)

    async def get_membership_role(self, workspace_id: str, user_id: str) -> Optional[str]:
        try:
            row: Dict[str, Any] = await self._gw.select(
                "workspace_members", "role",
                filters={"workspace_id": eq(workspace_id), "user_id": eq(user_id)},
                single=True,
            )
        except NoRowsError:
            return None
        return row.get("role")

    async def list_workspace_members(self, workspace_id: str) -> List[str]:
        rows = await self._gw.select(
            "workspace_members", "user_id",
            filters={"workspace_id": eq(workspace_id)},
        )
        ids: List[str] = []
        for r in rows:
            uid = str(r["user_id"])
            if uid not in ids:
                ids.append(uid)
        return ids
