# Rev 0.2.0
# cyfrboard – ProjectRepository ("objects" inside a workspace)
from __future__ import annotations

from typing import List, Optional

from cyfrboard.models.entities import Project
from cyfrboard.repositories.gateway import SupabaseGateway, eq

PROJECT_COLUMNS = "id, workspace_id, name, code, description, address, status, created_at"


class ProjectRepository:
    def __init__(self, gateway: SupabaseGateway):
        self._gw = gateway

    # ---------- public API ----------

    async def list_projects(self, workspace_id: str) -> List[Project]:
        rows = await self._gw.select(
            "projects", PROJECT_COLUMNS,
            filters={"workspace_id": eq(workspace_id)},
            order="created_at.asc",
        )
        return [Project.from_row(r) for r in rows]

    async def get_project(self, project_id: str) -> Project:
        """Raises NoRowsError when the project is missing or hidden by RLS."""
        row = await self._gw.select(
            "projects", PROJECT_COLUMNS,
            filters={"id": eq(project_id)},
            single=True,
        )
        return Project.from_row(row)

    async def create_project(
        self,
        *,
        workspace_id: str,
        name: str,
        created_by: str,
        code: Optional[str] = None,
        address: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        row = await self._gw.insert(
            "projects",
            {
                "workspace_id": workspace_id,
                "name": name,
                "code": code or None,
                "address": address or None,
                "description": description or None,
                "created_by": created_by,
            },
            columns=PROJECT_COLUMNS,
            single=True,
        )
        return Project.from_row(row)

    async def delete_project(self, project_id: str) -> None:
        await self._gw.delete("projects", filters={"id": eq(project_id)})
