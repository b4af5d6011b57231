# Rev 0.2.0
# cyfrboard – TaskRepository (tasks + task_assignees join table)
from __future__ import annotations

from typing import Iterable, List, Optional

from cyfrboard.models.entities import Task
from cyfrboard.models.types import DEFAULT_PRIORITY, DEFAULT_STATUS
from cyfrboard.repositories.gateway import SupabaseGateway, eq

TASK_COLUMNS = "id, workspace_id, project_id, title, description, status, priority, due_date, created_at, created_by"
TASK_WITH_ASSIGNEES = f"{TASK_COLUMNS}, task_assignees(user_id)"


class TaskRepository:
    """
    Task CRUD. Assignees are separate join rows; writing them is never part of
    the task row itself.
    """

    def __init__(self, gateway: SupabaseGateway):
        self._gw = gateway

    # -------------------------
    # Listings
    # -------------------------
    async def list_tasks(self, project_id: str) -> List[Task]:
        rows = await self._gw.select(
            "tasks", TASK_WITH_ASSIGNEES,
            filters={"project_id": eq(project_id)},
            order="created_at.asc",
        )
        return [Task.from_row(r) for r in rows]

    # -------------------------
    # CRUD
    # -------------------------
    async def create_task(
        self,
        *,
        workspace_id: str,
        project_id: str,
        title: str,
        created_by: str,
        description: Optional[str] = None,
        priority: Optional[str] = DEFAULT_PRIORITY,
        due_date: Optional[str] = None,
    ) -> Task:
        row = await self._gw.insert(
            "tasks",
            {
                "workspace_id": workspace_id,
                "project_id": project_id,
                "title": title,
                "description": description or None,
                "status": DEFAULT_STATUS,
                "priority": priority or DEFAULT_PRIORITY,
                "due_date": due_date or None,
                "created_by": created_by,
            },
            columns=TASK_COLUMNS,
            single=True,
        )
        return Task.from_row(row)

    async def update_task_status(self, task_id: str, status: str) -> None:
        await self._gw.update("tasks", {"status": status}, filters={"id": eq(task_id)})

    async def delete_task(self, task_id: str) -> None:
        await self._gw.delete("tasks", filters={"id": eq(task_id)})

    # -------------------------
    # Assignees
    # -------------------------
    async def add_assignees(self, task_id: str, user_ids: Iterable[str]) -> List[str]:
        rows = [{"task_id": task_id, "user_id": uid} for uid in user_ids]
        if not rows:
            return []
        inserted = await self._gw.insert("task_assignees", rows, columns="user_id")
        return [str(r["user_id"]) for r in inserted]

    async def add_assignee(self, task_id: str, user_id: str) -> None:
        await self.add_assignees(task_id, [user_id])

    async def remove_assignee(self, task_id: str, user_id: str) -> None:
        await self._gw.delete(
            "task_assignees",
            filters={"task_id": eq(task_id), "user_id": eq(user_id)},
            columns="task_id",
        )
