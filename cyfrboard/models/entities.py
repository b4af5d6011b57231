# Rev 0.2.0
"""Entities as the client sees them (authoritative rows live in the remote store)."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .types import DEFAULT_PRIORITY, DEFAULT_STATUS


@dataclass(frozen=True)
class Identity:
    id: str
    email: Optional[str] = None


@dataclass
class Workspace:
    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    role: Optional[str] = None      # current identity's membership role, when known

    @classmethod
    def from_row(cls, row: Dict[str, Any], role: Optional[str] = None) -> "Workspace":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            description=row.get("description"),
            created_at=row.get("created_at"),
            role=role if role is not None else row.get("role"),
        )


@dataclass(frozen=True)
class Membership:
    workspace_id: str
    user_id: str
    role: str


@dataclass
class Project:
    id: str
    workspace_id: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Project":
        return cls(
            id=str(row["id"]),
            workspace_id=str(row.get("workspace_id") or ""),
            name=row.get("name") or "",
            code=row.get("code"),
            description=row.get("description"),
            address=row.get("address"),
            status=row.get("status"),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    project_id: Optional[str] = None
    workspace_id: Optional[str] = None
    description: Optional[str] = None
    status: str = DEFAULT_STATUS
    priority: Optional[str] = DEFAULT_PRIORITY
    due_date: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    assignees: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Task":
        # assignees arrive embedded as [{"user_id": ...}, ...] or as a flat id list
        raw = row.get("task_assignees")
        if raw is None:
            raw = row.get("assignees") or []
        ids: list[str] = []
        for a in raw:
            uid = str(a["user_id"] if isinstance(a, dict) else a)
            if uid not in ids:
                ids.append(uid)
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            project_id=row.get("project_id"),
            workspace_id=row.get("workspace_id"),
            description=row.get("description"),
            status=row.get("status") or DEFAULT_STATUS,
            priority=row.get("priority"),
            due_date=row.get("due_date"),
            created_at=row.get("created_at"),
            created_by=row.get("created_by"),
            assignees=tuple(ids),
        )


@dataclass
class Profile:
    """first_name holds the surname and second_name the given name (account form labels)."""
    id: str
    first_name: Optional[str] = None
    second_name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(row["id"]),
            first_name=row.get("first_name"),
            second_name=row.get("second_name"),
            phone=row.get("phone"),
        )


@dataclass(frozen=True)
class Member:
    """A workspace member offered as an assignee candidate."""
    user_id: str
    label: str
