# Rev 0.2.0

"""Pytest fixtures for cyfrboard (Rev 0.2.0)
In-memory stand-ins for the repositories, sharing one fake store so view
models can be driven end to end without a network.
"""
from __future__ import annotations

import asyncio
import itertools
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from cyfrboard.models.entities import Identity, Membership, Profile, Project, Task, Workspace
from cyfrboard.models.types import DEFAULT_PRIORITY, DEFAULT_STATUS, OWNER_ROLE
from cyfrboard.repositories.auth_repository import SignUpResult
from cyfrboard.repositories.gateway import (
    NO_ROWS_AFFECTED, NO_ROWS_CODE, AuthError, GatewayError, NoRowsError,
)
from cyfrboard.services.session_guard import SessionGuard

USER_U = Identity(id="uuuuuuuu-1111-4000-8000-000000000001", email="u@cyfr.test")
USER_V = Identity(id="vvvvvvvv-2222-4000-8000-000000000002", email="v@cyfr.test")


# --- Fake store ------------------------------------------------------------

class FakeStore:
    """
    Rows the fake repositories read and write. Deleting a workspace or project
    cascades to its children, like the foreign keys of the real schema.

    failures[name] = GatewayError  -> every call to `name` raises it
    gates[name] = asyncio.Event    -> calls to `name` wait for the event
    calls                          -> (name, args) in call order
    """

    def __init__(self) -> None:
        self._seq = itertools.count(1)
        self.workspaces: Dict[str, Dict[str, Any]] = {}
        self.members: List[Membership] = []
        self.projects: Dict[str, Dict[str, Any]] = {}
        self.tasks: Dict[str, Dict[str, Any]] = {}
        self.assignees: List[Tuple[str, str]] = []
        self.profiles: Dict[str, Profile] = {}
        self.failures: Dict[str, GatewayError] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[Tuple[str, tuple]] = []

    # ---- helpers ----
    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._seq):04d}"

    def stamp(self) -> str:
        return f"2024-05-01T08:00:00.{next(self._seq):06d}+00:00"

    def called(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]

    async def hit(self, name: str, *args) -> None:
        self.calls.append((name, args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        exc = self.failures.get(name)
        if exc is not None:
            raise exc

    # ---- seeding ----
    def add_workspace(self, name: str, *, owner: str, description: Optional[str] = None) -> str:
        wid = self.next_id("ws")
        self.workspaces[wid] = {"id": wid, "name": name, "description": description, "created_at": self.stamp()}
        self.members.append(Membership(workspace_id=wid, user_id=owner, role=OWNER_ROLE))
        return wid

    def add_member(self, workspace_id: str, user_id: str, role: str = "member") -> None:
        self.members.append(Membership(workspace_id=workspace_id, user_id=user_id, role=role))

    def add_project(self, workspace_id: str, name: str, **extra) -> str:
        pid = self.next_id("prj")
        self.projects[pid] = {
            "id": pid, "workspace_id": workspace_id, "name": name,
            "code": extra.get("code"), "description": extra.get("description"),
            "address": extra.get("address"), "status": extra.get("status", "active"),
            "created_at": self.stamp(),
        }
        return pid

    def add_task(self, project_id: str, title: str, *, status: str = DEFAULT_STATUS,
                 assignees: Tuple[str, ...] = (), created_by: Optional[str] = None) -> str:
        tid = self.next_id("tsk")
        self.tasks[tid] = {
            "id": tid, "project_id": project_id,
            "workspace_id": self.projects[project_id]["workspace_id"],
            "title": title, "description": None, "status": status,
            "priority": DEFAULT_PRIORITY, "due_date": None,
            "created_at": self.stamp(), "created_by": created_by,
        }
        for uid in assignees:
            self.assignees.append((tid, uid))
        return tid

    def task_row(self, task_id: str) -> Dict[str, Any]:
        row = dict(self.tasks[task_id])
        row["task_assignees"] = [{"user_id": uid} for t, uid in self.assignees if t == task_id]
        return row

    def assignees_of(self, task_id: str) -> List[str]:
        return [uid for t, uid in self.assignees if t == task_id]

    def role_of(self, workspace_id: str, user_id: str) -> Optional[str]:
        for m in self.members:
            if m.workspace_id == workspace_id and m.user_id == user_id:
                return m.role
        return None


def _no_rows(what: str) -> NoRowsError:
    return NoRowsError(f"{what}: JSON object requested, multiple (or no) rows returned", code=NO_ROWS_CODE, status=406)


def _nothing_affected(what: str) -> GatewayError:
    return GatewayError(f"Could not delete {what}: not found or no access.", code=NO_ROWS_AFFECTED)


# --- Fake repositories ------------------------------------------------------

class FakeAuth:
    def __init__(self, store: FakeStore, identity: Optional[Identity] = None) -> None:
        self._store = store
        self.identity = identity
        self.passwords: Dict[str, str] = {}
        self.confirm_email = False

    async def get_current_identity(self) -> Optional[Identity]:
        await self._store.hit("get_current_identity")
        return self.identity

    async def sign_in(self, email: str, password: str) -> Identity:
        await self._store.hit("sign_in", email)
        if self.passwords.get(email) != password:
            raise AuthError("Invalid login credentials", code="invalid_credentials", status=400)
        self.identity = Identity(id=f"id-{email}", email=email)
        return self.identity

    async def sign_up(self, email: str, password: str) -> SignUpResult:
        await self._store.hit("sign_up", email)
        self.passwords[email] = password
        created = Identity(id=f"id-{email}", email=email)
        if self.confirm_email:
            return SignUpResult(identity=created, signed_in=False)
        self.identity = created
        return SignUpResult(identity=created, signed_in=True)

    async def sign_out(self) -> None:
        await self._store.hit("sign_out")
        self.identity = None


class FakeWorkspaces:
    def __init__(self, store: FakeStore, auth: FakeAuth) -> None:
        self._store = store
        self._auth = auth

    async def list_workspaces_for_member(self, user_id: str) -> List[Workspace]:
        await self._store.hit("list_workspaces_for_member", user_id)
        out = [
            Workspace.from_row(self._store.workspaces[m.workspace_id], role=m.role)
            for m in self._store.members
            if m.user_id == user_id and m.workspace_id in self._store.workspaces
        ]
        return sorted(out, key=lambda w: w.created_at or "")

    async def get_workspace(self, workspace_id: str) -> Workspace:
        await self._store.hit("get_workspace", workspace_id)
        row = self._store.workspaces.get(workspace_id)
        if row is None:
            raise _no_rows("workspaces")
        return Workspace.from_row(row)

    async def create_workspace(self, *, name: str, description: Optional[str], created_by: str) -> Workspace:
        await self._store.hit("create_workspace", name)
        wid = self._store.next_id("ws")
        row = {"id": wid, "name": name, "description": description, "created_at": self._store.stamp()}
        self._store.workspaces[wid] = row
        return Workspace.from_row(row)

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._store.hit("delete_workspace", workspace_id)
        ident = self._auth.identity
        if workspace_id not in self._store.workspaces or ident is None \
                or self._store.role_of(workspace_id, ident.id) != OWNER_ROLE:
            raise _nothing_affected("workspaces")
        del self._store.workspaces[workspace_id]
        self._store.members = [m for m in self._store.members if m.workspace_id != workspace_id]
        for pid in [p for p, row in self._store.projects.items() if row["workspace_id"] == workspace_id]:
            _cascade_project(self._store, pid)

    async def add_membership(self, *, workspace_id: str, user_id: str, role: str = OWNER_ROLE) -> Membership:
        await self._store.hit("add_membership", workspace_id, user_id, role)
        m = Membership(workspace_id=workspace_id, user_id=user_id, role=role)
        self._store.members.append(m)
        return m

    async def get_membership_role(self, workspace_id: str, user_id: str) -> Optional[str]:
        await self._store.hit("get_membership_role", workspace_id, user_id)
        return self._store.role_of(workspace_id, user_id)

    async def list_workspace_members(self, workspace_id: str) -> List[str]:
        await self._store.hit("list_workspace_members", workspace_id)
        ids: List[str] = []
        for m in self._store.members:
            if m.workspace_id == workspace_id and m.user_id not in ids:
                ids.append(m.user_id)
        return ids


def _cascade_project(store: FakeStore, project_id: str) -> None:
    store.projects.pop(project_id, None)
    doomed: Set[str] = {t for t, row in store.tasks.items() if row["project_id"] == project_id}
    for tid in doomed:
        del store.tasks[tid]
    store.assignees = [(t, u) for t, u in store.assignees if t not in doomed]


class FakeProjects:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def list_projects(self, workspace_id: str) -> List[Project]:
        await self._store.hit("list_projects", workspace_id)
        rows = [r for r in self._store.projects.values() if r["workspace_id"] == workspace_id]
        return [Project.from_row(r) for r in sorted(rows, key=lambda r: r["created_at"])]

    async def get_project(self, project_id: str) -> Project:
        await self._store.hit("get_project", project_id)
        row = self._store.projects.get(project_id)
        if row is None:
            raise _no_rows("projects")
        return Project.from_row(row)

    async def create_project(self, *, workspace_id: str, name: str, created_by: str,
                             code=None, address=None, description=None) -> Project:
        await self._store.hit("create_project", workspace_id, name)
        pid = self._store.add_project(workspace_id, name, code=code, address=address, description=description)
        return Project.from_row(self._store.projects[pid])

    async def delete_project(self, project_id: str) -> None:
        await self._store.hit("delete_project", project_id)
        if project_id not in self._store.projects:
            raise _nothing_affected("projects")
        _cascade_project(self._store, project_id)


class FakeTasks:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def list_tasks(self, project_id: str) -> List[Task]:
        await self._store.hit("list_tasks", project_id)
        rows = [self._store.task_row(t) for t, r in self._store.tasks.items() if r["project_id"] == project_id]
        return [Task.from_row(r) for r in sorted(rows, key=lambda r: r["created_at"])]

    async def create_task(self, *, workspace_id: str, project_id: str, title: str, created_by: str,
                          description=None, priority=DEFAULT_PRIORITY, due_date=None) -> Task:
        await self._store.hit("create_task", project_id, title)
        tid = self._store.add_task(project_id, title, created_by=created_by)
        self._store.tasks[tid].update(description=description, priority=priority, due_date=due_date)
        return Task.from_row(self._store.tasks[tid])

    async def update_task_status(self, task_id: str, status: str) -> None:
        await self._store.hit("update_task_status", task_id, status)
        if task_id not in self._store.tasks:
            raise _nothing_affected("tasks")
        self._store.tasks[task_id]["status"] = status

    async def delete_task(self, task_id: str) -> None:
        await self._store.hit("delete_task", task_id)
        if task_id not in self._store.tasks:
            raise _nothing_affected("tasks")
        del self._store.tasks[task_id]
        self._store.assignees = [(t, u) for t, u in self._store.assignees if t != task_id]

    async def add_assignees(self, task_id: str, user_ids) -> List[str]:
        await self._store.hit("add_assignees", task_id, tuple(user_ids))
        for uid in user_ids:
            self._store.assignees.append((task_id, uid))
        return list(user_ids)

    async def add_assignee(self, task_id: str, user_id: str) -> None:
        await self._store.hit("add_assignee", task_id, user_id)
        if (task_id, user_id) in self._store.assignees:
            raise GatewayError("duplicate key value violates unique constraint", code="23505", status=409)
        self._store.assignees.append((task_id, user_id))

    async def remove_assignee(self, task_id: str, user_id: str) -> None:
        await self._store.hit("remove_assignee", task_id, user_id)
        if (task_id, user_id) not in self._store.assignees:
            raise _nothing_affected("task_assignees")
        self._store.assignees.remove((task_id, user_id))


class FakeProfiles:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        await self._store.hit("get_profile", user_id)
        return self._store.profiles.get(user_id)

    async def get_profiles(self, user_ids) -> List[Profile]:
        await self._store.hit("get_profiles", tuple(user_ids))
        return [self._store.profiles[uid] for uid in user_ids if uid in self._store.profiles]

    async def upsert_profile(self, profile: Profile) -> Profile:
        await self._store.hit("upsert_profile", profile.id)
        self._store.profiles[profile.id] = profile
        return profile


# --- Signal capture ---------------------------------------------------------

class Recorder:
    """Collects every emission of one signal; single-argument payloads are unwrapped."""

    def __init__(self, signal) -> None:
        self.items: List[Any] = []
        signal.connect(self._on)

    def _on(self, *args) -> None:
        self.items.append(args[0] if len(args) == 1 else args)

    @property
    def last(self) -> Any:
        return self.items[-1] if self.items else None

    def __len__(self) -> int:
        return len(self.items)


# --- Fixtures --------------------------------------------------------------

@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def auth(store: FakeStore) -> FakeAuth:
    return FakeAuth(store, identity=USER_U)


@pytest.fixture()
def session(auth: FakeAuth) -> SessionGuard:
    return SessionGuard(auth)


@pytest.fixture()
def workspaces_repo(store: FakeStore, auth: FakeAuth) -> FakeWorkspaces:
    return FakeWorkspaces(store, auth)


@pytest.fixture()
def projects_repo(store: FakeStore) -> FakeProjects:
    return FakeProjects(store)


@pytest.fixture()
def tasks_repo(store: FakeStore) -> FakeTasks:
    return FakeTasks(store)


@pytest.fixture()
def profiles_repo(store: FakeStore) -> FakeProfiles:
    return FakeProfiles(store)
