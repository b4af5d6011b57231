# tests/test_gateway.py
from __future__ import annotations

import json
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from cyfrboard.models.entities import Profile
from cyfrboard.repositories.auth_repository import AuthRepository
from cyfrboard.repositories.gateway import (
    NETWORK_ERROR, NO_ROWS_AFFECTED, AuthError, GatewayError, NoRowsError, SupabaseGateway, eq, in_,
)
from cyfrboard.repositories.profile_repository import ProfileRepository
from cyfrboard.repositories.project_repository import ProjectRepository
from cyfrboard.repositories.task_repository import TaskRepository
from cyfrboard.repositories.workspace_repository import WorkspaceRepository

BASE = "https://demo.supabase.co"
ANON = "anon-key"
USER = {"id": "u-1", "email": "u@cyfr.test"}
TOKEN_BODY = {"access_token": "jwt-1", "refresh_token": "r-1", "token_type": "bearer", "user": USER}


class _Backend:
    """Records requests and answers them with a handler chosen per test."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest_asyncio.fixture()
async def make_gateway():
    made: List[SupabaseGateway] = []

    def factory(handler):
        backend = _Backend(handler)
        gw = SupabaseGateway(BASE, ANON, transport=httpx.MockTransport(backend))
        made.append(gw)
        return gw, backend

    yield factory
    for gw in made:
        await gw.aclose()


def test_filter_helpers():
    assert eq("abc") == "eq.abc"
    assert in_(["a", "b"]) == 'in.("a","b")'


# --- PostgREST ------------------------------------------------------------

@pytest.mark.asyncio
async def test_anonymous_requests_carry_the_anon_key(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(200, json=[]))

    await gw.select("projects", "id", filters={"workspace_id": eq("w1")}, order="created_at.asc")

    req = backend.last
    assert req.method == "GET"
    assert req.url.path == "/rest/v1/projects"
    assert req.url.params["workspace_id"] == "eq.w1"
    assert req.url.params["order"] == "created_at.asc"
    assert req.headers["apikey"] == ANON
    assert req.headers["authorization"] == f"Bearer {ANON}"


@pytest.mark.asyncio
async def test_single_row_miss_is_no_rows_error(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(
        406, json={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
    ))

    with pytest.raises(NoRowsError):
        await ProjectRepository(gw).get_project("p-404")
    assert backend.last.headers["accept"] == "application/vnd.pgrst.object+json"


@pytest.mark.asyncio
async def test_backend_message_is_kept_verbatim(make_gateway):
    gw, _ = make_gateway(lambda r: httpx.Response(
        403, json={"code": "42501", "message": "permission denied for table tasks", "details": None},
    ))

    with pytest.raises(GatewayError) as info:
        await TaskRepository(gw).list_tasks("p1")
    assert info.value.message == "permission denied for table tasks"
    assert info.value.code == "42501"
    assert info.value.status == 403
    assert not isinstance(info.value, NoRowsError)


@pytest.mark.asyncio
async def test_update_matching_nothing_is_an_error(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(200, json=[]))

    with pytest.raises(GatewayError) as info:
        await TaskRepository(gw).update_task_status("t1", "done")
    assert info.value.code == NO_ROWS_AFFECTED
    req = backend.last
    assert req.method == "PATCH"
    assert json.loads(req.content) == {"status": "done"}
    assert req.headers["prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_delete_reports_affected_rows(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(200, json=[{"task_id": "t1"}]))

    await TaskRepository(gw).remove_assignee("t1", "u2")

    params = backend.last.url.params
    assert backend.last.method == "DELETE"
    assert params["task_id"] == "eq.t1"
    assert params["user_id"] == "eq.u2"


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped(make_gateway):
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    gw, _ = make_gateway(boom)
    with pytest.raises(GatewayError) as info:
        await gw.select("workspaces")
    assert info.value.code == NETWORK_ERROR


@pytest.mark.asyncio
async def test_list_tasks_reads_embedded_assignees(make_gateway):
    row = {
        "id": "t1", "title": "Pour foundation", "status": "todo", "priority": "high",
        "project_id": "p1", "workspace_id": "w1", "created_at": "2024-05-01T08:00:00+00:00",
        "task_assignees": [{"user_id": "u1"}, {"user_id": "u2"}, {"user_id": "u1"}],
    }
    gw, backend = make_gateway(lambda r: httpx.Response(200, json=[row]))

    (task,) = await TaskRepository(gw).list_tasks("p1")

    assert task.assignees == ("u1", "u2")
    assert "task_assignees(user_id)" in backend.last.url.params["select"]


@pytest.mark.asyncio
async def test_create_task_forces_todo(make_gateway):
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(201, json={"id": "t9", **body})

    gw, backend = make_gateway(handler)
    task = await TaskRepository(gw).create_task(
        workspace_id="w1", project_id="p1", title="Survey", created_by="u1",
    )

    sent = json.loads(backend.last.content)
    assert sent["status"] == "todo"
    assert sent["priority"] == "normal"
    assert task.status == "todo"
    assert task.assignees == ()


@pytest.mark.asyncio
async def test_membership_listing_flattens_embedded_workspaces(make_gateway):
    rows = [
        {"role": "member", "workspaces": {"id": "w2", "name": "B", "created_at": "2024-02-01"}},
        {"role": "owner", "workspaces": {"id": "w1", "name": "A", "created_at": "2024-01-01"}},
        {"role": "owner", "workspaces": None},
    ]
    gw, _ = make_gateway(lambda r: httpx.Response(200, json=rows))

    out = await WorkspaceRepository(gw).list_workspaces_for_member("u1")

    assert [(w.id, w.role) for w in out] == [("w1", "owner"), ("w2", "member")]


@pytest.mark.asyncio
async def test_membership_role_absent_is_none(make_gateway):
    gw, _ = make_gateway(lambda r: httpx.Response(406, json={"code": "PGRST116", "message": "no rows"}))
    assert await WorkspaceRepository(gw).get_membership_role("w1", "u1") is None


@pytest.mark.asyncio
async def test_profile_upsert_merges_on_id(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(201, json={"id": "u1", "first_name": "Ivanov", "phone": "+1234567"}))

    saved = await ProfileRepository(gw).upsert_profile(Profile(id="u1", first_name="Ivanov", phone="+1234567"))

    req = backend.last
    assert req.method == "POST"
    assert req.url.params["on_conflict"] == "id"
    assert "resolution=merge-duplicates" in req.headers["prefer"]
    assert saved.first_name == "Ivanov"


@pytest.mark.asyncio
async def test_get_profiles_skips_empty_lookup(make_gateway):
    gw, backend = make_gateway(lambda r: httpx.Response(200, json=[]))
    assert await ProfileRepository(gw).get_profiles([]) == []
    assert backend.requests == []


# --- GoTrue ----------------------------------------------------------------

@pytest.mark.asyncio
async def test_sign_in_stores_session_for_later_requests(make_gateway):
    def handler(request):
        if request.url.path == "/auth/v1/token":
            return httpx.Response(200, json=TOKEN_BODY)
        return httpx.Response(200, json=[])

    gw, backend = make_gateway(handler)
    identity = await AuthRepository(gw).sign_in("u@cyfr.test", "secret1")

    assert identity.id == "u-1"
    assert backend.last.url.params["grant_type"] == "password"

    await gw.select("workspaces")
    assert backend.last.headers["authorization"] == "Bearer jwt-1"


@pytest.mark.asyncio
async def test_wrong_password_is_auth_error(make_gateway):
    gw, _ = make_gateway(lambda r: httpx.Response(
        400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
    ))
    with pytest.raises(AuthError) as info:
        await AuthRepository(gw).sign_in("u@cyfr.test", "nope")
    assert info.value.message == "Invalid login credentials"
    assert gw.session is None


@pytest.mark.asyncio
async def test_sign_up_without_session_needs_confirmation(make_gateway):
    gw, _ = make_gateway(lambda r: httpx.Response(200, json={**USER, "confirmation_sent_at": "2024-05-01"}))

    result = await AuthRepository(gw).sign_up("u@cyfr.test", "secret1")

    assert result.signed_in is False
    assert result.identity.id == "u-1"
    assert gw.session is None


@pytest.mark.asyncio
async def test_expired_session_reads_as_signed_out(make_gateway):
    def handler(request):
        if request.url.path == "/auth/v1/token":
            return httpx.Response(200, json=TOKEN_BODY)
        return httpx.Response(401, json={"msg": "JWT expired"})

    gw, _ = make_gateway(handler)
    auth = AuthRepository(gw)
    await auth.sign_in("u@cyfr.test", "secret1")

    assert await auth.get_current_identity() is None
    assert gw.session is None


@pytest.mark.asyncio
async def test_sign_out_drops_session_even_if_remote_fails(make_gateway):
    def handler(request):
        if request.url.path == "/auth/v1/token":
            return httpx.Response(200, json=TOKEN_BODY)
        return httpx.Response(500, json={"msg": "oops"})

    gw, _ = make_gateway(handler)
    auth = AuthRepository(gw)
    await auth.sign_in("u@cyfr.test", "secret1")

    await auth.sign_out()
    assert gw.session is None
