# tests/test_account_viewmodel.py
from __future__ import annotations

import pytest

from conftest import USER_U, Recorder
from cyfrboard.models.entities import Profile
from cyfrboard.repositories.gateway import GatewayError
from cyfrboard.viewmodels.account_viewmodel import SAVED, AccountViewModel


@pytest.fixture()
def vm(session, profiles_repo):
    model = AccountViewModel(session, profiles_repo)
    yield model
    model.close()


@pytest.mark.asyncio
async def test_open_without_profile_starts_empty(vm):
    loaded = Recorder(vm.loaded)
    errors = Recorder(vm.errorChanged)

    await vm.open()

    assert loaded.items == [("u@cyfr.test", None)]
    assert errors.items == [""]


@pytest.mark.asyncio
async def test_open_with_profile(vm, store):
    store.profiles[USER_U.id] = Profile(id=USER_U.id, first_name="Ivanov", second_name="Ivan", phone="+375291234567")
    loaded = Recorder(vm.loaded)

    await vm.open()

    email, profile = loaded.last
    assert email == "u@cyfr.test"
    assert profile.first_name == "Ivanov"


@pytest.mark.asyncio
@pytest.mark.parametrize("phone", ["", "12ab", "+1 2"])
async def test_invalid_phone_never_reaches_backend(vm, store, phone):
    errors = Recorder(vm.errorChanged)

    assert await vm.save(first_name="Ivanov", second_name="Ivan", phone=phone) is False

    assert errors.last
    assert store.called("upsert_profile") == []


@pytest.mark.asyncio
async def test_save_upserts_and_confirms(vm, store):
    saved = Recorder(vm.saved)

    assert await vm.save(first_name=" Ivanov ", second_name="", phone=" +971 50 000 00 00 ") is True

    stored = store.profiles[USER_U.id]
    assert stored.first_name == "Ivanov"
    assert stored.second_name is None
    assert stored.phone == "+971 50 000 00 00"
    assert saved.last == SAVED


@pytest.mark.asyncio
async def test_save_failure_shows_message(vm, store):
    store.failures["upsert_profile"] = GatewayError("new row violates row-level security policy")
    errors = Recorder(vm.errorChanged)
    saved = Recorder(vm.saved)

    assert await vm.save(first_name="A", second_name="B", phone="+375291234567") is False
    assert errors.last == "new row violates row-level security policy"
    assert saved.items == [""]


@pytest.mark.asyncio
async def test_unreachable_auth_server_is_shown_on_open_and_save(vm, store):
    store.failures["get_current_identity"] = GatewayError("connection refused", code="network")
    errors = Recorder(vm.errorChanged)
    loaded = Recorder(vm.loaded)

    await vm.open()
    assert await vm.save(first_name="Ivanov", second_name="Ivan", phone="+375291234567") is False

    assert errors.items.count("connection refused") == 2
    assert len(loaded) == 0
    assert store.called("upsert_profile") == []
