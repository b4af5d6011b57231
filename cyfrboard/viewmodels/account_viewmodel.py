# Rev 0.2.0
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Profile
from cyfrboard.repositories.gateway import GatewayError
from cyfrboard.services.profile_rules import validate_phone
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)

SAVED = "Profile saved."


class AccountViewModel(QObject):
    """
    Self-service profile completion.
    Emits:
      - loaded(email: str, profile: Profile | None)
      - errorChanged(str)      "" clears
      - saved(str)
      - busyChanged(bool)
    """

    loaded = Signal(str, object)
    errorChanged = Signal(str)
    saved = Signal(str)
    busyChanged = Signal(bool)

    def __init__(self, session, profiles_repo):
        super().__init__()
        self._session = session
        self._profiles = profiles_repo
        self._scope = ViewScope("account")
        self._profile: Optional[Profile] = None

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    def start(self) -> asyncio.Task:
        return self._scope.spawn(self.open())

    def run(self, coro) -> asyncio.Task:
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    async def open(self) -> None:
        identity = await self._session.require(self.errorChanged.emit)
        if identity is None:
            return
        self.busyChanged.emit(True)
        self.errorChanged.emit("")
        try:
            profile = await self._profiles.get_profile(identity.id)
        except GatewayError as exc:
            log.warning("Loading profile failed: %s", exc.message)
            profile = None
            self.errorChanged.emit(exc.message)
        finally:
            self.busyChanged.emit(False)
        if self._scope.closed:
            return
        self._profile = profile
        self.loaded.emit(identity.email or "", profile)

    async def save(self, *, first_name: str, second_name: str, phone: str) -> bool:
        self.errorChanged.emit("")
        self.saved.emit("")
        normalized, problem = validate_phone(phone)
        if problem:
            self.errorChanged.emit(problem)
            return False
        identity = await self._session.require(self.errorChanged.emit)
        if identity is None:
            return False
        profile = Profile(
            id=identity.id,
            first_name=(first_name or "").strip() or None,
            second_name=(second_name or "").strip() or None,
            phone=normalized,
        )
        self.busyChanged.emit(True)
        try:
            self._profile = await self._profiles.upsert_profile(profile)
        except GatewayError as exc:
            log.warning("Saving profile failed: %s", exc.message)
            self.errorChanged.emit(exc.message)
            return False
        finally:
            self.busyChanged.emit(False)
        self.saved.emit(SAVED)
        return True
