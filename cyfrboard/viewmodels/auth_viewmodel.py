# Rev 0.2.0
from __future__ import annotations

import asyncio
import logging

from PySide6.QtCore import QObject, Signal

from cyfrboard.repositories.gateway import GatewayError
from cyfrboard.services.profile_rules import MIN_PASSWORD_LENGTH
from cyfrboard.services.view_scope import ViewScope

log = logging.getLogger(__name__)

CONFIRM_EMAIL = "Check your email to confirm the registration."


class AuthViewModel(QObject):
    """
    Landing, login and registration.
    Emits:
      - signedIn(Identity)       open the workspaces list
      - loginNeeded()            show the login form
      - errorChanged(str)        "" clears
      - message(str)             informational (email confirmation)
      - busyChanged(bool)
    """

    signedIn = Signal(object)
    loginNeeded = Signal()
    errorChanged = Signal(str)
    message = Signal(str)
    busyChanged = Signal(bool)

    def __init__(self, session, auth_repo):
        super().__init__()
        self._session = session
        self._auth = auth_repo
        self._scope = ViewScope("auth")

    def run(self, coro) -> asyncio.Task:
        return self._scope.spawn(coro)

    def close(self) -> None:
        self._scope.close()

    async def landing(self) -> None:
        try:
            identity = await self._session.current()
        except GatewayError as exc:
            log.warning("Session check failed on landing: %s", exc.message)
            self.errorChanged.emit(exc.message)
            self.loginNeeded.emit()
            return
        if identity is not None:
            self.signedIn.emit(identity)
        else:
            self.loginNeeded.emit()

    async def sign_in(self, email: str, password: str) -> bool:
        email = (email or "").strip()
        if not email or not password:
            self.errorChanged.emit("Email and password are required.")
            return False
        self.errorChanged.emit("")
        self.busyChanged.emit(True)
        try:
            identity = await self._auth.sign_in(email, password)
        except GatewayError as exc:
            log.info("Sign-in failed: %s", exc.message)
            self.errorChanged.emit(exc.message)
            return False
        finally:
            self.busyChanged.emit(False)
        self._session.signed_in(identity)
        self.signedIn.emit(identity)
        return True

    async def sign_up(self, email: str, password: str) -> bool:
        email = (email or "").strip()
        if not email:
            self.errorChanged.emit("Email is required.")
            return False
        if len(password or "") < MIN_PASSWORD_LENGTH:
            self.errorChanged.emit(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
            return False
        self.errorChanged.emit("")
        self.message.emit("")
        self.busyChanged.emit(True)
        try:
            result = await self._auth.sign_up(email, password)
        except GatewayError as exc:
            log.info("Sign-up failed: %s", exc.message)
            self.errorChanged.emit(exc.message)
            return False
        finally:
            self.busyChanged.emit(False)
        if not result.signed_in:
            self.message.emit(CONFIRM_EMAIL)
            return True
        self._session.signed_in(result.identity)
        self.signedIn.emit(result.identity)
        return True
