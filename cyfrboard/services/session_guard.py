# Rev 0.2.0
# cyfrboard – SessionGuard (every view asks it first)
from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from cyfrboard.models.entities import Identity
from cyfrboard.repositories.gateway import GatewayError

log = logging.getLogger(__name__)


class SessionGuard(QObject):
    """
    Emits:
      - loginRequired()            no authenticated identity; show the login entry point
      - identityChanged(object)    Identity | None after sign-in / sign-out
    """

    loginRequired = Signal()
    identityChanged = Signal(object)

    def __init__(self, auth_repo):
        super().__init__()
        self._auth = auth_repo
        self._identity: Optional[Identity] = None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    async def current(self) -> Optional[Identity]:
        """Resolve without redirecting (landing page uses this)."""
        identity = await self._auth.get_current_identity()
        self._set(identity)
        return identity

    async def require(self, on_error: Optional[Callable[[str], None]] = None) -> Optional[Identity]:
        """
        Identity, or None when the caller should stop. A signed-out visitor gets
        loginRequired; a session check that fails for any other reason (network,
        server error) is handed to on_error and does not redirect.
        """
        try:
            identity = await self.current()
        except GatewayError as exc:
            log.warning("Session check failed (%s): %s", exc.code, exc.message)
            if on_error is not None:
                on_error(exc.message)
            return None
        if identity is None:
            log.info("No session; redirecting to login")
            self.loginRequired.emit()
        return identity

    def signed_in(self, identity: Identity) -> None:
        self._set(identity)

    async def sign_out(self) -> None:
        await self._auth.sign_out()
        self._set(None)
        self.loginRequired.emit()

    def _set(self, identity: Optional[Identity]) -> None:
        if identity != self._identity:
            self._identity = identity
            self.identityChanged.emit(identity)
