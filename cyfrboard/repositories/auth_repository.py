# Rev 0.2.0
# cyfrboard – AuthRepository (GoTrue password flow)
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cyfrboard.models.entities import Identity
from cyfrboard.repositories.gateway import AuthError, GatewayError, Session, SupabaseGateway

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignUpResult:
    identity: Optional[Identity]
    # False when the backend wants the email confirmed before issuing a session
    signed_in: bool


class AuthRepository:
    def __init__(self, gateway: SupabaseGateway):
        self._gw = gateway

    # ---------- public API ----------

    async def get_current_identity(self) -> Optional[Identity]:
        """Identity behind the stored session, or None when signed out or expired."""
        if self._gw.session is None:
            return None
        try:
            body = await self._gw.auth_request("GET", "user", authenticated=True)
        except AuthError as exc:
            log.info("Session rejected (%s); treating as signed out", exc.message)
            self._gw.clear_session()
            return None
        return self._identity(body)

    async def sign_in(self, email: str, password: str) -> Identity:
        body = await self._gw.auth_request(
            "POST", "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._session(body)
        if session is None:
            raise AuthError("Sign-in response did not contain a session.")
        self._gw.set_session(session)
        log.info("Signed in as %s", session.user.id)
        return session.user

    async def sign_up(self, email: str, password: str) -> SignUpResult:
        body = await self._gw.auth_request("POST", "signup", json={"email": email, "password": password})
        session = self._session(body)
        if session is not None:
            self._gw.set_session(session)
            return SignUpResult(identity=session.user, signed_in=True)
        # email confirmation pending: GoTrue returns the bare user object
        user = body.get("user") or body
        identity = self._identity(user) if user.get("id") else None
        return SignUpResult(identity=identity, signed_in=False)

    async def sign_out(self) -> None:
        if self._gw.session is None:
            return
        try:
            await self._gw.auth_request("POST", "logout", authenticated=True)
        except GatewayError as exc:
            # the local session goes away regardless
            log.warning("Remote sign-out failed: %s", exc.message)
        finally:
            self._gw.clear_session()

    # ---------- internals ----------

    @staticmethod
    def _identity(user: Dict[str, Any]) -> Identity:
        return Identity(id=str(user["id"]), email=user.get("email"))

    def _session(self, body: Dict[str, Any]) -> Optional[Session]:
        token = body.get("access_token")
        user = body.get("user")
        if not token or not user:
            return None
        return Session(access_token=token, refresh_token=body.get("refresh_token"), user=self._identity(user))
