# Rev 0.2.0

"""Remote data gateway (Rev 0.2.0)
- One async httpx client per app, shared by all repositories
- PostgREST under /rest/v1, GoTrue under /auth/v1
- Access control is enforced server-side (row-level security); the client only
  forwards the session's bearer token
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

import httpx

from cyfrboard.models.entities import Identity

log = logging.getLogger(__name__)

REST_PATH = "/rest/v1"
AUTH_PATH = "/auth/v1"

# PostgREST: single-row request matched zero (or many) rows
NO_ROWS_CODE = "PGRST116"
NO_ROWS_AFFECTED = "no_rows_affected"
NETWORK_ERROR = "network"

Rows = List[Dict[str, Any]]


class GatewayError(Exception):
    """Backend rejected a request (or could not be reached)."""

    def __init__(self, message: str, *, code: Optional[str] = None,
                 status: Optional[int] = None, details: Optional[str] = None) -> None:
        self.message = message
        self.code = code
        self.status = status
        self.details = details
        super().__init__(message)


class NoRowsError(GatewayError):
    """A single-row fetch found nothing visible to the caller."""


class AuthError(GatewayError):
    """Authentication failed or the session is no longer valid."""


@dataclass(frozen=True)
class Session:
    access_token: str
    refresh_token: Optional[str]
    user: Identity


def eq(value: Any) -> str:
    return f"eq.{value}"


def in_(values: Iterable[Any]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


class SupabaseGateway:
    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._session: Optional[Session] = None
        self._client = httpx.AsyncClient(base_url=self._url, timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, cfg) -> "SupabaseGateway":
        return cls(cfg.url, cfg.anon_key, timeout=cfg.timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------- session ----------

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def set_session(self, session: Optional[Session]) -> None:
        self._session = session

    def clear_session(self) -> None:
        self._session = None

    # ---------- PostgREST ----------

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
        single: bool = False,
    ) -> Union[Rows, Dict[str, Any]]:
        params: Dict[str, str] = {"select": columns, **(filters or {})}
        if order:
            params["order"] = order
        return await self._rest("GET", table, params=params, single=single)

    async def insert(
        self,
        table: str,
        rows: Union[Dict[str, Any], List[Dict[str, Any]]],
        *,
        columns: str = "*",
        single: bool = False,
    ) -> Union[Rows, Dict[str, Any]]:
        return await self._rest(
            "POST", table,
            params={"select": columns},
            json=rows,
            prefer="return=representation",
            single=single,
        )

    async def upsert(
        self,
        table: str,
        row: Dict[str, Any],
        *,
        on_conflict: str,
        columns: str = "*",
    ) -> Dict[str, Any]:
        return await self._rest(
            "POST", table,
            params={"select": columns, "on_conflict": on_conflict},
            json=row,
            prefer="resolution=merge-duplicates,return=representation",
            single=True,
        )

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        filters: Dict[str, str],
        columns: str = "id",
    ) -> Rows:
        rows = await self._rest(
            "PATCH", table,
            params={"select": columns, **filters},
            json=values,
            prefer="return=representation",
        )
        return self._require_affected(rows, "update", table)

    async def delete(
        self,
        table: str,
        *,
        filters: Dict[str, str],
        columns: str = "id",
    ) -> Rows:
        rows = await self._rest(
            "DELETE", table,
            params={"select": columns, **filters},
            prefer="return=representation",
        )
        return self._require_affected(rows, "delete", table)

    @staticmethod
    def _require_affected(rows: Rows, verb: str, table: str) -> Rows:
        # RLS filters a forbidden UPDATE/DELETE down to zero rows instead of failing it
        if not rows:
            raise GatewayError(
                f"Could not {verb} {table}: not found or no access.",
                code=NO_ROWS_AFFECTED,
            )
        return rows

    async def _rest(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
        single: bool = False,
    ) -> Any:
        headers = self._headers()
        if prefer:
            headers["Prefer"] = prefer
        if single:
            headers["Accept"] = "application/vnd.pgrst.object+json"

        log.debug("%s %s %s", method, table, {k: v for k, v in (params or {}).items() if k != "select"})
        resp = await self._send(method, f"{REST_PATH}/{table}", params=params, json=json, headers=headers)
        if resp.status_code >= 400:
            raise self._rest_error(resp)
        if resp.status_code == 204 or not resp.content:
            return {} if single else []
        return resp.json()

    # ---------- GoTrue ----------

    async def auth_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
        authenticated: bool = False,
    ) -> Dict[str, Any]:
        headers = {"apikey": self._anon_key}
        if authenticated:
            if self._session is None:
                raise AuthError("Not signed in.", status=401)
            headers["Authorization"] = f"Bearer {self._session.access_token}"
        resp = await self._send(method, f"{AUTH_PATH}/{path}", params=params, json=json, headers=headers)
        if resp.status_code >= 400:
            message, code = self._error_fields(resp)
            raise AuthError(message, code=code, status=resp.status_code)
        if not resp.content:
            return {}
        return resp.json()

    # ---------- internals ----------

    def _headers(self) -> Dict[str, str]:
        token = self._session.access_token if self._session else self._anon_key
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token}",
        }

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError(str(exc) or exc.__class__.__name__, code=NETWORK_ERROR) from exc

    @staticmethod
    def _error_fields(resp: httpx.Response) -> tuple[str, Optional[str]]:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return (resp.text or f"HTTP {resp.status_code}"), None
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or f"HTTP {resp.status_code}"
        )
        code = body.get("code") or body.get("error_code")
        return str(message), (str(code) if code is not None else None)

    def _rest_error(self, resp: httpx.Response) -> GatewayError:
        message, code = self._error_fields(resp)
        details = None
        try:
            body = resp.json()
            if isinstance(body, dict):
                details = body.get("details")
        except ValueError:
            pass
        if code == NO_ROWS_CODE:
            return NoRowsError(message, code=code, status=resp.status_code, details=details)
        if resp.status_code == 401:
            return AuthError(message, code=code, status=resp.status_code, details=details)
        return GatewayError(message, code=code, status=resp.status_code, details=details)
