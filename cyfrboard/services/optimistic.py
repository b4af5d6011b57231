# Rev 0.2.0
# Optimistic update + reconcile-by-refetch, shared by every mutating handler.
from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import AsyncContextManager, Awaitable, Callable, Optional

from cyfrboard.repositories.gateway import GatewayError

log = logging.getLogger(__name__)


async def run_optimistic(
    *,
    apply: Callable[[], None],
    commit: Callable[[], Awaitable[object]],
    reconcile: Callable[[], Awaitable[object]],
    on_error: Optional[Callable[[GatewayError], None]] = None,
    label: str = "write",
    serial: Optional[AsyncContextManager] = None,
) -> bool:
    """
    apply() changes local state immediately, commit() performs the remote write.
    On a failed commit the local state is never patched back field by field:
    reconcile() re-reads the authoritative collection and replaces it wholesale.

    serial, when given, is entered after apply() and held across commit() and
    any reconcile(), so the next write queued on it starts after the re-read.
    Returns True when the write went through.
    """
    apply()
    async with serial if serial is not None else nullcontext():
        try:
            await commit()
        except GatewayError as exc:
            log.warning("%s failed (%s): %s; reconciling", label, exc.code, exc.message)
            if on_error is not None:
                on_error(exc)
            await reconcile()
            return False
    return True
