"""Per-asset single-flight locks for allocation mutations.

Serializes create/update/delete calls for the same asset inside one worker
process. The lock is released when the service call returns, before the
router commits; the commit window and other worker processes are covered by
the ``SELECT ... FOR UPDATE`` on the asset row and by the ``version`` check on
each allocation row, which turns a lost update into a ``ConflictError``.
"""

import asyncio
import uuid
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from app.core.config import settings
from app.core.exceptions import ConflictError

logger = structlog.get_logger()

# Entries disappear once no coroutine holds or waits on the lock
_locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(asset_id: uuid.UUID) -> asyncio.Lock:
    lock = _locks.get(asset_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[asset_id] = lock
    return lock


@asynccontextmanager
async def asset_lock(
    asset_id: uuid.UUID, timeout: float | None = None
) -> AsyncIterator[None]:
    """Hold the allocation lock for ``asset_id`` for the duration of the block."""
    lock = _lock_for(asset_id)
    wait = settings.ALLOCATION_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        await asyncio.wait_for(lock.acquire(), timeout=wait)
    except asyncio.TimeoutError as exc:
        logger.warning("allocation_lock.timeout", asset_id=str(asset_id), timeout=wait)
        raise ConflictError(
            "Another allocation change for this asset is in progress, please retry"
        ) from exc
    try:
        yield
    finally:
        lock.release()
