"""Per-room mutual exclusion for check-then-act booking sequences"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from config import settings
from domain.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def acquire_within(
    lock: asyncio.Lock,
    timeout: Optional[float],
    room_id: Optional[int] = None,
    resource: Optional[str] = None
) -> AsyncIterator[None]:
    """Hold ``lock`` for the block, waiting at most ``timeout`` seconds for it"""
    try:
        await asyncio.wait_for(lock.acquire(), timeout=timeout)
    except asyncio.TimeoutError:
        error = LockTimeoutError(room_id, timeout, resource)
        logger.warning("Timed out: %s", error)
        raise error
    try:
        yield
    finally:
        lock.release()


class RoomLockRegistry:
    """Hands out one asyncio.Lock per room id.

    Operations on different rooms never wait on each other. Waiting for a
    busy room is bounded by ``timeout`` seconds; cancelling the waiting task
    abandons the wait without taking the lock.
    """

    def __init__(self, timeout: Optional[float] = settings.ROOM_LOCK_TIMEOUT_SECONDS):
        self.timeout = timeout
        self._locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, room_id: int) -> asyncio.Lock:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        return lock

    def is_locked(self, room_id: int) -> bool:
        lock = self._locks.get(room_id)
        return lock is not None and lock.locked()

    def hold(self, room_id: int):
        """Async context manager holding the room's lock"""
        return acquire_within(self._lock_for(room_id), self.timeout, room_id=room_id)
