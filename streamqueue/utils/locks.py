"""
Per-room exclusive sections.

A Redis lock is used when a client is configured so that every worker
process serializes on the same key; otherwise an in-process lock per room
is used, which only serializes requests handled by this process.
"""

import logging
import threading
import weakref
from contextlib import contextmanager

from ..core.errors import Conflict


logger = logging.getLogger(__name__)


class RoomLocks:

    def __init__(self, redis_client=None, timeout=10, key_prefix="streamqueue:room"):
        self.redis_client = redis_client
        self.timeout = timeout
        self.key_prefix = key_prefix
        # Entries vanish once no caller holds a room's lock
        self._locks = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def _local_lock(self, key):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, owner_id, purpose):
        """Hold the ``purpose`` lock of a room; raises Conflict when it can't be taken in time"""
        key = f"{self.key_prefix}:{owner_id}:{purpose}"

        if self.redis_client is not None:
            lock = self.redis_client.lock(key, timeout=self.timeout, blocking_timeout=self.timeout)
            if not lock.acquire():
                logger.warning(f"Timed out waiting for {key}")
                raise Conflict("Room is busy, try again", reason="locked")
            try:
                yield
            finally:
                try:
                    lock.release()
                except Exception as e:
                    # Lease expired while we held it; the next holder already owns the key
                    logger.warning(f"Could not release {key}: {e}")
            return

        lock = self._local_lock(key)
        if not lock.acquire(timeout=self.timeout):
            logger.warning(f"Timed out waiting for {key}")
            raise Conflict("Room is busy, try again", reason="locked")
        try:
            yield
        finally:
            lock.release()
