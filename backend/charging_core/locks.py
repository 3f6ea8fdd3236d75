"""Per-key mutual exclusion for chargers and sessions within one process.

Locks are created on first use and dropped when no holder or waiter remains,
so the table does not grow with the number of ids ever seen.
"""
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from charging_core.errors import DeadlineExceeded

LOG = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """Map of short-held locks keyed by resource id (e.g. ``charger:<id>``)."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key: str, timeout: float) -> Iterator[None]:
        """Hold the lock for key; raise DeadlineExceeded if not acquired within timeout."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
        acquired = False
        try:
            acquired = entry.lock.acquire(timeout=max(0.0, timeout))
            if not acquired:
                LOG.warning("Lock %s not acquired within %.2fs", key, timeout)
                raise DeadlineExceeded(f"timed out waiting for {key}")
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
