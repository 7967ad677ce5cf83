import threading
from collections.abc import Iterator
from contextlib import contextmanager


class OrderLocks:
    """One lock per order id; different orders never wait on each other.

    An entry lives only while someone holds or waits on it, so ids that are
    never touched again (deleted or unknown orders) do not pile up.
    """

    def __init__(self):
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, order_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(order_id, threading.Lock())
            self._holders[order_id] = self._holders.get(order_id, 0) + 1
            return lock

    def _release_entry(self, order_id: str) -> None:
        with self._guard:
            self._holders[order_id] -= 1
            if self._holders[order_id] == 0:
                del self._holders[order_id]
                del self._locks[order_id]

    @contextmanager
    def hold(self, order_id: str) -> Iterator[None]:
        lock = self._acquire_entry(order_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(order_id)
