import threading
from contextlib import contextmanager


class ItemLockRegistry:
    """Per-item mutexes that serialize stock mutations within this process.

    Database row locks (``SELECT ... FOR UPDATE``) cover multi-process
    deployments on engines that support them; SQLite relies on this registry.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def __contains__(self, item_id):
        with self._guard:
            return item_id in self._locks

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def lock_for(self, item_id):
        with self._guard:
            lock = self._locks.get(item_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[item_id] = lock
            return lock

    @contextmanager
    def hold(self, item_id):
        lock = self.lock_for(item_id)
        with lock:
            yield

    def discard(self, item_id):
        """Forget the lock of an item that no longer exists.

        A lock that is currently held stays registered.
        """
        with self._guard:
            lock = self._locks.get(item_id)
            if lock is not None and not lock.locked():
                del self._locks[item_id]


item_locks = ItemLockRegistry()
