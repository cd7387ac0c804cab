"""
Per-key exclusive scopes for check-then-act windows.

Order creation checks table occupancy and then inserts; item mutations
read the order and then rewrite its total. Each of those sequences runs
while holding the scope for its table or order, on top of the row lock
taken inside the database transaction, so two workers in this process
never interleave on the same key.
"""
import threading
from contextlib import contextmanager

from restaurant_pos.errors import StorageTimeout
from restaurant_pos.services.storage import storage_timeout


class KeyedLock:

    def __init__(self, name):
        self.name = name
        self._guard = threading.Lock()
        self._entries = {}

    @contextmanager
    def hold(self, key, timeout):
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [threading.Lock(), 0]
            entry[1] += 1

        acquired = entry[0].acquire(timeout=timeout)
        try:
            if not acquired:
                raise StorageTimeout(f"Timed out waiting for {self.name} {key}.")
            yield
        finally:
            if acquired:
                entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self):
        with self._guard:
            return len(self._entries)


table_locks = KeyedLock("table")
order_locks = KeyedLock("order")


def table_lock(table_id):
    return table_locks.hold(table_id, storage_timeout())


def order_lock(order_id):
    return order_locks.hold(order_id, storage_timeout())
