from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from parlor.domain.common.ids import TableId


class TableLockRegistry:
    """One mutex per table; different tables never contend."""

    def __init__(self) -> None:
        self._locks: dict[TableId, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, table_id: TableId) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(table_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[table_id] = lock
            return lock

    @contextmanager
    def hold(self, table_id: TableId) -> Iterator[None]:
        lock = self._lock_for(table_id)
        with lock:
            yield
