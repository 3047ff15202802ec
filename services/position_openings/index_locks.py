"""
Index-scoped readers-writer locks.

Searches and imports share an index; creating, deleting or purging it needs
exclusive access. Locks are process-wide and keyed by index name.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager


class ReadWriteLock:
    """Many concurrent shared holders or one exclusive holder.

    Waiting writers block new readers, so a steady stream of searches cannot
    starve an index rebuild.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def shared(self):
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def exclusive(self):
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()


class IndexLockRegistry:
    """Hands out one ReadWriteLock per index name."""

    def __init__(self):
        self._locks: dict[str, ReadWriteLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, index_name: str) -> ReadWriteLock:
        with self._guard:
            lock = self._locks.get(index_name)
            if lock is None:
                lock = self._locks[index_name] = ReadWriteLock()
            return lock


index_locks = IndexLockRegistry()
