"""
Per-user mutation locks.

Balance and holding updates are read-modify-write sequences. Every
mutation for one user runs under that user's lock so concurrent
requests cannot lose updates; different users never contend.

Locks are process-local. Running several worker processes against the
same database reintroduces the race.
"""

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator


class UserLockRegistry:
    """Hands out one re-entrant lock per user ID.

    Re-entrant so that a buy can hold the lock while the ledger
    debit it triggers takes the same lock again. Entries are weak: a
    lock nobody holds or waits on is dropped.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, threading.RLock] = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def lock_for(self, user_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """Serialize the enclosed block with every other mutation for the user."""
        lock = self.lock_for(user_id)
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)
