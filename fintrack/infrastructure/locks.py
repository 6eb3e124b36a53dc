"""Per-card mutual exclusion for read-modify-write sequences"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class CardLockRegistry:
    """
    One re-entrant lock per card id.

    Two purchases on the same card must not both pass the credit check against
    the same stale balance; purchases on different cards never wait on each other.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def _lock_for(self, card_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(card_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[card_id] = lock
            return lock

    @contextmanager
    def hold(self, card_id: str | None) -> Iterator[None]:
        """Hold the card's lock for the duration of the block (no-op without a card)"""
        if card_id is None:
            yield
            return
        with self._lock_for(card_id):
            yield


# Process-wide registry shared by every service instance
card_locks = CardLockRegistry()
