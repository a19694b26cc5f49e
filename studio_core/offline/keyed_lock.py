# =============================================================================
# studio_core/offline/keyed_lock.py
# Per-key write serialization
# =============================================================================

from __future__ import annotations
import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """
    One lock per collection key, created on first use.

    Read-modify-write sequences on the same key run one at a time;
    different keys never block each other. The locks are reentrant, so a
    change listener running inside a write may write the same key again.

    Usage:
        locks = KeyedLock()
        with locks.hold("posts"):
            posts = store.get("posts", [])
            ...
            store.set("posts", posts)
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def lock_for(self, key: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self.lock_for(key)
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)
