# =============================================================================
# studio_core/offline/change_notifier.py
# "Data changed" broadcast for local writes
# =============================================================================
"""
ChangeNotifier - tells interested components that local data changed.

Listeners get a ChangeEvent naming the store key that was written and
are expected to re-read through the data service rather than apply a
diff. Listeners run synchronously, in registration order, on the thread
that performed the write.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

from studio_core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Invalidation signal for one store key."""
    key: str
    changed_at: datetime = field(default_factory=datetime.now)


ChangeListener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Observer registry owned by a LocalStore.

    Usage:
        notifier = ChangeNotifier()
        notifier.subscribe(lambda event: refresh())
        notifier.notify("richacks_v3_posts")
    """

    def __init__(self):
        self._listeners: List[ChangeListener] = []
        self._lock = threading.Lock()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ChangeListener) -> None:
        """Register a listener; registering the same one twice is a no-op."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        """Remove a registered listener."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, key: str) -> ChangeEvent:
        """Fire a ChangeEvent for key to every listener."""
        event = ChangeEvent(key=key)
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error in change listener for {key}: {e}", exc_info=True)

        return event
