"""
Registry of GVKs the controller watches.

Notification callbacks run concurrently; registration is serialized by a
lock so a GVK is watched at most once.
"""

import threading
from typing import Callable, FrozenSet, Optional, Set

from ..core.model import GroupVersionKind

StartWatch = Callable[[GroupVersionKind], None]


class WatchRegistry:
    def __init__(self) -> None:
        self._watched: Set[GroupVersionKind] = set()
        self._lock = threading.Lock()

    def register_if_absent(self, gvk: GroupVersionKind, start: Optional[StartWatch] = None) -> bool:
        """
        Record gvk as watched, starting the watch first when start is given.

        Returns:
            True if gvk was newly registered, False if it was already watched

        Raises:
            Whatever start raises; gvk is then left unregistered
        """
        with self._lock:
            if gvk in self._watched:
                return False
            if start is not None:
                start(gvk)
            self._watched.add(gvk)
            return True

    def is_watched(self, gvk: GroupVersionKind) -> bool:
        with self._lock:
            return gvk in self._watched

    def watched(self) -> FrozenSet[GroupVersionKind]:
        with self._lock:
            return frozenset(self._watched)
