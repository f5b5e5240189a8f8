"""
Dedup Cache
===========

Bounded set of content ids already processed in this process lifetime.
"""

import threading
from typing import Dict, Hashable, List


class DedupCache:
    """
    Insertion-ordered id set with a trim-on-overflow policy.

    When the cache grows past max_size, evict_if_needed() keeps only the
    trim_to most recently *inserted* ids. Marking an id that is already
    present does not move it.
    """

    def __init__(self, max_size: int = 1000, trim_to: int = 500):
        if trim_to > max_size:
            raise ValueError(f"trim_to ({trim_to}) cannot exceed max_size ({max_size})")
        self.max_size = max_size
        self.trim_to = trim_to
        self._ids: Dict[Hashable, None] = {}
        self._lock = threading.Lock()

    def seen(self, item_id: Hashable) -> bool:
        with self._lock:
            return item_id in self._ids

    def mark_seen(self, item_id: Hashable):
        with self._lock:
            self._ids.setdefault(item_id, None)

    def evict_if_needed(self) -> int:
        """
        Trim the cache if it exceeds max_size.

        Returns:
            Number of ids evicted (0 if under the limit)
        """
        with self._lock:
            size = len(self._ids)
            if size <= self.max_size:
                return 0
            keep = list(self._ids)[size - self.trim_to:]
            self._ids = dict.fromkeys(keep)
            return size - len(keep)

    def ids(self) -> List[Hashable]:
        """Snapshot of cached ids, oldest first."""
        with self._lock:
            return list(self._ids)

    def clear(self):
        with self._lock:
            self._ids.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __contains__(self, item_id: Hashable) -> bool:
        return self.seen(item_id)
