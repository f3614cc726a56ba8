
import threading
from typing import Callable, Optional

from cachetools import LRUCache

from abtest.context import Experiment, Group

AssignFunc = Callable[[str, Experiment], Optional[Group]]

MISSING = object()


class AssignmentCache:
    """
    割り当て結果のキャッシュ。キーは (実験名, user_id)。

    The experiment definition is stored next to each result; a lookup whose
    experiment no longer equals the stored one is treated as a miss, so an
    updated config never serves a stale group. Least recently used entries
    are evicted once max_entries is reached.
    """
    def __init__(self, max_entries: int = 10000):
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        # LRUCache is not thread-safe on its own
        self._entries = LRUCache(maxsize=max_entries)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, experiment: Experiment, user_id: str):
        """Return the cached group (possibly None), or MISSING on a miss."""
        with self._lock:
            entry = self._entries.get((experiment.name, user_id))
        if entry is None or entry[0] != experiment:
            return MISSING
        return entry[1]

    def put(self, experiment: Experiment, user_id: str, group: Optional[Group]) -> None:
        with self._lock:
            self._entries[(experiment.name, user_id)] = (experiment, group)

    def get_or_compute(self, experiment: Experiment, user_id: str, compute: AssignFunc) -> Optional[Group]:
        cached = self.get(experiment, user_id)
        if cached is not MISSING:
            return cached

        # assignment is pure, computing outside the lock is safe
        group = compute(user_id, experiment)
        self.put(experiment, user_id, group)
        return group

    def invalidate(self, experiment_name: Optional[str] = None) -> None:
        with self._lock:
            if experiment_name is None:
                self._entries.clear()
                return
            for key in [k for k in self._entries.keys() if k[0] == experiment_name]:
                self._entries.pop(key, None)
