"""Process-local cache with a fixed time-to-live.

Entries are served while fresh and recomputed on the first read after they
expire. Writes elsewhere in the app never invalidate entries, so readers may
see data up to ``ttl_seconds`` old.
"""
import threading
import time
from typing import Any, Callable, Optional

_MISSING = object()


class TTLCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return _MISSING
        return value

    def get(self, key: str) -> Optional[Any]:
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the fresh cached value for ``key`` or compute and store it.

        A stored ``None`` counts as a hit.
        """
        value = self._lookup(key)
        if value is _MISSING:
            value = compute()
            self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
