"""Short-lived result cache keyed by canonical query signatures"""

import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

DEFAULT_TTL_SECONDS = 300.0

_MISSING = object()


def build_cache_key(method: str, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Canonical key for a request: METHOD:path?a=1&b=2.

    Parameters are sorted by name, empty values are dropped and list values
    are joined with commas, so equivalent requests share one key whatever
    order their parameters arrived in.
    """
    parts = []
    for name in sorted(params or {}):
        value = params[name]
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        if value is None or value == "":
            continue
        parts.append(f"{name}={value}")

    key = f"{method.upper()}:{path}"
    return f"{key}?{'&'.join(parts)}" if parts else key


class ResultCache:
    """
    TTL cache for computed query results.

    Expired entries are evicted when read. Each entry is an immutable
    (value, stored_at) pair swapped in under the lock.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                return default

            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return default

            return value

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
