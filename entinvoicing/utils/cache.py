"""In-process key/value cache with absolute expiration."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Callable, NamedTuple, Optional

from cachetools import TLRUCache

logger = logging.getLogger(__name__)


class _Entry(NamedTuple):
    value: Any
    timeout: Optional[float]


def _time_to_use(key, entry: _Entry, now: float) -> float:
    if not entry.timeout:
        return math.inf
    return now + entry.timeout


class ProcessCache:
    """Thread-safe cache shared by every request served by this process.

    Entries expire ``timeout`` seconds after they are stored.  A timeout of
    ``0`` keeps the entry until it is deleted or evicted; ``None`` uses
    ``default_timeout``.  Once ``maxsize`` entries are held the least
    recently used one is evicted.
    """

    def __init__(
        self,
        default_timeout: float = 300,
        maxsize: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_timeout = default_timeout
        self._lock = threading.Lock()
        self._store = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=clock)

    def _entry(self, value: Any, timeout: Optional[float]) -> _Entry:
        if timeout is None:
            timeout = self.default_timeout
        return _Entry(value, timeout)

    def get(self, key: str) -> Any:
        """Return the cached value, or ``None`` when missing or expired."""
        with self._lock:
            entry = self._store.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, timeout: Optional[float] = None) -> None:
        with self._lock:
            self._store[key] = self._entry(value, timeout)

    def get_or_create(
        self,
        key: str,
        factory: Callable[[], Any],
        timeout: Optional[float] = None,
    ) -> Any:
        """Return the value under ``key``, building it with ``factory`` on a miss.

        The factory runs while the cache lock is held, so concurrent callers
        racing on an empty or expired entry all receive the same instance.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                return entry.value
            entry = self._entry(factory(), timeout)
            self._store[key] = entry
            logger.debug("Cache entry %s created", key)
            return entry.value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
