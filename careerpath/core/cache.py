"""Read-through TTL cache with stale-while-revalidate refresh.

A fresh entry is served as-is. A stale entry is served immediately and a
single background refresh is scheduled for it; the refreshed snapshot only
replaces the entry when it differs. A missing entry is fetched inline, and
if that fetch fails the caller gets CatalogUnavailableError (fail closed).
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Set, Tuple, TypeVar

from careerpath.core.errors import CareerPathError, CatalogUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_default_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _shared_executor() -> ThreadPoolExecutor:
    global _default_executor
    with _executor_lock:
        if _default_executor is None:
            _default_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="catalog-refresh")
        return _default_executor


class ReadThroughCache(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[Hashable], T],
        ttl_seconds: float,
        name: str = "cache",
        clock: Callable[[], float] = time.time,
        executor: Optional[Executor] = None,
    ) -> None:
        self._fetch = fetch
        self.ttl_seconds = float(ttl_seconds)
        self.name = name
        self._clock = clock
        self._executor = executor
        self._entries: Dict[Hashable, Tuple[T, float]] = {}
        self._refreshing: Set[Hashable] = set()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> T:
        with self._lock:
            entry = self._entries.get(key)

        if entry is None:
            value = self._fetch_or_raise(key)
            with self._lock:
                self._entries[key] = (value, self._clock())
            return value

        value, fetched_at = entry
        if self._clock() - fetched_at > self.ttl_seconds:
            self._schedule_refresh(key)
        return value

    def _fetch_or_raise(self, key: Hashable) -> T:
        try:
            return self._fetch(key)
        except CareerPathError:
            raise
        except Exception as e:
            raise CatalogUnavailableError(f"{self.name}[{key}]", e) from e

    def _schedule_refresh(self, key: Hashable) -> None:
        with self._lock:
            if key in self._refreshing:
                return
            self._refreshing.add(key)
        executor = self._executor or _shared_executor()
        executor.submit(self._refresh, key)

    def _refresh(self, key: Hashable) -> None:
        try:
            value = self._fetch(key)
        except Exception as e:
            logger.warning("%s: background refresh of %s failed, keeping stale entry: %s", self.name, key, e)
            with self._lock:
                self._refreshing.discard(key)
            return

        # store and release under one lock
        with self._lock:
            current = self._entries.get(key)
            changed = current is None or current[0] != value
            if changed:
                self._entries[key] = (value, self._clock())
            else:
                self._entries[key] = (current[0], self._clock())
            self._refreshing.discard(key)
        if changed:
            logger.info("%s: refreshed snapshot for %s", self.name, key)

    def is_fresh(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
        return entry is not None and (self._clock() - entry[1]) <= self.ttl_seconds

    def timestamp(self, key: Hashable) -> Optional[float]:
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry else None

    def peek(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
        return entry[0] if entry else None

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
