from __future__ import annotations

from typing import Any, Callable, Hashable


_MISSING = object()


class RequestCache:
    """Memoizes idempotent reads for the lifetime of one request or job.

    A fresh instance is created per request (see ``get_request_cache``), so
    reads are never shared across requests. Writers call ``invalidate`` for
    the keys they touch.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}
        self.hits = 0
        self.misses = 0

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        value = self._entries.get(key, _MISSING)
        if value is not _MISSING:
            self.hits += 1
            return value
        self.misses += 1
        value = loader()
        self._entries[key] = value
        return value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)


def cached(cache: RequestCache | None, key: Hashable, loader: Callable[[], Any]) -> Any:
    if cache is None:
        return loader()
    return cache.get_or_load(key, loader)


def get_request_cache() -> RequestCache:
    return RequestCache()
