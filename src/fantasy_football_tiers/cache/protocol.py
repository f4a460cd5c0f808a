from __future__ import annotations

from typing import Protocol, TypeVar

T = TypeVar("T")


class TierCacheStore(Protocol[T]):
    def get(self, key: str) -> T | None: ...

    def set(self, key: str, payload: T, ttl_seconds: float | None = None) -> None: ...

    def invalidate(self, key: str | None = None) -> None: ...

    def sweep(self) -> int: ...
