"""带 TTL 的内存缓存（时钟可注入，便于单测）。"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """按 key 缓存短期数据，超过 ttl 秒即视为失效。

    Args:
        ttl_seconds: 有效期（秒）；<= 0 表示不缓存
        clock: 返回单调时间（秒）的函数，默认 time.monotonic
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
