from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ResponseCache:
    """
    Single-slot in-memory cache.
    The last stored value is kept until it is overwritten, so it can be
    served as a stale fallback after a failed refresh.
    """

    timestamp: float = 0.0
    data: Optional[dict[str, Any]] = None

    @property
    def has_data(self) -> bool:
        return self.data is not None

    def age(self, now: float | None = None) -> Optional[float]:
        if self.data is None:
            return None
        now = time.time() if now is None else now
        return now - self.timestamp

    def is_fresh(self, ttl: float, now: float | None = None) -> bool:
        """
        Return True if a value exists and is younger than `ttl` seconds.
        """
        age = self.age(now)
        return age is not None and age < ttl

    def store(self, data: dict[str, Any], now: float | None = None) -> None:
        """
        Store value in cache with current timestamp.
        """
        self.timestamp = time.time() if now is None else now
        self.data = data
