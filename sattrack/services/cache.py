from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple


def _normalize(value: Any) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    return str(value)


def make_key(operation: str, *params: Any) -> str:
    """Deterministic cache key from an operation name and its parameters."""
    return ":".join([operation] + [_normalize(p) for p in params])


class ResponseCache:
    """In-memory store of upstream responses with per-entry expiry.

    Entries are only removed when read after they expire; there is no size
    bound, the process lifetime is the upper limit.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def __len__(self) -> int:
        return len(self._entries)
