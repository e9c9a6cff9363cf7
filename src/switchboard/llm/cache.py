"""Cache-aside support for dispatch.

CacheFacade wraps an optional backing store. With no store every lookup is a
miss and every write is dropped, so callers never branch on "is a cache
configured".
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from switchboard import logger as logger_mod

from .types import LLMMessage

log = logger_mod.get_logger()

KEY_PREFIX = "llm:"


def cache_key(
    service: str,
    model: Optional[str],
    messages: Sequence[LLMMessage] = (),
    prompt: Optional[str] = None,
) -> str:
    """Deterministic key for (service, model, messages, prompt)."""

    turns = ""
    if messages:
        turns = json.dumps(
            [{"role": m.role, "content": m.content} for m in messages],
            ensure_ascii=False,
            separators=(",", ":"),
        )
    full = f"{service}{model or ''}{turns}{prompt or ''}"
    return KEY_PREFIX + hashlib.md5(full.encode("utf-8")).hexdigest()


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryCache:
    """Thread-safe dict store with optional TTL and a size cap."""

    def __init__(self, ttl_s: Optional[float] = None, max_size: int = 2048) -> None:
        self._ttl = ttl_s
        self._max_size = max_size
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            ts, value = entry
            if self._ttl is not None and time.time() - ts > self._ttl:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                # drop the oldest entry
                oldest = min(self._store, key=lambda k: self._store[k][0])
                del self._store[oldest]
            self._store[key] = (time.time(), value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class CacheFacade:
    def __init__(self, store: Optional[CacheStore] = None) -> None:
        self._store = store

    def get(self, key: str) -> Optional[Any]:
        if self._store is None:
            return None
        try:
            return self._store.get(key)
        except Exception as e:  # noqa: BLE001
            log.warning(f"Cache read failed for {key}: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        if self._store is None:
            return
        try:
            self._store.set(key, value)
        except Exception as e:  # noqa: BLE001
            log.warning(f"Cache write failed for {key}: {e}")
