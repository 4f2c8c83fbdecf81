from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any


def new_build_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class BuildSession:
    """
    Per-build cache scope.

    Everything a step memoizes for the duration of one build (page catalog,
    materialized templates, toolchain plugin state) lives here instead of in
    module globals, so two builds running in the same process never share it.
    `reset()` is idempotent and is called once by the runner before the first step.
    """

    build_id: str = field(default_factory=new_build_id)
    resets: int = 0
    _caches: dict[str, Any] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def reset(self) -> None:
        with self._lock:
            self._caches.clear()
            self.resets += 1

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._caches.get(key, default)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._caches[key] = value

    def discard(self, key: str) -> None:
        with self._lock:
            self._caches.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._caches
