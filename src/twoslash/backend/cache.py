import hashlib
import json
import logging
import threading
from collections.abc import Mapping
from typing import Any

from twoslash.core.ports.backend import BackendFactory, TypeInfoBackend

logger = logging.getLogger(__name__)


def compute_options_hash(options: Mapping[str, Any]) -> str:
    h = hashlib.sha256()
    h.update(json.dumps(options, sort_keys=True, default=str).encode("utf-8"))
    return h.hexdigest()


class BackendCache:
    """Backends keyed by a stable hash of their compiler options.

    Thread-safe with get-or-create-once semantics: concurrent callers asking for
    the same options wait on a per-key lock, so the factory runs at most once per
    key. Callers with different options never block each other during
    construction.
    """

    def __init__(self) -> None:
        self._entries: dict[str, TypeInfoBackend] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_or_create(self, options: Mapping[str, Any], factory: BackendFactory) -> TypeInfoBackend:
        key = compute_options_hash(options)
        with self._lock:
            backend = self._entries.get(key)
            if backend is not None:
                return backend
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                backend = self._entries.get(key)
            if backend is None:
                logger.info("Creating backend for options %s", key[:12])
                backend = factory(dict(options))
                with self._lock:
                    self._entries[key] = backend
        return backend

    def __contains__(self, options: Mapping[str, Any]) -> bool:
        with self._lock:
            return compute_options_hash(options) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()
