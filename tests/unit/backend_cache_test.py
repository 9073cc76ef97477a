"""Tests for the per-options backend cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from twoslash.backend import BackendCache, InMemoryBackend, compute_options_hash


class CountingFactory:
    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, options: dict[str, Any]) -> InMemoryBackend:
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        return InMemoryBackend(options)


class TestComputeOptionsHash:
    def test_key_order_does_not_matter(self) -> None:
        assert compute_options_hash({"a": 1, "b": 2}) == compute_options_hash({"b": 2, "a": 1})

    def test_values_matter(self) -> None:
        assert compute_options_hash({"strict": True}) != compute_options_hash({"strict": False})


class TestBackendCache:
    def test_same_options_reuse_the_backend(self) -> None:
        cache, factory = BackendCache(), CountingFactory()
        first = cache.get_or_create({"strict": True}, factory)
        second = cache.get_or_create({"strict": True}, factory)
        assert first is second
        assert factory.calls == 1

    def test_different_options_get_different_backends(self) -> None:
        cache, factory = BackendCache(), CountingFactory()
        first = cache.get_or_create({"strict": True}, factory)
        second = cache.get_or_create({"strict": False}, factory)
        assert first is not second
        assert factory.calls == 2
        assert len(cache) == 2

    def test_factory_receives_a_copy_of_the_options(self) -> None:
        options = {"target": 99}
        backend = BackendCache().get_or_create(options, CountingFactory())
        assert isinstance(backend, InMemoryBackend)
        assert backend.compiler_options == options

    def test_contains_and_clear(self) -> None:
        cache = BackendCache()
        cache.get_or_create({"strict": True}, CountingFactory())
        assert {"strict": True} in cache
        assert {"strict": False} not in cache

        cache.clear()
        assert len(cache) == 0

    def test_concurrent_requests_build_once(self) -> None:
        cache, factory = BackendCache(), CountingFactory(delay=0.05)
        with ThreadPoolExecutor(max_workers=8) as pool:
            backends = list(pool.map(lambda _: cache.get_or_create({"strict": True}, factory), range(8)))

        assert factory.calls == 1
        assert all(b is backends[0] for b in backends)

    def test_distinct_keys_build_concurrently(self) -> None:
        cache, factory = BackendCache(), CountingFactory(delay=0.05)
        with ThreadPoolExecutor(max_workers=4) as pool:
            backends = list(pool.map(lambda i: cache.get_or_create({"target": i}, factory), range(4)))

        assert factory.calls == 4
        assert len({id(b) for b in backends}) == 4
