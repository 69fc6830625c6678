# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the single-slot TTL cache."""

from __future__ import annotations

from pnode_watch.core.cache import ResultCache
from tests.unit.conftest import FakeClock


class TestResultCache:
    def test_empty_cache_has_nothing_fresh(self):
        cache: ResultCache[list[int]] = ResultCache(60, clock=FakeClock())
        assert cache.get_if_fresh() is None
        assert cache.entry is None

    def test_fresh_within_ttl(self):
        clock = FakeClock()
        cache: ResultCache[list[int]] = ResultCache(60, clock=clock)
        cache.put([1, 2], source="http://node-1:6000")

        clock.advance(59.9)
        entry = cache.get_if_fresh()
        assert entry is not None
        assert entry.payload == [1, 2]
        assert entry.source == "http://node-1:6000"
        assert entry.captured_at == clock.now - 59.9

    def test_stale_at_ttl(self):
        clock = FakeClock()
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.put("x")
        clock.advance(60)
        assert cache.get_if_fresh() is None
        # Stale entries remain readable for inspection.
        assert cache.entry is not None

    def test_put_replaces_wholesale(self):
        clock = FakeClock()
        cache: ResultCache[dict[str, int]] = ResultCache(300, clock=clock)
        cache.put({"a": 1}, source="one")
        clock.advance(100)
        cache.put({"b": 2}, source="two")

        entry = cache.get_if_fresh()
        assert entry is not None
        assert entry.payload == {"b": 2}
        assert entry.source == "two"
        assert entry.captured_at == clock.now

    def test_clear(self):
        cache: ResultCache[int] = ResultCache(60, clock=FakeClock())
        cache.put(1)
        cache.clear()
        assert cache.get_if_fresh() is None

    def test_zero_ttl_never_fresh(self):
        cache: ResultCache[int] = ResultCache(0, clock=FakeClock())
        cache.put(1)
        assert cache.get_if_fresh() is None
