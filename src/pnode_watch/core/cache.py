# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Single-slot TTL cache for aggregated results.

One instance holds the last good node list, another the last good credits
map. A slot is replaced wholesale on every successful fetch and is never
written with a failed or empty result.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CachedResult(Generic[T]):
    """Cached payload with the label of its source and capture time."""

    payload: T
    source: str | None
    captured_at: float


class ResultCache(Generic[T]):
    """
    Holds at most one ``CachedResult`` and answers freshness queries.

    Args:
        ttl: Freshness window in seconds.
        clock: Returns the current time in seconds. Injected in tests.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entry: CachedResult[T] | None = None

    def get_if_fresh(self) -> CachedResult[T] | None:
        """Return the cached entry if ``now - captured_at < ttl``."""
        entry = self._entry
        if entry is None:
            return None
        if self._clock() - entry.captured_at < self.ttl:
            return entry
        return None

    def put(self, payload: T, source: str | None = None) -> CachedResult[T]:
        entry = CachedResult(payload=payload, source=source, captured_at=self._clock())
        self._entry = entry
        return entry

    def clear(self) -> None:
        self._entry = None

    @property
    def entry(self) -> CachedResult[T] | None:
        """Last stored entry regardless of freshness."""
        return self._entry
