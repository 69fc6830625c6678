# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Fetch pod credit balances from the external credits feed.

Feed format::

    {"pods_credits": [{"pod_id": "<pubkey>", "credits": 42}, ...]}

A failed fetch yields an empty map and leaves the cache untouched, so the
next request retries immediately instead of serving a poisoned empty result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from pnode_watch.config import Settings
from pnode_watch.core.cache import ResultCache
from pnode_watch.core.errors import ParseError, RequestTimeout, TransportError, UpstreamError
from pnode_watch.core.models import CreditsFetchInfo, CreditsMap

logger = structlog.get_logger(__name__)

SAMPLE_SIZE = 10


@dataclass
class CreditsLookup:
    """Credits map for one request plus how it was obtained."""

    credits: CreditsMap
    info: CreditsFetchInfo


def _finite_int(value: float) -> int | None:
    if not math.isfinite(value):
        return None
    return int(value)


def _coerce_credits(value: Any) -> int | None:
    """Accept ints, finite floats and numeric strings; anything else is rejected."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _finite_int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return _finite_int(float(text))
        except ValueError:
            return None
    return None


def parse_credits(data: Any) -> CreditsMap:
    """
    Convert the credits feed body into a CreditsMap.

    Raises:
        ParseError: The body is not ``{"pods_credits": [...]}``.
    """
    if not isinstance(data, dict):
        raise ParseError(f"Credits feed is not a JSON object: {type(data).__name__}")
    entries = data.get("pods_credits")
    if not isinstance(entries, list):
        raise ParseError("Credits feed has no 'pods_credits' list")

    credits: CreditsMap = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        pod_id = entry.get("pod_id")
        if not pod_id:
            continue
        value = _coerce_credits(entry.get("credits"))
        if value is None or value < 0:
            logger.debug("Skipping credits entry", pod_id=pod_id, credits=entry.get("credits"))
            continue
        credits[str(pod_id)] = value
    return credits


class CreditsFetcher:
    """
    Cache-aware credits lookup.

    Args:
        settings: Feed URL, timeout and cache TTL.
        cache: Credits slot; a private one is created when omitted.
        http_client: Shared client; a one-shot client is used when omitted.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: ResultCache[CreditsMap] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._cache = cache if cache is not None else ResultCache(self._settings.credits_cache_ttl)
        self._http_client = http_client

    @property
    def cache(self) -> ResultCache[CreditsMap]:
        return self._cache

    async def fetch(self) -> CreditsMap:
        """
        GET the feed and parse it, bypassing the cache.

        Raises:
            RequestTimeout, TransportError: The feed could not be reached.
            ParseError: The body did not match the feed format.
        """
        url = self._settings.credits_url
        timeout = self._settings.credits_timeout
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.get(url)
        except httpx.TimeoutException as e:
            raise RequestTimeout(f"Timeout after {timeout}s fetching {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} from {url}", status_code=response.status_code
            )
        try:
            body = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e
        return parse_credits(body)

    async def get_credits(self) -> CreditsLookup:
        """Return cached credits when fresh, else fetch. Never raises."""
        cached = self._cache.get_if_fresh()
        if cached is not None:
            credits = cached.payload
            return CreditsLookup(
                credits=credits,
                info=CreditsFetchInfo(
                    fetched=True,
                    cached=True,
                    count=len(credits),
                    sample=list(credits.items())[:SAMPLE_SIZE],
                ),
            )

        try:
            credits = await self.fetch()
        except (UpstreamError, ParseError) as e:
            logger.warning(
                "Credits fetch failed",
                url=self._settings.credits_url,
                error=str(e),
            )
            return CreditsLookup(credits={}, info=CreditsFetchInfo(fetched=False, error=str(e)))

        self._cache.put(credits, source=self._settings.credits_url)
        logger.debug("Credits fetched", count=len(credits))
        return CreditsLookup(
            credits=credits,
            info=CreditsFetchInfo(
                fetched=True,
                count=len(credits),
                sample=list(credits.items())[:SAMPLE_SIZE],
            ),
        )
