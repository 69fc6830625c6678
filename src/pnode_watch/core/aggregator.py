# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Aggregate the network's node list from a prioritized endpoint list.

Endpoints are tried strictly one after another in configured order; the
first one that returns a non-empty pod list wins and the rest are not
contacted. The winning batch gets credits merged in, is deduplicated and
cached. If every endpoint fails the caller gets a ``FallbackResult`` and
nothing is cached.
"""

from __future__ import annotations

from typing import Any

import structlog

from pnode_watch.config import Settings
from pnode_watch.core.cache import ResultCache
from pnode_watch.core.credits import CreditsFetcher
from pnode_watch.core.dedupe import dedupe_records
from pnode_watch.core.errors import EmptyResult, ParseError
from pnode_watch.core.fallback import DEMO_SOURCE, generate_demo_nodes
from pnode_watch.core.models import (
    EndpointAttempt,
    FallbackResult,
    NodeListing,
    NodesResult,
    PeerRecord,
    filter_diagnostics,
    parse_pods,
)
from pnode_watch.core.rpc import RPCClient, RPCOutcome

logger = structlog.get_logger(__name__)

# Preferred over plain get-pods because it carries storage and uptime metrics.
PODS_METHODS = ("get-pods-with-stats",)


def _records_from(outcome: RPCOutcome) -> list[PeerRecord]:
    """
    Raises:
        ParseError: The result is not a pod list container.
        EmptyResult: The pod list is empty.
    """
    records = parse_pods(outcome.result)
    if not records:
        raise EmptyResult("No pods returned")
    return records


class NodeAggregator:
    """
    Turns the configured endpoint list into one merged, deduplicated node list.

    Args:
        rpc_client: Open ``RPCClient`` used for endpoint calls.
        credits_fetcher: Credits source; built from settings when omitted.
        cache: Node list slot; a private one is created when omitted.
        settings: Defaults to the RPC client's settings.
    """

    def __init__(
        self,
        rpc_client: RPCClient,
        credits_fetcher: CreditsFetcher | None = None,
        cache: ResultCache[list[PeerRecord]] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._rpc = rpc_client
        self._settings = settings or rpc_client.settings
        self._credits = credits_fetcher or CreditsFetcher(self._settings)
        self._cache = cache if cache is not None else ResultCache(self._settings.node_cache_ttl)

    @property
    def cache(self) -> ResultCache[list[PeerRecord]]:
        return self._cache

    async def get_nodes(self, diagnostics: bool = False) -> NodesResult | FallbackResult:
        """
        Return the aggregated node list.

        A fresh cache entry is returned without any network call unless
        ``diagnostics`` is set, in which case a live fetch is always made.
        """
        if not diagnostics:
            cached = self._cache.get_if_fresh()
            if cached is not None:
                logger.debug("Serving cached node list", source=cached.source)
                return NodesResult(
                    records=[record.model_copy() for record in cached.payload],
                    source=cached.source or "",
                    cached=True,
                )

        trail: list[dict[str, Any]] = []
        errors: list[str] = []

        for endpoint in self._settings.endpoints:
            if not endpoint.strip():
                continue

            for method in PODS_METHODS:
                outcome = await self._rpc.attempt(
                    endpoint, method, timeout=self._settings.rpc_timeout
                )
                error = outcome.error
                records: list[PeerRecord] = []
                if outcome.ok:
                    try:
                        records = _records_from(outcome)
                    except (ParseError, EmptyResult) as e:
                        error = str(e)

                trail.append(
                    EndpointAttempt(
                        endpoint=endpoint,
                        method=method,
                        ok=error is None,
                        latency_ms=outcome.latency_ms,
                        error=error,
                    ).to_dict()
                )

                if error is not None:
                    errors.append(f"{endpoint} ({method}): {error}")
                    logger.warning(
                        "pRPC endpoint failed",
                        endpoint=endpoint,
                        method=method,
                        error=error,
                    )
                    continue

                return await self._finish(endpoint, records, trail, diagnostics)

        logger.warning("All pRPC endpoints failed", attempted=len(errors))
        return FallbackResult(errors=errors, diagnostics=filter_diagnostics(trail))

    async def _finish(
        self,
        endpoint: str,
        records: list[PeerRecord],
        trail: list[dict[str, Any]],
        diagnostics: bool,
    ) -> NodesResult:
        lookup = await self._credits.get_credits()
        merged = [
            record.model_copy(update={"credits": lookup.credits.get(record.identity_key, 0)})
            for record in records
        ]
        nodes = dedupe_records(merged)

        if diagnostics:
            trail.append(lookup.info.to_dict())

        self._cache.put([record.model_copy() for record in nodes], source=endpoint)
        logger.info(
            "Node list fetched",
            source=endpoint,
            reported=len(records),
            unique=len(nodes),
            credits=len(lookup.credits),
        )
        return NodesResult(
            records=nodes,
            source=endpoint,
            cached=False,
            diagnostics=filter_diagnostics(trail),
        )


async def load_nodes(aggregator: NodeAggregator) -> NodeListing:
    """
    Live node list, or the demo set when every endpoint is down.

    The caller always gets something renderable; ``is_live`` tells which.
    """
    result = await aggregator.get_nodes()
    if isinstance(result, NodesResult):
        return NodeListing(
            nodes=dedupe_records(result.records),
            is_live=True,
            source=result.source,
        )

    logger.info("Using demo data (pRPC endpoints unavailable)", errors=len(result.errors))
    return NodeListing(nodes=generate_demo_nodes(), is_live=False, source=DEMO_SOURCE)
