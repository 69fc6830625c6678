# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Core pipeline: RPC client, credits, cache, dedupe, aggregation, fallback."""

from pnode_watch.core.aggregator import NodeAggregator, load_nodes
from pnode_watch.core.cache import CachedResult, ResultCache
from pnode_watch.core.credits import CreditsFetcher, CreditsLookup
from pnode_watch.core.dedupe import dedupe_records
from pnode_watch.core.detail import get_node_detail
from pnode_watch.core.errors import (
    EmptyResult,
    NoWorkingEndpoint,
    ParseError,
    PNodeError,
    ProtocolError,
    RequestTimeout,
    TransportError,
    UpstreamError,
)
from pnode_watch.core.fallback import generate_demo_nodes
from pnode_watch.core.models import (
    EndpointAttempt,
    FallbackResult,
    NodeDetail,
    NodeListing,
    NodesResult,
    PeerRecord,
)
from pnode_watch.core.rpc import RPCClient, RPCOutcome

__all__ = [
    "CachedResult",
    "CreditsFetcher",
    "CreditsLookup",
    "EmptyResult",
    "EndpointAttempt",
    "FallbackResult",
    "NoWorkingEndpoint",
    "NodeAggregator",
    "NodeDetail",
    "NodeListing",
    "NodesResult",
    "PNodeError",
    "ParseError",
    "PeerRecord",
    "ProtocolError",
    "RPCClient",
    "RPCOutcome",
    "RequestTimeout",
    "ResultCache",
    "TransportError",
    "UpstreamError",
    "dedupe_records",
    "generate_demo_nodes",
    "get_node_detail",
    "load_nodes",
]
