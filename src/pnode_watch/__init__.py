# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
pnode-watch: pNode network aggregation.

Polls a prioritized list of pNode RPC endpoints, merges the credits feed,
deduplicates peers and falls back to demo data when the network is
unreachable.

Example:
    >>> import pnode_watch
    >>>
    >>> listing = await pnode_watch.fetch_nodes()
    >>> print(listing.source, len(listing.nodes))
"""

from __future__ import annotations

from pnode_watch.config import Settings
from pnode_watch.core.aggregator import NodeAggregator, load_nodes
from pnode_watch.core.dedupe import dedupe_records
from pnode_watch.core.models import NodeListing, PeerRecord
from pnode_watch.core.rpc import RPCClient

__version__ = "0.3.0"
__all__ = [
    "NodeAggregator",
    "NodeListing",
    "PeerRecord",
    "RPCClient",
    "Settings",
    "dedupe_records",
    "fetch_nodes",
    "load_nodes",
    "__version__",
]


async def fetch_nodes(settings: Settings | None = None) -> NodeListing:
    """
    Fetch the node list once - convenience wrapper.

    Opens a one-shot client, aggregates, and falls back to the demo set when
    every endpoint is down. For repeated calls that should share caches, keep
    a ``NodeAggregator`` around instead.
    """
    settings = settings or Settings.from_env()
    async with RPCClient(settings) as client:
        return await load_nodes(NodeAggregator(client))
