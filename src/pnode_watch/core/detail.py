# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Version, stats and pods of a single live pNode."""

from __future__ import annotations

import asyncio

import structlog

from pnode_watch.core.models import NodeDetail
from pnode_watch.core.rpc import RPCClient

logger = structlog.get_logger(__name__)


async def get_node_detail(client: RPCClient, ip: str | None = None) -> NodeDetail:
    """
    Query one working node for its version, stats and pods.

    ``ip`` is tried first when given. The three sub-queries run concurrently
    and all must succeed; the first failure is raised as-is.

    Raises:
        NoWorkingEndpoint: No candidate answered the liveness probe.
        UpstreamError, ParseError: A sub-query failed.
    """
    address = await client.find_working_endpoint(ip)
    logger.debug("Fetching node detail", address=address)

    version, stats, pods = await asyncio.gather(
        client.get_version(address),
        client.get_stats(address),
        client.get_pods(address),
    )
    return NodeDetail(ip=address, version=version, stats=stats, pods=pods)
