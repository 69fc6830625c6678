# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the single-node detail path."""

from __future__ import annotations

import json

import httpx
import pytest

from pnode_watch.core.detail import get_node_detail
from pnode_watch.core.errors import NoWorkingEndpoint, ProtocolError
from pnode_watch.core.rpc import RPCClient
from tests.unit.conftest import FakeNetwork, rpc_result

STATS_RESULT = {
    "stats": {"cpu_percent": 3.5, "uptime": 1200},
    "file_size": 512,
    "metadata": {"total_bytes": 1024, "last_updated": 1_700_000_000},
}
PODS_RESULT = {"pods": [{"address": "10.0.0.9:9001", "pubkey": "p"}], "total_count": 1}


def _node(fail_method: str | None = None):
    def respond(request: httpx.Request) -> httpx.Response:
        method = json.loads(request.content)["method"]
        if method == fail_method:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "error": {"message": "stats unavailable"}, "id": 1}
            )
        if method == "get-version":
            return httpx.Response(200, json=rpc_result({"version": "0.7.0"}))
        if method == "get-stats":
            return httpx.Response(200, json=rpc_result(STATS_RESULT))
        return httpx.Response(200, json=rpc_result(PODS_RESULT))

    return respond


@pytest.mark.asyncio
async def test_detail_success(network: FakeNetwork, rpc_client: RPCClient):
    network.nodes["node-2"] = _node()

    detail = await get_node_detail(rpc_client)

    assert detail.ip == "node-2"
    assert detail.version == {"version": "0.7.0"}
    assert detail.stats["cpu_percent"] == 3.5
    assert detail.stats["total_bytes"] == 1024
    assert detail.pods == PODS_RESULT
    assert sorted(m for h, m in network.calls if h == "node-2") == [
        "get-pods",
        "get-stats",
        "get-version",
        "get-version",
    ]


@pytest.mark.asyncio
async def test_detail_preferred_ip(network: FakeNetwork, rpc_client: RPCClient):
    network.nodes["chosen"] = _node()
    network.nodes["node-1"] = _node()

    detail = await get_node_detail(rpc_client, "chosen")

    assert detail.ip == "chosen"
    assert "node-1" not in network.called_hosts


@pytest.mark.asyncio
async def test_one_failing_subquery_fails_whole_request(
    network: FakeNetwork, rpc_client: RPCClient
):
    network.nodes["node-1"] = _node(fail_method="get-stats")

    with pytest.raises(ProtocolError, match="stats unavailable"):
        await get_node_detail(rpc_client)


@pytest.mark.asyncio
async def test_no_working_node(rpc_client: RPCClient):
    with pytest.raises(NoWorkingEndpoint):
        await get_node_detail(rpc_client, "nowhere")
