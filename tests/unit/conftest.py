# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: a fake pNode network behind httpx.MockTransport."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import pytest
import structlog

from pnode_watch.config import Settings
from pnode_watch.core.aggregator import NodeAggregator
from pnode_watch.core.cache import ResultCache
from pnode_watch.core.credits import CreditsFetcher
from pnode_watch.core.rpc import RPCClient

CREDITS_HOST = "credits.test"
CREDITS_URL = f"https://{CREDITS_HOST}/api/pods-credits"
ENDPOINTS = [f"http://node-{i}:6000" for i in range(1, 5)]


def make_pod(
    pubkey: str | None = "pk-1",
    address: str = "10.0.0.1:9001",
    **overrides: Any,
) -> dict[str, Any]:
    pod: dict[str, Any] = {
        "address": address,
        "pubkey": pubkey,
        "is_public": True,
        "last_seen_timestamp": 1_700_000_000,
        "rpc_port": 6000,
        "storage_committed": 100,
        "storage_used": 10,
        "storage_usage_percent": 10.0,
        "uptime": 3600,
        "version": "0.7.0",
    }
    pod.update(overrides)
    return pod


def pods_response(*pods: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "result": {"pods": list(pods), "total_count": len(pods)}, "id": 1}


def rpc_result(result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": 1}


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeNetwork:
    """
    Routes requests by host.

    Node behaviors: ``"timeout"``, ``"refused"``, an ``httpx.Response``,
    a callable taking the request, or a JSON body returned with HTTP 200.
    Unknown hosts refuse the connection.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, Any] = {}
        self.credits: Any = {"pods_credits": []}
        self.calls: list[tuple[str, str]] = []
        self.payloads: list[dict[str, Any]] = []
        self.credits_calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == CREDITS_HOST:
            self.credits_calls += 1
            return self._respond(request, self.credits)

        payload = json.loads(request.content)
        self.payloads.append(payload)
        self.calls.append((host, payload["method"]))
        return self._respond(request, self.nodes.get(host, "refused"))

    @staticmethod
    def _respond(request: httpx.Request, behavior: Any) -> httpx.Response:
        if behavior == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if behavior == "refused":
            raise httpx.ConnectError("Connection refused", request=request)
        if isinstance(behavior, httpx.Response):
            return behavior
        if callable(behavior):
            return behavior(request)
        return httpx.Response(200, json=behavior)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def called_hosts(self) -> list[str]:
        return [host for host, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration made by CLI invocations."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    root.setLevel(level)


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        endpoints=list(ENDPOINTS),
        detail_endpoints=["node-1", "node-2"],
        credits_url=CREDITS_URL,
        rpc_timeout=1.0,
        detail_timeout=1.0,
        probe_timeout=1.0,
        credits_timeout=1.0,
    )


@pytest.fixture
def http_client(network: FakeNetwork) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=network.transport())


@pytest.fixture
def rpc_client(settings: Settings, http_client: httpx.AsyncClient) -> RPCClient:
    return RPCClient(settings, http_client=http_client)


@pytest.fixture
def credits_fetcher(
    settings: Settings, http_client: httpx.AsyncClient, clock: FakeClock
) -> CreditsFetcher:
    return CreditsFetcher(
        settings,
        cache=ResultCache(settings.credits_cache_ttl, clock=clock),
        http_client=http_client,
    )


@pytest.fixture
def aggregator(
    rpc_client: RPCClient,
    credits_fetcher: CreditsFetcher,
    settings: Settings,
    clock: FakeClock,
) -> NodeAggregator:
    return NodeAggregator(
        rpc_client,
        credits_fetcher=credits_fetcher,
        cache=ResultCache(settings.node_cache_ttl, clock=clock),
    )
