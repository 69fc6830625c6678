# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
HTTP API consumed by the dashboard.

Routes:
    GET /api/pnodes?diagnostics=<0|1>   Aggregated node list or fallback signal
    GET /api/pnode?ip=<optional>        Version, stats and pods of one live node
    GET /health                         Liveness of this service

Run with::

    pnode-watch serve --port 8000
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from pnode_watch.config import Settings
from pnode_watch.core.aggregator import NodeAggregator
from pnode_watch.core.cache import ResultCache
from pnode_watch.core.credits import CreditsFetcher
from pnode_watch.core.detail import get_node_detail
from pnode_watch.core.errors import PNodeError
from pnode_watch.core.models import NodesResult
from pnode_watch.core.rpc import RPCClient

logger = structlog.get_logger(__name__)

_TRUTHY = ("1", "true")


async def pnodes_endpoint(request: Request) -> JSONResponse:
    """GET /api/pnodes - aggregated node list.

    ``diagnostics=1`` bypasses the node cache and includes the per-endpoint
    attempt trail in the response.
    """
    diagnostics = request.query_params.get("diagnostics", "").lower() in _TRUTHY
    aggregator: NodeAggregator = request.app.state.aggregator

    result = await aggregator.get_nodes(diagnostics=diagnostics)

    if isinstance(result, NodesResult):
        body: dict = {
            "success": True,
            "data": [record.to_dict() for record in result.records],
            "source": result.source,
            "cached": result.cached,
        }
        if diagnostics:
            body["diagnostics"] = result.diagnostics
        return JSONResponse(body)

    return JSONResponse(
        {
            "success": False,
            "useMockData": True,
            "errors": result.errors,
            "diagnostics": result.diagnostics,
            "message": result.message,
        }
    )


async def pnode_endpoint(request: Request) -> JSONResponse:
    """GET /api/pnode - detail of one live node, optionally a preferred ``ip``."""
    ip = request.query_params.get("ip") or None
    rpc_client: RPCClient = request.app.state.rpc_client

    try:
        detail = await get_node_detail(rpc_client, ip)
    except PNodeError as e:
        logger.warning("Node detail failed", ip=ip, error=str(e))
        return JSONResponse(
            {"ok": False, "error": str(e) or "Failed to fetch pnode data"},
            status_code=500,
        )

    return JSONResponse({"ok": True, **detail.to_dict()})


async def health_endpoint(request: Request) -> JSONResponse:
    from pnode_watch import __version__

    return JSONResponse({"status": "ok", "version": __version__})


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Starlette:
    """
    Build the Starlette application.

    One node cache and one credits cache live for the lifetime of the app and
    are shared by all requests.

    Args:
        settings: Defaults to ``Settings.from_env()``.
        http_client: Shared client for RPC and credits calls; one is opened
            and closed with the app when omitted.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        client = http_client or httpx.AsyncClient(timeout=settings.rpc_timeout)
        rpc_client = RPCClient(settings, http_client=client)
        credits_fetcher = CreditsFetcher(
            settings,
            cache=ResultCache(settings.credits_cache_ttl),
            http_client=client,
        )
        app.state.settings = settings
        app.state.rpc_client = rpc_client
        app.state.aggregator = NodeAggregator(
            rpc_client,
            credits_fetcher=credits_fetcher,
            cache=ResultCache(settings.node_cache_ttl),
            settings=settings,
        )
        logger.info("pnode-watch API started", endpoints=len(settings.endpoints))
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    routes = [
        Route("/api/pnodes", pnodes_endpoint, methods=["GET"]),
        Route("/api/pnode", pnode_endpoint, methods=["GET"]),
        Route("/health", health_endpoint, methods=["GET"]),
    ]

    return Starlette(routes=routes, lifespan=lifespan)


def run(settings: Settings | None = None) -> None:
    """Run the API using uvicorn."""
    import uvicorn

    from pnode_watch.utils.logging import configure_logging

    configure_logging()
    settings = settings or Settings.from_env()
    logger.info("Starting pnode-watch API", host=settings.host, port=settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level="info")
