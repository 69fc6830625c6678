# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
pRPC client for pNode JSON-RPC endpoints.

Every node exposes a JSON-RPC 2.0 style surface at ``<base>/rpc``:

- ``get-version``          -> ``{"version": "..."}``
- ``get-stats``            -> ``{"stats": {...}, "file_size", "metadata": {...}}``
- ``get-pods``             -> ``{"pods": [...], "total_count": N}``
- ``get-pods-with-stats``  -> same shape as ``get-pods``

``RPCClient.call`` raises on any failure. ``RPCClient.attempt`` wraps it
and returns an ``RPCOutcome`` instead, which is what the aggregator and the
prober use so that no failure escapes them.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx
import structlog

from pnode_watch.config import Settings
from pnode_watch.core.errors import (
    NoWorkingEndpoint,
    ParseError,
    ProtocolError,
    RequestTimeout,
    TransportError,
    UpstreamError,
)

logger = structlog.get_logger(__name__)

JSONRPC_VERSION = "2.0"
REQUEST_ID = 1


@dataclass
class RPCOutcome:
    """Result of one RPC call, success or failure, with its latency."""

    ok: bool
    result: Any = None
    error: str | None = None
    error_type: str | None = None
    latency_ms: float = 0.0


def _first_not_none(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def flatten_stats(result: Any) -> dict[str, Any]:
    """
    Flatten a ``get-stats`` result so that the metrics sit at the top level.

    Both snake_case and camelCase spellings of the envelope keys are accepted.
    """
    data = result if isinstance(result, dict) else {}
    stats = dict(data.get("stats") or {})
    metadata = _first_not_none(data.get("metadata"), data.get("Metadata"))
    meta = metadata if isinstance(metadata, dict) else {}

    stats.update(
        file_size=_first_not_none(data.get("file_size"), data.get("fileSize"), 0),
        metadata=metadata,
        total_bytes=_first_not_none(
            meta.get("total_bytes"), data.get("total_bytes"), data.get("totalBytes"), 0
        ),
        last_updated=_first_not_none(meta.get("last_updated"), data.get("last_updated")),
    )
    return stats


class RPCClient:
    """
    Async pRPC client.

    Usage::

        async with RPCClient(settings) as client:
            pods = await client.get_pods("http://10.0.0.1:6000")

    An existing ``httpx.AsyncClient`` may be passed in; it is then neither
    opened nor closed by this class.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._http_client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> RPCClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._settings.rpc_timeout)
            self._owns_client = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def rpc_url(self, endpoint: str) -> str:
        """
        Resolve an endpoint to its ``/rpc`` URL.

        Bare hosts get ``http://`` and the configured RPC port.

        Example:
            >>> RPCClient().rpc_url("10.0.0.1")
            'http://10.0.0.1:6000/rpc'
        """
        base = endpoint.strip()
        if "://" not in base:
            if ":" not in base:
                base = f"{base}:{self._settings.rpc_port}"
            base = f"http://{base}"
        base = base.rstrip("/")
        if base.endswith("/rpc"):
            return base
        return f"{base}/rpc"

    async def call(
        self,
        endpoint: str,
        method: str,
        params: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Issue one JSON-RPC request and return its ``result`` payload.

        Raises:
            RequestTimeout: No answer within ``timeout`` seconds.
            TransportError: Connection failure or non-2xx status.
            ProtocolError: Response carried an ``error`` object.
            ParseError: Body was not a JSON object.
        """
        if self._http_client is None:
            raise RuntimeError(
                "RPCClient must be used as an async context manager: "
                "async with RPCClient() as client: ..."
            )

        url = self.rpc_url(endpoint)
        effective_timeout = timeout if timeout is not None else self._settings.rpc_timeout
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method, "id": REQUEST_ID}
        if params is not None:
            payload["params"] = params

        logger.debug("rpc.call", url=url, method=method, timeout=effective_timeout)

        try:
            response = await self._http_client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeout(f"Timeout after {effective_timeout}s calling {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(body, dict):
            raise ParseError(f"Expected JSON object from {url}, got {type(body).__name__}")

        rpc_error = body.get("error")
        if rpc_error:
            if isinstance(rpc_error, dict):
                message = rpc_error.get("message") or "pRPC error"
            else:
                message = str(rpc_error)
            raise ProtocolError(message)

        return body.get("result")

    async def attempt(
        self,
        endpoint: str,
        method: str,
        params: Any = None,
        timeout: float | None = None,
    ) -> RPCOutcome:
        """Like ``call`` but reports failures in the returned outcome."""
        start = time.perf_counter()
        try:
            result = await self.call(endpoint, method, params=params, timeout=timeout)
        except (UpstreamError, ParseError) as e:
            elapsed = (time.perf_counter() - start) * 1000
            return RPCOutcome(
                ok=False,
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=elapsed,
            )
        elapsed = (time.perf_counter() - start) * 1000
        return RPCOutcome(ok=True, result=result, latency_ms=elapsed)

    async def probe(self, address: str, timeout: float | None = None) -> bool:
        """True if ``get-version`` succeeds with a non-null result. Never raises."""
        effective_timeout = timeout if timeout is not None else self._settings.probe_timeout
        outcome = await self.attempt(address, "get-version", timeout=effective_timeout)
        if not outcome.ok:
            logger.debug("Probe failed", address=address, error=outcome.error)
        return outcome.ok and outcome.result is not None

    async def find_working_endpoint(self, preferred: str | None = None) -> str:
        """
        Pick an endpoint for single-node queries.

        ``preferred`` is probed first, then the configured detail endpoints
        in order.

        Raises:
            NoWorkingEndpoint: Nothing answered the probe.
        """
        if preferred and await self.probe(preferred):
            return preferred

        for address in self._settings.detail_endpoints:
            if await self.probe(address):
                logger.debug("Selected working endpoint", address=address)
                return address

        raise NoWorkingEndpoint("No working pNode found")

    async def get_version(self, endpoint: str) -> Any:
        return await self.call(endpoint, "get-version", timeout=self._settings.detail_timeout)

    async def get_stats(self, endpoint: str) -> dict[str, Any]:
        result = await self.call(endpoint, "get-stats", timeout=self._settings.detail_timeout)
        return flatten_stats(result)

    async def get_pods(self, endpoint: str) -> Any:
        return await self.call(endpoint, "get-pods", timeout=self._settings.detail_timeout)
