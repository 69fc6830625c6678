# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Runtime configuration.

Endpoint lists, timeouts and cache TTLs. Every option can be overridden
through a ``PNODE_WATCH_*`` environment variable.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

# Candidate endpoints for aggregation, in priority order.
DEFAULT_ENDPOINTS = [
    "http://173.212.203.145:6000",
    "http://173.212.220.65:6000",
    "http://161.97.97.41:6000",
    "http://192.190.136.36:6000",
    "http://192.190.136.37:6000",
    "http://192.190.136.38:6000",
    "http://192.190.136.28:6000",
    "http://192.190.136.29:6000",
    "http://207.244.255.1:6000",
    "http://109.199.96.218:6000",
]

# Addresses probed by the single-node detail path.
DEFAULT_DETAIL_ENDPOINTS = [
    "173.212.203.145",
    "173.212.220.65",
    "161.97.97.41",
    "192.190.136.36",
    "192.190.136.37",
    "192.190.136.38",
    "192.190.136.28",
    "192.190.136.29",
    "207.244.255.1",
]

DEFAULT_CREDITS_URL = "https://podcredits.xandeum.network/api/pods-credits"


def _split_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Configuration for the aggregation pipeline and HTTP API."""

    # Endpoints
    endpoints: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENDPOINTS),
        description="Ordered candidate endpoints; the first that returns pods wins.",
    )
    detail_endpoints: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DETAIL_ENDPOINTS),
        description="Addresses probed, in order, for single-node detail queries.",
    )
    rpc_port: int = Field(
        default=6000,
        ge=1,
        le=65535,
        description="Port used when an endpoint is given as a bare host.",
    )

    # Timeouts (seconds)
    rpc_timeout: float = Field(default=5.0, gt=0, description="Aggregation call timeout.")
    detail_timeout: float = Field(default=3.0, gt=0, description="Detail sub-query timeout.")
    probe_timeout: float = Field(default=2.0, gt=0, description="Liveness probe timeout.")

    # Credits feed
    credits_url: str = Field(
        default=DEFAULT_CREDITS_URL,
        description="External feed mapping pod pubkeys to credit balances.",
    )
    credits_timeout: float = Field(default=5.0, gt=0, description="Credits fetch timeout.")

    # Cache freshness windows (seconds)
    node_cache_ttl: float = Field(default=60.0, ge=0, description="Node list cache TTL.")
    credits_cache_ttl: float = Field(default=300.0, ge=0, description="Credits map cache TTL.")

    # HTTP server
    host: str = Field(default="127.0.0.1", description="Host to bind the HTTP API to.")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for the HTTP API.")

    @field_validator("endpoints", "detail_endpoints")
    @classmethod
    def _strip_blank(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item and item.strip()]

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables, keeping defaults for unset ones."""
        overrides: dict[str, object] = {}

        endpoints = _split_list(os.getenv("PNODE_WATCH_ENDPOINTS"))
        if endpoints:
            overrides["endpoints"] = endpoints
        detail_endpoints = _split_list(os.getenv("PNODE_WATCH_DETAIL_ENDPOINTS"))
        if detail_endpoints:
            overrides["detail_endpoints"] = detail_endpoints

        for name, cast in (
            ("rpc_port", int),
            ("rpc_timeout", float),
            ("detail_timeout", float),
            ("probe_timeout", float),
            ("credits_url", str),
            ("credits_timeout", float),
            ("node_cache_ttl", float),
            ("credits_cache_ttl", float),
            ("host", str),
            ("port", int),
        ):
            raw = os.getenv(f"PNODE_WATCH_{name.upper()}")
            if raw is not None and raw != "":
                overrides[name] = cast(raw)

        return cls(**overrides)
