# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Data models for pnode-watch.

``PeerRecord`` is the boundary type for the peer entries reported by
``get-pods`` / ``get-pods-with-stats``. Everything else in this module is
an in-process result or diagnostic shape that never leaves a single request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pnode_watch.core.errors import ParseError

logger = structlog.get_logger(__name__)

# pubkey -> credit balance
CreditsMap = dict[str, int]


class PeerRecord(BaseModel):
    """
    One reporting node's self-described state.

    Unknown fields reported by a peer are kept and serialized back out
    unchanged, so newer node versions do not lose data on the way through.

    Example:
        >>> record = PeerRecord(address="10.0.0.1:9001", pubkey="abc", storage_committed=100)
        >>> record.identity_key
        'abc'
    """

    model_config = ConfigDict(extra="allow")

    address: str = Field(default="", description="Gossip address as host:port")
    pubkey: str | None = Field(default=None, description="Public-key identity of the peer")
    is_public: bool = Field(default=False, description="Peer is publicly reachable")
    last_seen_timestamp: float = Field(default=0.0, description="Peer-reported last seen, epoch seconds")
    rpc_port: int = Field(default=0, description="RPC port of the peer")
    storage_committed: int = Field(default=0, ge=0, description="Committed storage in bytes")
    storage_used: int = Field(default=0, ge=0, description="Used storage in bytes")
    storage_usage_percent: float = Field(default=0.0, description="Reported usage percent")
    uptime: int = Field(default=0, ge=0, description="Uptime in seconds")
    version: str = Field(default="", description="Node software version")
    credits: int | None = Field(default=None, ge=0, description="Credits, set after merge")

    @field_validator(
        "last_seen_timestamp",
        "rpc_port",
        "storage_committed",
        "storage_used",
        "storage_usage_percent",
        "uptime",
        mode="before",
    )
    @classmethod
    def _null_as_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("address", "version", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def identity_key(self) -> str:
        """Public key when present and non-empty, else the network address."""
        if self.pubkey:
            return self.pubkey
        return self.address

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output; ``credits`` is omitted until merged."""
        data = self.model_dump()
        if self.credits is None:
            data.pop("credits", None)
        return data


def parse_pods(result: Any) -> list[PeerRecord]:
    """
    Convert a ``get-pods`` style result payload into PeerRecords.

    The container must be ``{"pods": [...]}``; anything else raises
    ParseError. Individual entries that fail validation are skipped.
    """
    if not isinstance(result, dict):
        raise ParseError(f"Expected result object, got {type(result).__name__}")

    pods = result.get("pods")
    if pods is None:
        return []
    if not isinstance(pods, list):
        raise ParseError(f"Expected 'pods' list, got {type(pods).__name__}")

    records: list[PeerRecord] = []
    for entry in pods:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object pod entry", entry_type=type(entry).__name__)
            continue
        try:
            records.append(PeerRecord.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                "Skipping invalid pod entry",
                address=entry.get("address"),
                error=str(e),
            )
    return records


@dataclass
class EndpointAttempt:
    """Diagnostic record for one (endpoint, method) call."""

    endpoint: str
    method: str
    ok: bool
    latency_ms: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "endpoint": self.endpoint,
            "method": self.method,
            "ok": self.ok,
            "latency": round(self.latency_ms, 2),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class CreditsFetchInfo:
    """Diagnostic summary of the credits lookup made for one request."""

    fetched: bool
    count: int = 0
    cached: bool = False
    sample: list[tuple[str, int]] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "fetched": self.fetched,
            "cached": self.cached,
            "count": self.count,
            "sample": [list(item) for item in self.sample],
        }
        if self.error is not None:
            data["error"] = self.error
        return {"creditsFetchInfo": data}


@dataclass
class NodesResult:
    """Successful aggregation (live or from cache)."""

    records: list[PeerRecord]
    source: str
    cached: bool = False
    diagnostics: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class FallbackResult:
    """Every endpoint failed; the consumer should switch to demo data."""

    errors: list[str]
    diagnostics: list[dict[str, Any]] = field(default_factory=list)
    message: str = "All pRPC endpoints unavailable, using mock data"


@dataclass
class NodeListing:
    """Consumer-level node list: live data or the synthetic demo set."""

    nodes: list[PeerRecord]
    is_live: bool
    source: str


@dataclass
class NodeDetail:
    """Version, stats and pods of a single live node."""

    ip: str
    version: Any
    stats: dict[str, Any]
    pods: Any

    def to_dict(self) -> dict[str, Any]:
        return {"ip": self.ip, "version": self.version, "stats": self.stats, "pods": self.pods}


def _is_meaningful(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (int, float)):
        return value != 0
    return True


def filter_diagnostics(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop diagnostic entries whose every value is empty, zero, false or null."""
    return [e for e in entries if e and any(_is_meaningful(v) for v in e.values())]
