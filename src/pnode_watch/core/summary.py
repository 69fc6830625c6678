# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Network-level summaries computed from an aggregated node list."""

from __future__ import annotations

import time
from collections import Counter
from typing import Literal

from pydantic import BaseModel

from pnode_watch.core.models import PeerRecord

ONLINE_WINDOW = 60
ACTIVE_WINDOW = 300
STORAGE_TOP_N = 10

# (label, lower bound inclusive, upper bound exclusive) in seconds
UPTIME_RANGES: list[tuple[str, float, float]] = [
    ("<1h", 0, 3600),
    ("1-6h", 3600, 21600),
    ("6-24h", 21600, 86400),
    ("1-7d", 86400, 604800),
    (">7d", 604800, float("inf")),
]

NodeStatus = Literal["online", "warning", "offline"]


class NetworkStats(BaseModel):
    """Totals and averages across a node list."""

    total_nodes: int = 0
    active_nodes: int = 0
    total_storage: int = 0
    used_storage: int = 0
    avg_uptime: int = 0
    avg_storage_usage: float = 0.0


class UptimeBucket(BaseModel):
    """Number of nodes whose uptime falls in one range."""

    range: str
    count: int


class StorageShare(BaseModel):
    """Committed storage of one node, labelled for charts."""

    name: str
    value: int


class VersionShare(BaseModel):
    """Share of the network running one software version."""

    version: str
    count: int
    percentage: float


def node_status(last_seen: float, now: float | None = None) -> NodeStatus:
    """Classify a node by how long ago it was last seen."""
    if now is None:
        now = time.time()
    seconds_ago = now - last_seen
    if seconds_ago < ONLINE_WINDOW:
        return "online"
    if seconds_ago < ACTIVE_WINDOW:
        return "warning"
    return "offline"


def network_stats(nodes: list[PeerRecord], now: float | None = None) -> NetworkStats:
    if not nodes:
        return NetworkStats()
    if now is None:
        now = time.time()

    count = len(nodes)
    return NetworkStats(
        total_nodes=count,
        active_nodes=sum(1 for n in nodes if now - n.last_seen_timestamp < ACTIVE_WINDOW),
        total_storage=sum(n.storage_committed for n in nodes),
        used_storage=sum(n.storage_used for n in nodes),
        avg_uptime=round(sum(n.uptime for n in nodes) / count),
        avg_storage_usage=round(sum(n.storage_usage_percent for n in nodes) / count, 2),
    )


def version_distribution(nodes: list[PeerRecord]) -> list[VersionShare]:
    """Versions sorted by node count, most common first."""
    if not nodes:
        return []
    counts = Counter(n.version for n in nodes)
    return [
        VersionShare(version=version, count=count, percentage=round(count / len(nodes) * 100, 2))
        for version, count in counts.most_common()
    ]


def uptime_distribution(nodes: list[PeerRecord]) -> list[UptimeBucket]:
    return [
        UptimeBucket(range=label, count=sum(1 for n in nodes if low <= n.uptime < high))
        for label, low, high in UPTIME_RANGES
    ]


def _short_name(node: PeerRecord) -> str:
    if node.pubkey:
        return f"{node.pubkey[:3]}...{node.pubkey[-4:]}"
    return node.address


def storage_distribution(nodes: list[PeerRecord]) -> list[StorageShare]:
    """Largest committers first, at most ``STORAGE_TOP_N`` entries."""
    top = sorted(nodes, key=lambda n: n.storage_committed, reverse=True)[:STORAGE_TOP_N]
    return [StorageShare(name=_short_name(n), value=n.storage_committed) for n in top]


def format_bytes(num_bytes: int) -> str:
    """
    Human readable size using 1024 steps.

    Example:
        >>> format_bytes(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(num_bytes / 1024**i, 2)
    return f"{value:g} {units[i]}"


def format_uptime(seconds: int) -> str:
    """``42m``, ``5h 12m`` or ``3d 4h``."""
    seconds = max(int(seconds), 0)
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
    return f"{seconds // 86400}d {(seconds % 86400) // 3600}h"


def format_time_ago(timestamp: float, now: float | None = None) -> str:
    if now is None:
        now = time.time()
    seconds_ago = max(int(now - timestamp), 0)
    if seconds_ago < 60:
        return f"{seconds_ago}s ago"
    if seconds_ago < 3600:
        return f"{seconds_ago // 60}m ago"
    if seconds_ago < 86400:
        return f"{seconds_ago // 3600}h ago"
    return f"{seconds_ago // 86400}d ago"
