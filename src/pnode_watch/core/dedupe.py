# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Collapse duplicate reports of the same logical peer.

Several upstream sources may report one peer with slightly different
metrics. Records are keyed by ``PeerRecord.identity_key`` and resolved with
a fixed heuristic:

1. committed, used and uptime all equal: keep the existing record
2. larger ``storage_committed``: replace
3. more recent ``last_seen_timestamp``: replace
4. otherwise keep the existing record

Output follows first-seen key order.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from pnode_watch.core.models import PeerRecord

logger = structlog.get_logger(__name__)


def _same_metrics(a: PeerRecord, b: PeerRecord) -> bool:
    return (
        a.storage_committed == b.storage_committed
        and a.storage_used == b.storage_used
        and a.uptime == b.uptime
    )


def prefer(existing: PeerRecord, candidate: PeerRecord) -> PeerRecord:
    """Return the record that should represent the peer."""
    if _same_metrics(existing, candidate):
        return existing
    if candidate.storage_committed > existing.storage_committed:
        return candidate
    if candidate.last_seen_timestamp > existing.last_seen_timestamp:
        return candidate
    return existing


def dedupe_records(records: Iterable[PeerRecord]) -> list[PeerRecord]:
    """
    Return one record per identity key.

    Records without any identity (no pubkey and no address) are dropped.

    Example:
        >>> a = PeerRecord(pubkey="k", storage_committed=100)
        >>> b = PeerRecord(pubkey="k", storage_committed=200)
        >>> [r.storage_committed for r in dedupe_records([a, b])]
        [200]
    """
    by_key: dict[str, PeerRecord] = {}
    seen = 0
    for record in records:
        seen += 1
        key = record.identity_key
        if not key:
            continue
        existing = by_key.get(key)
        by_key[key] = record if existing is None else prefer(existing, record)

    if len(by_key) != seen:
        logger.debug("Deduped pNode list", before=seen, after=len(by_key))
    return list(by_key.values())
