# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Synthetic node list used when no live endpoint answers.

Last-seen timestamps are computed relative to the generation time so that
status classification still shows a realistic online/warning/offline mix.
"""

from __future__ import annotations

import time

from pnode_watch.core.dedupe import dedupe_records
from pnode_watch.core.models import PeerRecord

DEMO_SOURCE = "Demo Data"

# (address, pubkey, is_public, seconds since last seen, committed, usage %, used, uptime, version)
_DEMO_NODES: list[tuple[str, str, bool, int, int, float, int, int, str]] = [
    ("109.199.96.218:9001", "2asTHq4vVGazKrmEa3YTXKuYiNZBdv1cQoLc1Tr2kvaw", True, 5, 104857600, 24.86, 26069000, 3271, "0.7.0"),
    ("45.33.102.147:9001", "7BwqNLV42Y8ZJkRtFNqXsYpJ1mQ9Gr2nXvTqLPpM4k3Y", True, 15, 209715200, 45.32, 95025152, 14523, "0.7.0"),
    ("172.105.234.89:9001", "9KpRTqX5ZnHmW3aVFgJx8yNbQc6EuD2MvLPk7sT4f9Gh", True, 25, 524288000, 67.89, 356047872, 28934, "0.7.0"),
    ("88.198.45.67:9001", "4XmPqR8vNsJtY2bKfL6xWcE9uA3HgZdM7nVpQo5rT1Jk", True, 120, 157286400, 12.45, 19582156, 7823, "0.6.5"),
    ("139.59.12.234:9001", "6FnKsT4vMpJxY8bQeL2xWcE9uA3HgZdM7nVpQo5rT1Jk", True, 10, 419430400, 89.23, 374265651, 45632, "0.7.0"),
    ("165.227.89.156:9001", "8HjLmN3xQoP5Y9bRfT2xWcE9uA3HgZdM7nVpQo5rT1Jk", False, 400, 262144000, 55.67, 145961164, 15234, "0.6.5"),
    ("192.168.1.100:9001", "3KpRTqX5ZnHmW3aVFgJx8yNbQc6EuD2MvLPk7sT4f9Aa", True, 30, 838860800, 34.56, 289910169, 67832, "0.7.0"),
    ("51.158.67.89:9001", "5MnPqR8vNsJtY2bKfL6xWcE9uA3HgZdM7nVpQo5rT1Bb", True, 45, 1073741824, 78.92, 847414067, 89234, "0.7.0"),
    ("185.216.34.123:9001", "7XnKsT4vMpJxY8bQeL2xWcE9uA3HgZdM7nVpQo5rCcDd", True, 20, 314572800, 23.45, 73767331, 34521, "0.7.0"),
    ("134.122.89.45:9001", "9YjLmN3xQoP5Y9bRfT2xWcE9uA3HgZdM7nVpQo5rEeFf", True, 90, 629145600, 91.23, 573888404, 112345, "0.7.0"),
    ("95.179.213.67:9001", "1ZkLmN3xQoP5Y9bRfT2xWcE9uA3HgZdM7nVpQo5rGgHh", False, 600, 157286400, 8.34, 13117587, 2345, "0.6.0"),
    ("178.128.156.234:9001", "2AmPqR8vNsJtY2bKfL6xWcE9uA3HgZdM7nVpQo5rIiJj", True, 8, 471859200, 62.78, 296253117, 56789, "0.7.0"),
]  # fmt: skip


def generate_demo_nodes(now: float | None = None) -> list[PeerRecord]:
    """Build the demo node set with timestamps relative to ``now``."""
    if now is None:
        now = time.time()

    records = [
        PeerRecord(
            address=address,
            pubkey=pubkey,
            is_public=is_public,
            last_seen_timestamp=now - ago,
            rpc_port=6000,
            storage_committed=committed,
            storage_usage_percent=usage_percent,
            storage_used=used,
            uptime=uptime,
            version=version,
        )
        for address, pubkey, is_public, ago, committed, usage_percent, used, uptime, version in _DEMO_NODES
    ]
    return dedupe_records(records)
