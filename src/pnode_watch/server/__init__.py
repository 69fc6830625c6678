# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""HTTP API for the pNode dashboard."""

from pnode_watch.server.app import create_app, run

__all__ = ["create_app", "run"]
