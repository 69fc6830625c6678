# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""Logging setup shared by the CLI and the HTTP server."""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """
    Render structlog events to stderr through the standard logging handlers.

    stdout stays clean for ``--json`` output of the CLI. Events go through
    stdlib loggers; the handler installed by ``basicConfig`` owns the stream.
    """
    logging.basicConfig(level=level, stream=sys.stderr, format="%(message)s")
    logging.getLogger().setLevel(level)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def silence_logging() -> None:
    """Only let errors through (CLI ``--quiet``)."""
    configure_logging(logging.ERROR)
