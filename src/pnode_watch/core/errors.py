# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
Error taxonomy for pNode RPC and feed access.

RPC failures are raised by ``RPCClient.call`` and converted into diagnostics
by the aggregator; they never cross the aggregator boundary.
"""

from __future__ import annotations


class PNodeError(Exception):
    """Base class for all pnode-watch errors."""


class UpstreamError(PNodeError):
    """A request to a remote endpoint or feed failed."""


class RequestTimeout(UpstreamError):
    """The remote side did not answer within the caller-supplied timeout."""


class TransportError(UpstreamError):
    """Connection, DNS or HTTP-level failure.

    ``status_code`` is set when the endpoint answered with a non-2xx status.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(UpstreamError):
    """Well-formed response carrying an explicit ``error`` object."""


class ParseError(PNodeError):
    """External payload does not match the expected shape."""


class EmptyResult(PNodeError):
    """Call succeeded but returned no usable data."""


class NoWorkingEndpoint(PNodeError):
    """No candidate endpoint answered a liveness probe."""
