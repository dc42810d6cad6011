"""Streaming HTTP transport: fetches, their multiplexer and lifecycle."""

from __future__ import annotations

from DnsdbFlex.transport.context import IpFamily, TransportContext
from DnsdbFlex.transport.fetch import Fetch, TransferResult, create_fetch
from DnsdbFlex.transport.lifecycle import Query, Writer
from DnsdbFlex.transport.multiplexer import Multiplexer, classify

__all__ = [
    "Fetch",
    "IpFamily",
    "Multiplexer",
    "Query",
    "TransferResult",
    "TransportContext",
    "Writer",
    "classify",
    "create_fetch",
]
