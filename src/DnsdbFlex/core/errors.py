"""Error taxonomy for DnsdbFlex.

Only ``ConfigError``, ``TransportError`` and ``ResourceExhaustion`` ever
reach the process boundary. ``ProtocolError`` is raised by the record
decoder and absorbed by the protocol layer, which logs it and moves on to
the next record.
"""

from __future__ import annotations

from enum import Enum


class FlexError(Exception):
    """Base class for DnsdbFlex errors."""


class ConfigError(FlexError):
    """Configuration is unusable before the engine starts (e.g. no API key)."""


class ProtocolError(FlexError):
    """A result-stream record is malformed or carries a wrong-typed field."""


class ResourceExhaustion(FlexError):
    """Memory could not be obtained; fatal for the invocation."""


class TransportErrorKind(str, Enum):
    """Transport failure classes reported to the user."""

    RESOLVE = "resolve"
    CONNECT = "connect"
    TRANSFER = "transfer"


class TransportError(FlexError):
    """A fetch failed at the transport level.

    Attributes:
        kind: Failure class.
        detail: Underlying library message, if any.
    """

    def __init__(self, kind: TransportErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is TransportErrorKind.RESOLVE:
            return "could not resolve host"
        if self.kind is TransportErrorKind.CONNECT:
            return "could not connect"
        if self.detail:
            return f"transfer error ({self.detail})"
        return "transfer error"
