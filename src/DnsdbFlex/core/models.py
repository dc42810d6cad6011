from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class ProtocolState(str, Enum):
    """Completion state of one query's result stream.

    ``SELF_LIMITED`` is reached when the client stops the stream at its
    output cap. ``MISSING`` covers an unrecognized ``cond`` value and a
    stream that ended without any terminal condition.
    """

    INIT = "init"
    BEGIN = "begin"
    ONGOING = "ongoing"
    SUCCEEDED = "succeeded"
    LIMITED = "limited"
    FAILED = "failed"
    SELF_LIMITED = "self-limited"
    MISSING = "missing"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        ProtocolState.SUCCEEDED,
        ProtocolState.LIMITED,
        ProtocolState.FAILED,
        ProtocolState.SELF_LIMITED,
    }
)


@dataclass(frozen=True, slots=True)
class RecordData:
    """Typed view of one observation payload (the ``obj`` member).

    Attributes:
        rrname: Owner name, for rrnames searches.
        rdata: Presentation-form rdata, for rdata searches.
        raw_rdata: Hex-encoded wire rdata, for rdata searches.
        rrtype: Resource record type mnemonic.
        count: Number of times the observation was seen.
        time_first: First-seen epoch seconds.
        time_last: Last-seen epoch seconds.
    """

    rrname: Optional[str] = None
    rdata: Optional[str] = None
    raw_rdata: Optional[str] = None
    rrtype: Optional[str] = None
    count: Optional[int] = None
    time_first: Optional[int] = None
    time_last: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Record:
    """One decoded result-stream line.

    Attributes:
        cond: Stream condition, if the line carried one.
        msg: Server message, if the line carried one.
        obj: Raw decoded ``obj`` mapping, kept for verbatim re-emission.
        data: Typed payload, present exactly when ``obj`` is.
    """

    cond: Optional[str] = None
    msg: Optional[str] = None
    obj: Optional[Mapping[str, Any]] = None
    data: Optional[RecordData] = None

    @property
    def is_keepalive(self) -> bool:
        return self.cond is None and self.obj is None
