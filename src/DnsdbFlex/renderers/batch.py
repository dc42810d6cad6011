"""Batch-file presenters.

Render records as lookup lines that a batch-capable DNSDB client can read
back: ``rrset/name/...`` for rrnames results and ``rdata/name/...`` or
``rdata/raw/...`` for rdata results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, TextIO

from DnsdbFlex.core.errors import ProtocolError
from DnsdbFlex.core.models import Record, RecordData
from DnsdbFlex.renderers.base import Presenter

if TYPE_CHECKING:
    from DnsdbFlex.transport.lifecycle import Writer

# rrtypes whose rdata is a bare domain name, so it can be looked up by name.
PRINTABLE_RRTYPES: Final[frozenset[str]] = frozenset(
    {
        "CNAME", "TYPE5",
        "NS", "TYPE2",
        "PTR", "TYPE12",
        "MB", "TYPE7",
        "MD", "TYPE3",
        "MF", "TYPE4",
        "MG", "TYPE8",
        "MR", "TYPE9",
    }
)


def rrtype_ok_to_print_literal(rrtype: str | None) -> bool:
    """Return whether rdata of ``rrtype`` can be printed as a name."""
    if rrtype is None:
        return False
    return rrtype.upper() in PRINTABLE_RRTYPES


def _payload(record: Record) -> RecordData:
    data = record.data
    if data is None or (data.rrname is None and data.rdata is None):
        raise ProtocolError("record has neither rrname nor rdata")
    return data


class BatchPresenter(Presenter):
    """Batch output; the same name may repeat with different rrtypes."""

    def present(self, record: Record, raw: bytes, writer: Writer | None) -> None:
        del raw, writer
        data = _payload(record)
        if data.rrname is not None:
            self.emit(f"rrset/name/{data.rrname}/{data.rrtype}")
        elif rrtype_ok_to_print_literal(data.rrtype):
            self.emit(f"rdata/name/{data.rdata}/{data.rrtype}")
        else:
            self.emit(f"rdata/raw/{data.raw_rdata}/{data.rrtype}")
            self.emit(f"# rdata/name/{data.rdata}/{data.rrtype}")


class BatchDedupPresenter(Presenter):
    """Batch output that prints each name once, with rrtypes as comments."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream)
        self._last_printed: str | None = None

    def present(self, record: Record, raw: bytes, writer: Writer | None) -> None:
        del raw, writer
        data = _payload(record)
        if data.rrname is not None:
            self._emit_once(f"rrset/name/{data.rrname}")
            self.emit(f"# rrset/name/{data.rrname}/{data.rrtype}")
            return

        if rrtype_ok_to_print_literal(data.rrtype):
            self._emit_once(f"rdata/name/{data.rdata}")
        else:
            self._emit_once(f"rdata/raw/{data.raw_rdata}")
        self.emit(f"# rdata/name/{data.rdata}/{data.rrtype}")

    def _emit_once(self, line: str) -> None:
        if line != self._last_printed:
            self.emit(line)
            self._last_printed = line
