"""Base class for record presenters.

A presenter receives every data record the protocol layer forwards, in
delivery order, and writes it to its output stream.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

from DnsdbFlex.core.models import Record

if TYPE_CHECKING:
    from DnsdbFlex.transport.lifecycle import Writer


class Presenter(ABC):
    """Abstract base class for record presenters."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @abstractmethod
    def present(self, record: Record, raw: bytes, writer: Writer | None) -> None:
        """Render one forwarded record.

        Args:
            record: Decoded record carrying a payload.
            raw: The record's bytes as received, without the newline.
            writer: Output scope the record was counted against.

        Raises:
            ProtocolError: If the payload lacks what this presenter needs.
        """

    def emit(self, line: str) -> None:
        self.stream.write(line)
        self.stream.write("\n")
