"""Record reassembly for newline-delimited result streams.

Network reads arrive in arbitrary chunks. ``Deblocker`` accumulates them
and hands back complete newline-terminated records in arrival order,
keeping at most one incomplete trailing record between reads.
"""

from __future__ import annotations

from typing import Iterator

from DnsdbFlex.core.errors import ResourceExhaustion

_NEWLINE = b"\n"


class Deblocker:
    """Growable byte arena with push/consume operations for one fetch."""

    def __init__(self) -> None:
        self._buf = bytearray()
        # Bytes already scanned without finding a newline.
        self._scanned = 0

    def __len__(self) -> int:
        return len(self._buf)

    def push(self, chunk: bytes) -> None:
        """Append newly received bytes.

        Raises:
            ResourceExhaustion: If the buffer cannot grow.
        """
        try:
            self._buf += chunk
        except MemoryError as e:
            raise ResourceExhaustion(f"cannot buffer {len(chunk)} more octets") from e

    def pop(self) -> bytes | None:
        """Consume and return the next complete record, without its newline.

        Returns:
            Record bytes, or None when only a partial record remains.
        """
        nl = self._buf.find(_NEWLINE, self._scanned)
        if nl < 0:
            self._scanned = len(self._buf)
            return None
        record = bytes(self._buf[:nl])
        del self._buf[: nl + 1]
        self._scanned = 0
        return record

    def records(self) -> Iterator[bytes]:
        """Yield every complete record currently buffered."""
        while True:
            record = self.pop()
            if record is None:
                return
            yield record

    def first_line(self) -> str:
        """Return the buffered text up to the first line break, decoded leniently."""
        head = bytes(self._buf)
        for sep in (b"\r", b"\n"):
            idx = head.find(sep)
            if idx >= 0:
                head = head[:idx]
        return head.decode("utf-8", errors="replace")

    def clear(self) -> int:
        """Discard everything buffered.

        Returns:
            Number of octets discarded.
        """
        dropped = len(self._buf)
        self._buf.clear()
        self._scanned = 0
        return dropped
