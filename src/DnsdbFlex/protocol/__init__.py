"""Result-stream protocol: record reassembly, decoding and output capping."""

from __future__ import annotations

from DnsdbFlex.protocol.deblock import Deblocker
from DnsdbFlex.protocol.decoder import ProtocolDecoder, Step, decode_record, transition
from DnsdbFlex.protocol.governor import OutputGovernor

__all__ = [
    "Deblocker",
    "OutputGovernor",
    "ProtocolDecoder",
    "Step",
    "decode_record",
    "transition",
]
