"""dnsdbflex: a client for the DNSDB Flex passive-DNS search API."""

from __future__ import annotations

__version__ = "1.0.5"

SWCLIENT = "dnsdbflex"
