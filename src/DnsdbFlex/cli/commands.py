"""Command implementations for DnsdbFlex CLI.

Encapsulates the search run itself, separated from CLI parameter handling
and from component construction.
"""

from __future__ import annotations

from dataclasses import dataclass

from DnsdbFlex.config import AppConfig
from DnsdbFlex.core.query import QueryDescriptor
from DnsdbFlex.core.timefmt import format_timestamp
from DnsdbFlex.protocol import ProtocolDecoder
from DnsdbFlex.services.search import FlexSearchService
from DnsdbFlex.transport import IpFamily, Multiplexer, TransportContext, Writer
from DnsdbFlex.utils.log import log


@dataclass(slots=True)
class SearchCommand:
    """Run one Flex query to completion.

    Opens the transport context and the writer, launches the query, drives
    the multiplexer until no transfer is left, and tears everything down.
    """

    config: AppConfig
    descriptor: QueryDescriptor
    search_service: FlexSearchService
    decoder: ProtocolDecoder
    transport: TransportContext | None = None

    def execute(self) -> int:
        """Execute the search.

        Returns:
            Process exit status: 0, or 1 if any transfer failed.
        """
        log.debug(
            "query method=%s target=%s value=%s rrtype=%s",
            self.descriptor.method.value,
            self.descriptor.target.value,
            self.descriptor.value,
            self.descriptor.rrtype,
        )
        for label, bound in (("after", self.descriptor.after), ("before", self.descriptor.before)):
            if bound:
                log.debug("%s %s (%d)", label, format_timestamp(bound), bound)
        transport = self.transport or TransportContext(
            verify=self.config.server.verify_tls,
            ip_family=IpFamily(self.config.server.ip_family),
            timeout=self.config.server.timeout,
        )
        with transport, Writer(self.descriptor.effective_output_limit) as writer:
            self.search_service.launch(self.descriptor, writer, transport, self.decoder)
            multiplexer = Multiplexer(transport)
            multiplexer.run(0)
            log.debug("forwarded %d records", writer.count)
        return multiplexer.exit_code
