"""Search service: turn a query descriptor into a running fetch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from DnsdbFlex.core.query import QueryDescriptor, TimeFence, build_fence
from DnsdbFlex.sources.dnsdb.query import make_path
from DnsdbFlex.transport.fetch import create_fetch
from DnsdbFlex.transport.lifecycle import Query
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.protocol.decoder import ProtocolDecoder
    from DnsdbFlex.transport.context import TransportContext
    from DnsdbFlex.transport.fetch import Fetch
    from DnsdbFlex.transport.lifecycle import Writer


class PdnsSystem(Protocol):
    """Protocol for a passive-DNS system the client can query."""

    name: str
    base_url: str

    def setval(self, key: str, value: str) -> None:
        """Install one configuration element."""
        raise NotImplementedError

    def ready(self) -> None:
        """Finish configuration; raise ConfigError if unusable."""
        raise NotImplementedError

    def url(self, path: str, descriptor: QueryDescriptor, fence: TimeFence) -> str:
        """Build the absolute request URL."""
        raise NotImplementedError

    def auth(self, fetch: Fetch) -> None:
        """Attach authentication to a fetch."""
        raise NotImplementedError

    def status(self, fetch: Fetch) -> str:
        """Map a non-2xx response to a status indicator."""
        raise NotImplementedError

    def destroy(self) -> None:
        """Release resources held by the system."""
        raise NotImplementedError


@dataclass(slots=True)
class FlexSearchService:
    """Application service launching Flex queries against one pDNS system."""

    system: PdnsSystem

    def launch(
        self,
        descriptor: QueryDescriptor,
        writer: Writer,
        transport: TransportContext,
        decoder: ProtocolDecoder,
    ) -> Query:
        """Create the query for ``descriptor`` and register its fetch.

        The transfer does not start until the multiplexer runs.

        Args:
            descriptor: Validated search parameters.
            writer: Output scope that will own the query.
            transport: Open transport context.
            decoder: Per-record callback target.

        Returns:
            The launched query.
        """
        fence = build_fence(
            after=descriptor.after,
            before=descriptor.before,
            complete=descriptor.complete,
        )
        path = make_path(descriptor)
        url = self.system.url(path, descriptor, fence)
        log.debug("url [%s]", url)

        query = Query(descriptor, path, writer)
        create_fetch(transport, query, url, on_record=decoder.feed, system=self.system)
        return query

    def close(self) -> None:
        """Release the system."""
        self.system.destroy()
