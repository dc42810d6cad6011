"""Client-side output cap enforcement."""

from __future__ import annotations

from typing import TYPE_CHECKING

from DnsdbFlex.core.models import ProtocolState
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.transport.lifecycle import Query


class OutputGovernor:
    """Count produced records against the writer's cap and stop the stream.

    The cap lives on the query's ``Writer``; a cap of zero or less means
    unlimited. Reaching the cap is a successful early stop, never an error:
    the query moves to ``SELF_LIMITED`` and its fetch is marked as stopped
    by the client so the multiplexer does not report a transport failure.
    """

    def admit(self, query: Query) -> bool:
        """Return whether one more record may be forwarded for ``query``."""
        writer = query.writer
        if writer is None or writer.output_limit <= 0:
            return True
        return writer.count < writer.output_limit

    def produced(self, query: Query) -> None:
        """Account for one record forwarded to the presenter."""
        if query.writer is not None:
            query.writer.count += 1

    def stop(self, query: Query) -> None:
        """Put ``query`` into ``SELF_LIMITED`` and abort its fetch."""
        limit = query.writer.output_limit if query.writer is not None else 0
        log.debug("hit output limit %d", limit)
        query.state = ProtocolState.SELF_LIMITED
        if query.fetch is not None:
            query.fetch.abort()
