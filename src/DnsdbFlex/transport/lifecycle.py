"""Query and Writer ownership graph and its teardown.

A ``Writer`` owns one ``Query``; a ``Query`` owns at most one ``Fetch``.
Teardown runs once, in order: release the fetch (if still attached), drop
the query's status and path, drop the query, then the writer. Every
reference is cleared as soon as it is released, so a second teardown is a
no-op.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from DnsdbFlex.core.models import ProtocolState
from DnsdbFlex.core.query import QueryDescriptor
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.transport.fetch import Fetch

STATUS_NOERROR = "NOERROR"
STATUS_ERROR = "ERROR"
NO_RESULTS_MESSAGE = "no results found for query."


class Query:
    """One logical request and its outcome.

    Attributes:
        descriptor: Search parameters, read-only.
        path: Request path built from the descriptor.
        writer: Owning writer.
        fetch: Active fetch, if any.
        status: Terminal status indicator, set together with ``message``.
        message: Human-readable status description.
        state: Protocol state driven by the decoder and the governor.
        saf_msg: Last ``msg`` the server sent.
    """

    def __init__(self, descriptor: QueryDescriptor, path: str, writer: Writer) -> None:
        self.descriptor = descriptor
        self.path: Optional[str] = path
        self.writer: Optional[Writer] = writer
        self.fetch: Optional[Fetch] = None
        self.status: Optional[str] = None
        self.message: Optional[str] = None
        self.state = ProtocolState.INIT
        self.saf_msg: Optional[str] = None
        writer.attach(self)

    def set_status(self, status: str, message: str) -> None:
        """Install the status pair; it can be set only once.

        Raises:
            RuntimeError: If a status was already recorded.
        """
        if self.status is not None or self.message is not None:
            raise RuntimeError("query status already set")
        self.status = status
        self.message = message

    def finish(self, *, clean_end: bool) -> None:
        """Log the query outcome once its fetch has completed.

        Args:
            clean_end: The transfer reached end of stream without error. A
                stream that began but never sent a terminal condition is
                then reported as a missing response; the state is left as
                the decoder set it.
        """
        log.debug("query_done(%s) state=%s", self.path, self.state.value)
        unterminated = clean_end and self.state in (ProtocolState.BEGIN, ProtocolState.ONGOING)

        msg = self.saf_msg or ""
        if self.state is ProtocolState.LIMITED:
            log.warning("Query limited: %s", msg)
        elif self.state is ProtocolState.FAILED:
            log.warning("Query failed: %s", msg)
        elif self.state is ProtocolState.MISSING or unterminated:
            log.warning("Query response_missing: %s", msg)
        elif self.status is not None:
            log.info("Query status: %s (%s)", self.status, self.message)
        elif self.state is ProtocolState.SELF_LIMITED:
            log.debug("Query stopped at output limit")

    def close(self) -> None:
        """Release the attached fetch and drop owned strings."""
        fetch = self.fetch
        if fetch is not None:
            fetch.unlink()
            fetch.release()
        self.status = None
        self.message = None
        self.path = None
        self.writer = None


class Writer:
    """Output-cap scope for one query.

    Attributes:
        output_limit: Maximum records forwarded; zero or less means unlimited.
        count: Records forwarded so far.
        query: The writer's query, once launched.
    """

    def __init__(self, output_limit: int = -1) -> None:
        self.output_limit = output_limit
        self.count = 0
        self.query: Optional[Query] = None
        self.closed = False

    def attach(self, query: Query) -> None:
        if self.closed:
            raise RuntimeError("writer is closed")
        if self.query is not None:
            raise RuntimeError("writer already owns a query")
        self.query = query

    def close(self) -> None:
        """Tear down the query and its fetch; safe to call twice."""
        if self.closed:
            return
        query = self.query
        if query is not None:
            self.query = None
            query.close()
        self.closed = True

    def __enter__(self) -> Writer:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and tear down the query."""
        self.close()
