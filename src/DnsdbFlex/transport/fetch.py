"""One HTTP transfer of a newline-delimited result stream.

A ``Fetch`` runs as a task on its transport context's event loop. The task
sends the request and hands each received chunk to ``write``, which deblocks
it and feeds complete records to the registered record callback. A callback
answer of False aborts the transfer as a client-side stop, which is never
reported as a transport failure.
"""

from __future__ import annotations

import asyncio
import socket
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import httpx

from DnsdbFlex import SWCLIENT, __version__
from DnsdbFlex.protocol.deblock import Deblocker
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.transport.context import TransportContext
    from DnsdbFlex.transport.lifecycle import Query

CHUNK_SIZE = 16 * 1024
JSONL_ACCEPT = "application/x-ndjson"

RecordCallback = Callable[["Query", bytes], bool]


class TransferResult(str, Enum):
    OK = "ok"
    COULDNT_RESOLVE_HOST = "could not resolve host"
    COULDNT_CONNECT = "could not connect"
    OPERATION_TIMEDOUT = "operation timed out"
    WRITE_ERROR = "write callback aborted transfer"
    RECV_ERROR = "failure receiving network data"
    FAILED = "transfer failed"


class RequestDecorator(Protocol):
    """Hooks a pDNS system contributes to every fetch."""

    def auth(self, fetch: Fetch) -> None:
        """Attach authentication material to ``fetch``."""
        raise NotImplementedError

    def status(self, fetch: Fetch) -> str:
        """Map a non-2xx response to a status indicator."""
        raise NotImplementedError


class Fetch:
    """State of one in-flight or completed transfer.

    Attributes:
        query: Owning query; None once unlinked.
        url: Request URL.
        headers: Request headers sent with the GET.
        buffer: Receive buffer holding at most one partial record.
        rcode: Last observed HTTP status code, 0 until known.
        stopped: Set when the client ended the stream on purpose.
        result: Transfer outcome, None while the transfer is running.
        detail: Library message accompanying a failed result.
        received: Bytes taken from the network so far.
    """

    def __init__(
        self,
        query: Query,
        url: str,
        *,
        on_record: RecordCallback,
        system: RequestDecorator | None = None,
    ) -> None:
        self.query: Query | None = query
        self.url = url
        self.headers: dict[str, str] = {
            "Accept": JSONL_ACCEPT,
            "User-Agent": f"{SWCLIENT}/{__version__}",
        }
        self.buffer = Deblocker()
        self.rcode = 0
        self.stopped = False
        self.result: TransferResult | None = None
        self.detail = ""
        self.received = 0
        self.response: httpx.Response | None = None
        self.released = False
        self.task: asyncio.Task | None = None
        self._on_record = on_record
        self._system = system
        self._context: TransportContext | None = None

    @property
    def done(self) -> bool:
        return self.result is not None

    @property
    def started(self) -> bool:
        return self.task is not None

    def attach(self, context: TransportContext) -> None:
        """Register this fetch in the context's handle set."""
        context.add(self)
        self._context = context

    def start(self) -> asyncio.Task:
        """Schedule the transfer on the context's loop; it runs while the loop waits.

        Raises:
            RuntimeError: If the fetch is not attached or was already started.
        """
        if self._context is None:
            raise RuntimeError("fetch is not attached to a transport context")
        if self.task is not None:
            raise RuntimeError("fetch already started")
        self.task = self._context.loop.create_task(self._run(self._context))
        return self.task

    def abort(self) -> None:
        """Mark the transfer as stopped by the client; the next write aborts it."""
        self.stopped = True

    def write(self, chunk: bytes) -> int:
        """Receive one chunk of response body.

        Args:
            chunk: Bytes as delivered by the network.

        Returns:
            Number of bytes taken; anything short of ``len(chunk)`` aborts
            the transfer.
        """
        query = self.query
        if query is None:
            return 0
        log.debug("write(%d)", len(chunk))
        self.received += len(chunk)
        self.buffer.push(chunk)

        if self.response is not None:
            if self.rcode == 0:
                self.rcode = self.response.status_code
            if not 200 <= self.rcode < 300:
                self._report_status(query)
                self.buffer.clear()
                return len(chunk)

        for raw in self.buffer.records():
            if not self._on_record(query, raw):
                self.buffer.clear()
                return 0
            if query.state.is_terminal:
                self.stopped = True
        return len(chunk)

    def unlink(self) -> None:
        """Detach this fetch from its query; no-op when already detached."""
        query = self.query
        if query is None:
            return
        if query.fetch is not self:
            raise RuntimeError("fetch and query back-references disagree")
        query.fetch = None
        self.query = None

    def release(self) -> None:
        """Cancel the transfer and free buffered data and headers; safe to call twice.

        A cancelled task closes its response the next time the loop runs.
        """
        if self.released:
            return
        self.released = True
        if self.task is not None and not self.task.done():
            self.task.cancel()
        stranded = self.buffer.clear()
        if stranded:
            log.warning("stranding %d octets!", stranded)
        self.headers.clear()
        if self._context is not None:
            self._context.discard(self)
            self._context = None

    async def _run(self, context: TransportContext) -> None:
        log.debug("fetch(%s)", self.url)
        try:
            if context.timeout > 0:
                await asyncio.wait_for(self._transfer(context.client), context.timeout)
            else:
                await self._transfer(context.client)
        except asyncio.TimeoutError:
            self._complete(
                TransferResult.OPERATION_TIMEDOUT,
                f"Operation timed out after {context.timeout:g} seconds",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._complete(classify_exception(e), str(e) or type(e).__name__)

    async def _transfer(self, client: httpx.AsyncClient) -> None:
        request = client.build_request("GET", self.url, headers=self.headers)
        response = await client.send(request, stream=True, follow_redirects=False)
        self.response = response
        self.rcode = response.status_code
        log.debug("response rcode=%d", self.rcode)
        try:
            async for chunk in response.aiter_bytes(CHUNK_SIZE):
                if not chunk:
                    continue
                if self.write(chunk) != len(chunk):
                    self._complete(TransferResult.WRITE_ERROR)
                    return
        finally:
            await response.aclose()
        self._complete(TransferResult.OK)

    def _complete(self, result: TransferResult, detail: str = "") -> None:
        self.result = result
        self.detail = detail or result.value

    def _report_status(self, query: Query) -> None:
        message = self.buffer.first_line()
        if message.strip().lower() == "<html>":
            message = f"HTTP Status {self.rcode}"

        # Only the first non-2xx response of a query is reported.
        if query.status is None:
            status = self._system.status(self) if self._system is not None else "ERROR"
            query.set_status(status, message)
            log.warning("HTTP %d [%s]", self.rcode, self.url)
        log.warning("server: [%s]", message)


def create_fetch(
    context: TransportContext,
    query: Query,
    url: str,
    *,
    on_record: RecordCallback,
    system: RequestDecorator | None = None,
) -> Fetch:
    """Create a fetch for ``query``, authenticate it and register it.

    Args:
        context: Open transport context.
        query: Query the fetch serves; must not have a fetch yet.
        url: Fully built request URL.
        on_record: Callback receiving each complete record.
        system: Optional pDNS system adding auth headers and status mapping.

    Returns:
        The registered fetch. Its transfer starts on the next multiplexer pass.
    """
    if query.fetch is not None:
        raise RuntimeError("query already has an active fetch")
    fetch = Fetch(query, url, on_record=on_record, system=system)
    if system is not None:
        system.auth(fetch)
    query.fetch = fetch
    fetch.attach(context)
    return fetch


def classify_exception(error: Exception) -> TransferResult:
    """Map an httpx exception onto a transfer result."""
    if isinstance(error, httpx.TimeoutException):
        return TransferResult.OPERATION_TIMEDOUT
    if isinstance(error, httpx.ConnectError):
        if _caused_by(error, socket.gaierror):
            return TransferResult.COULDNT_RESOLVE_HOST
        return TransferResult.COULDNT_CONNECT
    if isinstance(error, (httpx.NetworkError, httpx.RemoteProtocolError)):
        return TransferResult.RECV_ERROR
    return TransferResult.FAILED


def _caused_by(error: BaseException, kind: type[BaseException]) -> bool:
    seen: BaseException | None = error
    while seen is not None:
        if isinstance(seen, kind):
            return True
        seen = seen.__cause__ or seen.__context__
    return False
