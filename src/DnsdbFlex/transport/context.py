"""Transport context: the event loop, the HTTP client and the in-flight fetches.

One context is opened before the first fetch is created and closed exactly
once when the invocation ends. It is not reentrant and has a single owner.
Every transfer runs as a task on the context's private event loop, which
only runs while the multiplexer waits on it.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Iterable

import httpx

from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.transport.fetch import Fetch


class IpFamily(str, Enum):
    ANY = "any"
    V4 = "ipv4"
    V6 = "ipv6"


# Binding the wildcard address of one family makes connections to the
# other family fail, so only addresses of the pinned family are tried.
_LOCAL_ADDRESSES = {
    IpFamily.V4: "0.0.0.0",
    IpFamily.V6: "::",
}


class TransportContext:
    """Own the event loop, the HTTP client and the fetch handle set.

    Attributes:
        verify: Whether TLS certificates are validated.
        ip_family: Address family to pin connections to.
        timeout: Total time allowed for each transfer, in seconds; zero
            means none. It also bounds connection setup.
    """

    def __init__(
        self,
        *,
        verify: bool = True,
        ip_family: IpFamily = IpFamily.ANY,
        timeout: float = 0.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.verify = verify
        self.ip_family = ip_family
        self.timeout = timeout
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._fetches: list[Fetch] = []
        self._opened = False
        self._closed = False

    def open(self) -> TransportContext:
        """Initialize the context before first use.

        Raises:
            RuntimeError: If the context was already opened.
        """
        if self._opened:
            raise RuntimeError("transport context already opened")
        self._loop = asyncio.new_event_loop()
        transport = self._http_transport or httpx.AsyncHTTPTransport(
            verify=self.verify,
            local_address=_LOCAL_ADDRESSES.get(self.ip_family),
        )
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(None, connect=self.timeout or None),
            follow_redirects=False,
        )
        self._opened = True
        log.debug(
            "transport context open (verify=%s ip_family=%s timeout=%s)",
            self.verify,
            self.ip_family.value,
            self.timeout,
        )
        return self

    def close(self) -> None:
        """Release every remaining fetch, the client and the loop; safe to call twice."""
        if self._closed:
            return
        self._closed = True
        for fetch in list(self._fetches):
            fetch.unlink()
            fetch.release()
        self._fetches.clear()
        if self._loop is not None:
            pending = [task for task in asyncio.all_tasks(self._loop) if not task.done()]
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            if self._client is not None:
                self._loop.run_until_complete(self._client.aclose())
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()
        self._client = None
        self._loop = None
        log.debug("transport context closed")

    def __enter__(self) -> TransportContext:
        """Enter context manager."""
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and release all transport resources."""
        self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        self._check_open()
        assert self._client is not None
        return self._client

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        self._check_open()
        assert self._loop is not None
        return self._loop

    @property
    def fetches(self) -> tuple[Fetch, ...]:
        return tuple(self._fetches)

    def add(self, fetch: Fetch) -> None:
        self._check_open()
        self._fetches.append(fetch)

    def discard(self, fetch: Fetch) -> None:
        if fetch in self._fetches:
            self._fetches.remove(fetch)

    def running(self) -> list[Fetch]:
        return [fetch for fetch in self._fetches if not fetch.done]

    def completed(self) -> list[Fetch]:
        return [fetch for fetch in self._fetches if fetch.done]

    def wait(self, tasks: Iterable[asyncio.Task], timeout: float) -> None:
        """Run the loop until one of ``tasks`` finishes or ``timeout`` passes.

        This is the only place transfers make progress.
        """
        pending = [task for task in tasks if not task.done()]
        if not pending:
            return
        self.loop.run_until_complete(
            asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        )

    def _check_open(self) -> None:
        if not self._opened or self._closed:
            raise RuntimeError("transport context is not open")
