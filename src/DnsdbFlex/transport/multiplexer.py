"""Driver for every fetch in a transport context.

``run`` starts pending transfers and lets the context's event loop run until
one of them finishes or a short wait elapses, draining completed transfers
after each pass, until no more than ``jobs`` remain. Draining classifies the
transfer outcome, records a default status for empty queries, and releases
the fetch.
"""

from __future__ import annotations

from DnsdbFlex.core.errors import TransportError, TransportErrorKind
from DnsdbFlex.transport.context import TransportContext
from DnsdbFlex.transport.fetch import Fetch, TransferResult
from DnsdbFlex.transport.lifecycle import NO_RESULTS_MESSAGE, STATUS_NOERROR
from DnsdbFlex.utils.log import log

# Upper bound on one readiness wait, in seconds.
IDLE_WAIT = 0.1


class Multiplexer:
    """Drive fetches to completion and collect transport failures.

    Attributes:
        context: Open transport context owning the fetch set.
        errors: Transport failures observed while draining.
    """

    def __init__(self, context: TransportContext) -> None:
        self.context = context
        self.errors: list[TransportError] = []

    @property
    def exit_code(self) -> int:
        return 1 if self.errors else 0

    def perform(self, wait: float = IDLE_WAIT) -> tuple[int, int]:
        """Start new fetches, then wait until one finishes or ``wait`` elapses.

        Returns:
            Tuple of (fetches still running, fetches that made progress).
        """
        running = self.context.running()
        for fetch in running:
            if not fetch.started:
                fetch.start()
        before = {id(fetch): fetch.received for fetch in running}
        self.context.wait([fetch.task for fetch in running if fetch.task is not None], wait)

        for fetch in running:
            task = fetch.task
            if task is not None and task.done() and not task.cancelled() and not fetch.done:
                # Fatal errors raised while decoding surface here.
                task.result()

        progressed = sum(
            1 for fetch in running if fetch.done or fetch.received != before[id(fetch)]
        )
        return len(self.context.running()), progressed

    def run(self, jobs: int = 0) -> None:
        """Run until at most ``jobs`` fetches are still in flight.

        Args:
            jobs: Threshold of running fetches; 0 waits for all of them.
        """
        log.debug("io_engine(%d)", jobs)
        still, _ = self.perform()
        while still > jobs:
            log.debug("...waiting (still %d)", still)
            self.drain()
            still, _ = self.perform()
        self.drain()

    def drain(self) -> int:
        """Finish every completed fetch.

        Returns:
            Number of fetches drained.
        """
        drained = 0
        for fetch in self.context.completed():
            self._finish(fetch)
            drained += 1
        return drained

    def _finish(self, fetch: Fetch) -> None:
        query = fetch.query
        if fetch.rcode == 0 and fetch.response is not None:
            fetch.rcode = fetch.response.status_code
        log.debug(
            "drain(%s) DONE rcode=%d result=%s",
            query.path if query is not None else "-",
            fetch.rcode,
            fetch.result.value if fetch.result is not None else "-",
        )

        error = classify(fetch)
        if error is not None:
            log.warning("transfer failed since %s", error)
            self.errors.append(error)

        if query is not None:
            log.debug("... state %s msg %s", query.state.value, query.saf_msg or "")
            writer = query.writer
            if writer is not None and writer.count == 0 and query.status is None:
                query.set_status(STATUS_NOERROR, NO_RESULTS_MESSAGE)
            query.finish(clean_end=fetch.result is TransferResult.OK)

        fetch.unlink()
        fetch.release()


def classify(fetch: Fetch) -> TransportError | None:
    """Classify a completed fetch.

    Resolution and connection failures are always errors. Any other failed
    result is an error unless the client stopped the transfer itself.

    Returns:
        The transport error, or None for a successful or self-stopped fetch.
    """
    result = fetch.result
    if result is TransferResult.COULDNT_RESOLVE_HOST:
        return TransportError(TransportErrorKind.RESOLVE, fetch.detail)
    if result is TransferResult.COULDNT_CONNECT:
        return TransportError(TransportErrorKind.CONNECT, fetch.detail)
    if result is not None and result is not TransferResult.OK and not fetch.stopped:
        return TransportError(TransportErrorKind.TRANSFER, fetch.detail)
    return None
