"""Result-stream protocol decoding.

Each deblocked line is a JSON envelope ``{"cond"?, "msg"?, "obj"?}``.
``decode_record`` validates its shape, ``transition`` drives the per-query
completion state machine, and ``ProtocolDecoder`` ties both to the output
governor and the presenter.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Mapping

from DnsdbFlex.core.errors import ProtocolError
from DnsdbFlex.core.models import ProtocolState, Record, RecordData
from DnsdbFlex.protocol.governor import OutputGovernor
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.renderers.base import Presenter
    from DnsdbFlex.transport.lifecycle import Query

_STRING_FIELDS: Final[tuple[str, ...]] = ("rrname", "rdata", "raw_rdata", "rrtype")
_INTEGER_FIELDS: Final[tuple[str, ...]] = ("count", "time_first", "time_last")

_NON_TERMINAL: Final = frozenset(state for state in ProtocolState if not state.is_terminal)


@dataclass(frozen=True, slots=True)
class _Rule:
    target: ProtocolState
    # States the rule applies from; None means any state.
    sources: frozenset[ProtocolState] | None
    consumes: bool


_TRANSITIONS: Final[dict[str, _Rule]] = {
    "begin": _Rule(ProtocolState.BEGIN, frozenset({ProtocolState.INIT}), consumes=True),
    "ongoing": _Rule(ProtocolState.ONGOING, _NON_TERMINAL, consumes=False),
    "succeeded": _Rule(ProtocolState.SUCCEEDED, None, consumes=True),
    "limited": _Rule(ProtocolState.LIMITED, None, consumes=True),
    "failed": _Rule(ProtocolState.FAILED, None, consumes=True),
}


@dataclass(frozen=True, slots=True)
class Step:
    """Outcome of feeding one record to the state machine.

    Attributes:
        state: State after the record.
        forward: Whether the record's payload goes on to the presenter and
            counts as one produced record.
    """

    state: ProtocolState
    forward: bool


def transition(state: ProtocolState, record: Record) -> Step:
    """Compute the next protocol state for ``record``.

    Args:
        state: Current state of the query.
        record: Decoded record.

    Returns:
        New state and whether the payload is forwarded.
    """
    has_payload = record.obj is not None
    if record.cond is None:
        return Step(state, forward=has_payload)

    rule = _TRANSITIONS.get(record.cond)
    if rule is None:
        return Step(ProtocolState.MISSING, forward=False)

    new_state = rule.target if rule.sources is None or state in rule.sources else state
    if rule.consumes:
        return Step(new_state, forward=False)
    return Step(new_state, forward=has_payload)


def decode_record(raw: bytes) -> Record:
    """Decode one newline-delimited envelope.

    Args:
        raw: Record bytes without the trailing newline.

    Returns:
        Decoded record.

    Raises:
        ProtocolError: If the line is not a JSON object, nests too deeply to
            parse, or a known field has the wrong type.
    """
    try:
        main = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"json decode failed: {e}") from e
    except RecursionError as e:
        raise ProtocolError("json decode failed: nesting too deep") from e
    if not isinstance(main, Mapping):
        raise ProtocolError("record must be an object")

    cond = _get_typed(main, "cond", str, "a string")
    msg = _get_typed(main, "msg", str, "a string")
    obj = _get_typed(main, "obj", Mapping, "an object")
    if obj is None:
        return Record(cond=cond, msg=msg)

    strings = {name: _get_typed(obj, name, str, "a string") for name in _STRING_FIELDS}
    integers = {name: _get_int(obj, name) for name in _INTEGER_FIELDS}
    return Record(
        cond=cond,
        msg=msg,
        obj=obj,
        data=RecordData(**strings, **integers),
    )


def _get_typed(container: Mapping[str, Any], name: str, kind: type, label: str) -> Any:
    if name not in container:
        return None
    value = container[name]
    if not isinstance(value, kind):
        raise ProtocolError(f"{name} must be {label}")
    return value


def _get_int(container: Mapping[str, Any], name: str) -> int | None:
    if name not in container:
        return None
    value = container[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"{name} must be an integer")
    return value


class ProtocolDecoder:
    """Decode deblocked records for a query and forward data to a presenter.

    ``feed`` is the per-record callback registered on every fetch. It never
    raises for bad input: malformed records are logged and skipped.
    """

    def __init__(self, presenter: Presenter, governor: OutputGovernor | None = None) -> None:
        self.presenter = presenter
        self.governor = governor or OutputGovernor()

    def feed(self, query: Query, raw: bytes) -> bool:
        """Process one record for ``query``.

        Args:
            query: Query owning the fetch the record arrived on.
            raw: Record bytes without the trailing newline.

        Returns:
            False when the output cap was reached and the fetch must stop;
            True otherwise.
        """
        if not raw.strip():
            return True
        try:
            record = decode_record(raw)
        except ProtocolError as e:
            log.warning("dropping record: %s", e)
            return True

        if record.msg is not None:
            log.debug("record msg = %s", record.msg)
            query.saf_msg = record.msg
        if record.cond is not None:
            log.debug("record cond = %s", record.cond)

        step = transition(query.state, record)
        if step.state is ProtocolState.MISSING and record.cond is not None:
            log.warning('Unknown value for "cond": %s', record.cond)
        query.state = step.state

        if not step.forward:
            if record.is_keepalive:
                log.debug("record has no payload, i.e. a keepalive")
            return True

        if not self.governor.admit(query):
            self.governor.stop(query)
            return False

        try:
            self.presenter.present(record, raw, query.writer)
        except ProtocolError as e:
            log.warning("cannot present record: %s", e)
            return True
        self.governor.produced(query)
        return True
