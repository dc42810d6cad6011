from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from DnsdbFlex.utils.log import log

MAX_VALUE_LEN = 4096

_GLOB_TERMINATORS = ("*", "?", "]", ".")


class SearchMethod(str, Enum):
    REGEX = "regex"
    GLOB = "glob"


class SearchTarget(str, Enum):
    RRNAMES = "rrnames"
    RDATA = "rdata"


class ReturnMode(str, Enum):
    TERSE = "terse"


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """Validated search intent for one Flex query.

    Attributes:
        method: Regular expression or glob matching.
        target: Search over owner names or over rdata.
        mode: What the server should return for each match.
        value: The expression itself, unescaped.
        exclude: Optional exclusion expression of the same method.
        rrtype: Optional rrtype filter.
        after: Optional fence start, epoch seconds.
        before: Optional fence end, epoch seconds.
        complete: Strict containment instead of overlap for the fence.
        query_limit: Server-side result limit; ``-1`` means unset.
        output_limit: Client-side output cap; ``-1`` means unset.
        offset: Number of server results to skip.
    """

    method: SearchMethod
    value: str
    target: SearchTarget = SearchTarget.RRNAMES
    mode: ReturnMode = ReturnMode.TERSE
    exclude: Optional[str] = None
    rrtype: Optional[str] = None
    after: Optional[int] = None
    before: Optional[int] = None
    complete: bool = False
    query_limit: int = -1
    output_limit: int = -1
    offset: int = 0

    @property
    def effective_output_limit(self) -> int:
        """Output cap, defaulting to the query limit when only that is set."""
        if self.output_limit == -1 and self.query_limit != -1:
            return self.query_limit
        return self.output_limit


@dataclass(frozen=True, slots=True)
class TimeFence:
    """Server-side time constraints, one optional bound per tuple edge."""

    first_after: Optional[int] = None
    first_before: Optional[int] = None
    last_after: Optional[int] = None
    last_before: Optional[int] = None


def build_fence(*, after: Optional[int], before: Optional[int], complete: bool) -> TimeFence:
    """Translate user time-range intent into a time fence.

    With ``complete`` every tuple must lie inside the range: it begins after
    ``after`` and ends before ``before``. Without it a tuple only
    has to overlap the range: it ends after ``after`` and begins before
    ``before``.

    Args:
        after: Fence start, epoch seconds.
        before: Fence end, epoch seconds.
        complete: Strict containment instead of overlap.

    Returns:
        The four-bound fence.

    Raises:
        ValueError: If the bounds are inverted, or ``complete`` has no bound.
    """
    if after and before and after > before:
        raise ValueError("after value must be before the before value")
    if complete and not after and not before:
        raise ValueError("complete without after or before makes no sense")

    first_after = first_before = last_after = last_before = None
    if after:
        if complete:
            first_after = after
        else:
            last_after = after
    if before:
        if complete:
            last_before = before
        else:
            first_before = before
    return TimeFence(
        first_after=first_after,
        first_before=first_before,
        last_after=last_after,
        last_before=last_before,
    )


def check_descriptor(descriptor: QueryDescriptor, *, force: bool = False) -> None:
    """Validate a query descriptor before any request is built.

    Args:
        descriptor: Descriptor assembled from user input.
        force: Downgrade the glob and printable-ASCII checks; a bad glob
            ending only produces a warning.

    Raises:
        ValueError: If the descriptor cannot produce a useful query.
    """
    _check_expression(descriptor.value, f"--{descriptor.method.value}")
    if descriptor.exclude is not None:
        _check_expression(descriptor.exclude, "--exclude")

    if descriptor.method is SearchMethod.GLOB:
        _check_glob_trailing_char(descriptor, warn_only=force)
    elif force:
        raise ValueError("--force only makes sense with a glob query")

    if not force:
        _check_printable_ascii(descriptor.value)
        if descriptor.exclude is not None:
            _check_printable_ascii(descriptor.exclude)

    if descriptor.query_limit < -1:
        raise ValueError("query limit must be zero or positive")
    if descriptor.output_limit != -1 and descriptor.output_limit <= 0:
        raise ValueError("output limit must be positive")
    if descriptor.offset < 0:
        raise ValueError("offset must be zero or positive")

    build_fence(after=descriptor.after, before=descriptor.before, complete=descriptor.complete)


def _check_expression(value: str, option: str) -> None:
    if not value:
        raise ValueError(f"The {option} option requires a non-empty argument")
    if len(value) > MAX_VALUE_LEN:
        raise ValueError(f"The {option} option is too long ({MAX_VALUE_LEN} is the maximum length)")


def _check_printable_ascii(value: str) -> None:
    if not all(" " <= ch <= "~" for ch in value):
        raise ValueError(
            "expression argument is not printable ASCII. "
            "Use \\DDD to encode non-printable characters, "
            "where DDD is the decimal value of the character"
        )


def _check_glob_trailing_char(descriptor: QueryDescriptor, *, warn_only: bool) -> None:
    last_ch = descriptor.value[-1]
    if last_ch in _GLOB_TERMINATORS:
        return

    if descriptor.target is SearchTarget.RDATA:
        if last_ch == '"':
            return
        msg = (
            "a glob search argument for rdata should end either in a period, "
            "a double quote, or certain glob special characters (*, ?, or ])."
        )
    else:
        msg = (
            "a glob search argument for rrnames should end either in a period "
            "or certain glob special characters (*, ?, or ])."
        )

    if warn_only:
        log.warning("%s You may not get results from your search.", msg)
        return
    raise ValueError(f"{msg} You may not get results from your search.")
