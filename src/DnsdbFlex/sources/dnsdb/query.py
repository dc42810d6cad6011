"""DNSDB Flex request path and URL compilation."""

from __future__ import annotations

from urllib.parse import quote

from DnsdbFlex import SWCLIENT, __version__
from DnsdbFlex.core.query import QueryDescriptor, TimeFence


def escape(value: str) -> str:
    """Percent-encode every byte outside the URL unreserved set."""
    return quote(value, safe="")


def make_path(descriptor: QueryDescriptor) -> str:
    """Build the RESTful path for a descriptor.

    Args:
        descriptor: Validated search parameters.

    Returns:
        ``{method}/{target}/{value}`` with ``/{rrtype}`` appended when an
        rrtype filter is set. Value and rrtype are percent-encoded.
    """
    parts = [descriptor.method.value, descriptor.target.value, escape(descriptor.value)]
    if descriptor.rrtype is not None:
        parts.append(escape(descriptor.rrtype))
    return "/".join(parts)


def compile_url(base_url: str, path: str, descriptor: QueryDescriptor, fence: TimeFence) -> str:
    """Compile the full request URL.

    Parameters are appended in a fixed order and only when meaningful:
    ``offset`` when positive, ``limit`` when set (zero included), each fence
    bound when present, and ``exclude`` when given.

    Args:
        base_url: Server base URL, already including the API prefix.
        path: Path from ``make_path``.
        descriptor: Search parameters.
        fence: Time fence built from the descriptor.

    Returns:
        Absolute URL string.
    """
    scheme = "" if "://" in base_url else "https://"
    params: list[tuple[str, str]] = [("swclient", SWCLIENT), ("version", __version__)]
    if descriptor.offset > 0:
        params.append(("offset", str(descriptor.offset)))
    if descriptor.query_limit != -1:
        params.append(("limit", str(descriptor.query_limit)))
    for name, bound in (
        ("time_first_after", fence.first_after),
        ("time_first_before", fence.first_before),
        ("time_last_after", fence.last_after),
        ("time_last_before", fence.last_before),
    ):
        if bound:
            params.append((name, str(bound)))
    if descriptor.exclude is not None:
        params.append(("exclude", escape(descriptor.exclude)))

    query_string = "&".join(f"{name}={value}" for name, value in params)
    return f"{scheme}{base_url}/{path}?{query_string}"
