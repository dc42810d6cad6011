"""System registry and builders for passive-DNS systems."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Mapping, Optional

from DnsdbFlex.core.errors import ConfigError

if TYPE_CHECKING:
    from DnsdbFlex.services.search import PdnsSystem

DEFAULT_SYSTEM = "dnsdb2"

SystemBuilder = Callable[[Optional[Mapping[str, str]]], "PdnsSystem"]


def pick_system(name: str, environ: Mapping[str, str] | None = None) -> PdnsSystem:
    """Build a pDNS system from its registered name.

    Args:
        name: System identifier, from ``-u`` or ``DNSDBQ_SYSTEM``.
        environ: Environment the system reads overrides from.

    Returns:
        PdnsSystem: Fresh system instance.

    Raises:
        ConfigError: If ``name`` is not registered.
    """
    builder = _system_builders().get(name)
    if builder is None:
        raise ConfigError(f"unknown pdns system: {name}")
    return builder(environ)


def supported_system_names() -> tuple[str, ...]:
    """Return all system names that can be built by the registry."""
    return tuple(_system_builders().keys())


def _system_builders() -> dict[str, SystemBuilder]:
    """Return system builder registry."""
    return {
        "dnsdb2": _build_dnsdb2,
    }


def _build_dnsdb2(environ: Mapping[str, str] | None) -> PdnsSystem:
    from DnsdbFlex.sources.dnsdb.client import DnsdbSystem

    return DnsdbSystem(environ)
