"""Search service layer for DnsdbFlex.

Provides the pDNS system protocol, the search service, and factory
functions wiring configuration into a ready system.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Mapping

from DnsdbFlex.config.credentials import load_legacy_credentials
from DnsdbFlex.services.search import FlexSearchService, PdnsSystem
from DnsdbFlex.sources.registry import DEFAULT_SYSTEM, pick_system
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.config import AppConfig

ENV_SYSTEM = "DNSDBQ_SYSTEM"


def create_system(config: AppConfig, environ: Mapping[str, str] | None = None) -> PdnsSystem:
    """Pick and configure the pDNS system.

    The system name comes from the config (``-u``), then the legacy conf
    file, then ``DNSDBQ_SYSTEM``. Settings are applied in increasing
    precedence: YAML, legacy conf file, then environment inside ``ready``.

    Args:
        config: Application configuration.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        A ready system.

    Raises:
        ConfigError: If the system is unknown or lacks credentials.
    """
    environ = os.environ if environ is None else environ
    creds = load_legacy_credentials(config.server.conf_files)
    name = config.server.system or creds.system or environ.get(ENV_SYSTEM) or DEFAULT_SYSTEM
    log.debug("pdns system: %s", name)

    system = pick_system(name, environ)
    for key, value in (
        ("server", config.server.base_url),
        ("apikey", config.server.api_key),
        ("server", creds.server),
        ("apikey", creds.api_key),
    ):
        if value is not None:
            system.setval(key, value)
    system.ready()
    return system


def create_search_service(
    config: AppConfig, environ: Mapping[str, str] | None = None
) -> FlexSearchService:
    """Create a search service bound to the configured system."""
    return FlexSearchService(system=create_system(config, environ))


__all__ = [
    "FlexSearchService",
    "PdnsSystem",
    "create_search_service",
    "create_system",
]
