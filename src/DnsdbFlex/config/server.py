"""Server domain configuration: which pDNS system, where, and how to connect."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from DnsdbFlex.config.common import (
    expect_bool,
    expect_float,
    expect_optional_str,
    expect_str,
    expect_str_list,
    get_optional_value,
    get_section,
)
from DnsdbFlex.config.credentials import DEFAULT_CONF_FILES
from DnsdbFlex.sources.registry import supported_system_names

_ALLOWED_IP_FAMILIES = {"any", "ipv4", "ipv6"}


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Store validated server and connection settings.

    ``system``, ``base_url`` and ``api_key`` are optional here; the legacy
    conf file and the environment may still provide them.
    """

    system: str | None
    base_url: str | None
    api_key: str | None
    timeout: float
    verify_tls: bool
    ip_family: str
    conf_files: tuple[str, ...]


def load_server(raw: Mapping[str, Any]) -> ServerConfig:
    """Load server domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed server configuration.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "server")
    conf_files = get_optional_value(section, "conf_files", list(DEFAULT_CONF_FILES))
    return ServerConfig(
        system=expect_optional_str(section.get("system"), "server.system"),
        base_url=expect_optional_str(section.get("base_url"), "server.base_url"),
        api_key=expect_optional_str(section.get("api_key"), "server.api_key"),
        timeout=expect_float(get_optional_value(section, "timeout", 0), "server.timeout"),
        verify_tls=expect_bool(get_optional_value(section, "verify_tls", True), "server.verify_tls"),
        ip_family=expect_str(get_optional_value(section, "ip_family", "any"), "server.ip_family").lower(),
        conf_files=tuple(expect_str_list(conf_files, "server.conf_files")),
    )


def check_server(config: ServerConfig) -> None:
    """Validate server domain constraints.

    Args:
        config: Parsed server configuration.

    Raises:
        ValueError: If values violate server constraints.
    """
    if config.system is not None and config.system not in supported_system_names():
        raise ValueError(f"server.system must be one of {list(supported_system_names())}")
    if config.timeout < 0:
        raise ValueError("server.timeout must be zero or positive")
    if config.ip_family not in _ALLOWED_IP_FAMILIES:
        raise ValueError(f"server.ip_family must be one of {sorted(_ALLOWED_IP_FAMILIES)}")
