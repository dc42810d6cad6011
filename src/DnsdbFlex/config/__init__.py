"""Public configuration API for DnsdbFlex."""

from __future__ import annotations

from DnsdbFlex.config.app import AppConfig, load_config, merge_config_dicts, parse_config_dict
from DnsdbFlex.config.credentials import LegacyCredentials, load_legacy_credentials
from DnsdbFlex.config.output import OutputConfig
from DnsdbFlex.config.runtime import RuntimeConfig
from DnsdbFlex.config.server import ServerConfig

__all__ = [
    "RuntimeConfig",
    "ServerConfig",
    "OutputConfig",
    "AppConfig",
    "LegacyCredentials",
    "load_config",
    "load_legacy_credentials",
    "merge_config_dicts",
    "parse_config_dict",
]
