"""DNSDB API v2 (Flex) system binding.

Holds the API key and server URL, decides readiness, and decorates fetches
with the ``X-Api-Key`` header.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Mapping

from DnsdbFlex.core.errors import ConfigError
from DnsdbFlex.core.query import QueryDescriptor, TimeFence
from DnsdbFlex.sources.dnsdb.query import compile_url
from DnsdbFlex.transport.lifecycle import STATUS_ERROR
from DnsdbFlex.utils.log import log

if TYPE_CHECKING:
    from DnsdbFlex.transport.fetch import Fetch

DEFAULT_BASE_URL = "https://api.dnsdb.info/dnsdb/v2"
URL_PREFIX = "/dnsdb/v2"
ENV_API_KEY = "DNSDB_API_KEY"
ENV_SERVER = "DNSDB_SERVER"

# API key prefixes that may not use the Flex API.
BLOCKED_API_KEY_PREFIXES = ("dce-",)


class DnsdbSystem:
    """The ``dnsdb2`` passive-DNS system.

    Configuration arrives through ``setval`` (YAML, then legacy conf file);
    ``ready`` applies environment overrides last and validates.
    """

    name = "dnsdb2"
    base_url = DEFAULT_BASE_URL

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._api_key: str | None = None
        self._server: str | None = None

    @property
    def server_url(self) -> str:
        return self._server or self.base_url

    def setval(self, key: str, value: str) -> None:
        """Install one configuration element.

        Args:
            key: ``apikey`` or ``server``.
            value: Setting value.

        Raises:
            ConfigError: If the key is unknown.
        """
        if key == "apikey":
            self._api_key = value
        elif key == "server":
            self._server = value
        else:
            raise ConfigError(f"{self.name}: unrecognized key {key}")

    def ready(self) -> None:
        """Apply environment overrides and check the system can be queried.

        Raises:
            ConfigError: If no usable API key is available.
        """
        value = self._environ.get(ENV_API_KEY)
        if value:
            self.setval("apikey", value)
            log.debug("conf env api_key was set")
        value = self._environ.get(ENV_SERVER)
        if value:
            self.setval("server", value)
            log.debug("conf env dnsdb_server = '%s'", value)

        server = self._server or self.base_url
        if URL_PREFIX not in server:
            server = f"{server}{URL_PREFIX}"
        self._server = server

        if self._api_key is None:
            raise ConfigError("no API key given")
        if self._api_key.startswith(BLOCKED_API_KEY_PREFIXES):
            raise ConfigError("The type of API key given is not allowed to use the DNSDB Flex API")

    def url(self, path: str, descriptor: QueryDescriptor, fence: TimeFence) -> str:
        return compile_url(self.server_url, path, descriptor, fence)

    def auth(self, fetch: Fetch) -> None:
        if self._api_key is not None:
            fetch.headers["X-Api-Key"] = self._api_key

    def status(self, fetch: Fetch) -> str:
        del fetch
        return STATUS_ERROR

    def destroy(self) -> None:
        """Drop held credentials."""
        self._api_key = None
        self._server = None
