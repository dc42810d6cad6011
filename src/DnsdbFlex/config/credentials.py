"""Legacy DNSDB client configuration files.

The first readable file of the search list is parsed as ``KEY="value"``
assignments; ``APIKEY``, ``DNSDB_SERVER`` and ``DNSDBQ_SYSTEM`` are used.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from dotenv import dotenv_values

from DnsdbFlex.utils.log import log

DEFAULT_CONF_FILES: tuple[str, ...] = (
    "~/.isc-dnsdb-query.conf",
    "~/.dnsdb-query.conf",
    "/etc/isc-dnsdb-query.conf",
    "/etc/dnsdb-query.conf",
)


@dataclass(frozen=True, slots=True)
class LegacyCredentials:
    """Values read from a legacy conf file; all None when none was found."""

    path: Path | None = None
    system: str | None = None
    api_key: str | None = None
    server: str | None = None


def find_conf_file(candidates: Sequence[str]) -> Path | None:
    """Return the first readable conf file, or None."""
    for candidate in candidates:
        path = Path(os.path.expanduser(candidate))
        if path.is_file() and os.access(path, os.R_OK):
            log.debug("conf found: '%s'", path)
            return path
    return None


def load_legacy_credentials(candidates: Sequence[str] = DEFAULT_CONF_FILES) -> LegacyCredentials:
    """Read credentials from the first readable legacy conf file.

    Args:
        candidates: Search list; ``~`` is expanded.

    Returns:
        Parsed values; unset or blank variables come back as None.
    """
    path = find_conf_file(candidates)
    if path is None:
        return LegacyCredentials()
    values = dotenv_values(path)
    return LegacyCredentials(
        path=path,
        system=values.get("DNSDBQ_SYSTEM") or None,
        api_key=values.get("APIKEY") or None,
        server=values.get("DNSDB_SERVER") or None,
    )
