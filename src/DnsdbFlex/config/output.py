"""Output domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from DnsdbFlex.config.common import expect_bool, expect_str, get_optional_value, get_section

_ALLOWED_FORMATS = {"json", "batch", "batch-dedup"}


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Output configuration.

    Attributes:
        format: Presenter name.
        quiet: Suppress warnings on the console.
    """

    format: str
    quiet: bool


def load_output(raw: Mapping[str, Any]) -> OutputConfig:
    """Load output domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed output configuration.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "output")
    return OutputConfig(
        format=expect_str(get_optional_value(section, "format", "json"), "output.format").lower(),
        quiet=expect_bool(get_optional_value(section, "quiet", False), "output.quiet"),
    )


def check_output(config: OutputConfig) -> None:
    """Validate output domain constraints.

    Raises:
        ValueError: If the format is unknown.
    """
    if config.format not in _ALLOWED_FORMATS:
        raise ValueError(f"output.format must be one of {sorted(_ALLOWED_FORMATS)}")
