"""Application config orchestration and YAML loading entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from DnsdbFlex.config.output import OutputConfig, check_output, load_output
from DnsdbFlex.config.runtime import RuntimeConfig, check_runtime, load_runtime
from DnsdbFlex.config.server import ServerConfig, check_server, load_server


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    server: ServerConfig
    output: OutputConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    server = load_server(raw)
    output = load_output(raw)

    check_runtime(runtime)
    check_server(server)
    check_output(output)

    return AppConfig(runtime=runtime, server=server, output=output)


def load_config(
    path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> AppConfig:
    """Load YAML config and apply command-line overrides on top.

    Every section is optional, so a missing ``path`` yields the built-in
    defaults.

    Args:
        path: Optional YAML config file.
        overrides: Nested mapping merged over the file contents.

    Returns:
        Validated application configuration.
    """
    base: dict[str, Any] = {}
    if path is not None:
        base = parse_yaml(path.read_text(encoding="utf-8"))
    if overrides:
        base = merge_config_dicts(base, overrides)
    return parse_config_dict(base)


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
