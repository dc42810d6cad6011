"""Record presenters.

Provides the Presenter base class for new output formats, and a factory
function to instantiate the presenter selected by configuration.
"""

from __future__ import annotations

from typing import TextIO

from DnsdbFlex.config import AppConfig
from DnsdbFlex.renderers.base import Presenter
from DnsdbFlex.renderers.batch import BatchDedupPresenter, BatchPresenter
from DnsdbFlex.renderers.json import JsonPresenter, render_json


def create_presenter(config: AppConfig, stream: TextIO | None = None) -> Presenter:
    """Create the presenter for the configured output format.

    Args:
        config: Application configuration.
        stream: Output stream; defaults to stdout.

    Returns:
        Presenter instance.

    Raises:
        ValueError: If the format is unknown.
    """
    fmt = config.output.format
    if fmt == "json":
        return JsonPresenter(stream)
    if fmt == "batch":
        return BatchPresenter(stream)
    if fmt == "batch-dedup":
        return BatchDedupPresenter(stream)
    raise ValueError(f"Unsupported output format: {fmt}")


__all__ = [
    "Presenter",
    "JsonPresenter",
    "BatchPresenter",
    "BatchDedupPresenter",
    "create_presenter",
    "render_json",
]
