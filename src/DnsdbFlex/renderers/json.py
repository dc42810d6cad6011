"""JSON-per-line presenter.

Writes each record's ``obj`` member as compact JSON, one per line.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from DnsdbFlex.core.models import Record
from DnsdbFlex.renderers.base import Presenter

if TYPE_CHECKING:
    from DnsdbFlex.transport.lifecycle import Writer


def render_json(record: Record) -> str:
    """Render a record payload as one compact JSON line."""
    return json.dumps(record.obj, ensure_ascii=False, separators=(",", ":"))


class JsonPresenter(Presenter):
    """Write record payloads as newline-delimited JSON."""

    def present(self, record: Record, raw: bytes, writer: Writer | None) -> None:
        del raw, writer
        self.emit(render_json(record))
