# src/log_shipper/envelope.py

"""
Serialization of bundles into the Datadog-style batch body accepted by Graylog.

Each entry is `{"ddsource": ..., "ddtags": ..., "message": ...}`; `ddtags`
is present only when tags are configured. The message is passed through as
an opaque string.
"""

import json
from typing import Any, Iterable

from .core import LogLine

LOG_SOURCE = "CloudConnexa"


def build_entry(message: str, tags: str | None = None) -> dict[str, Any]:
    entry: dict[str, Any] = {"ddsource": LOG_SOURCE}
    if tags:
        entry["ddtags"] = tags
    entry["message"] = message
    return entry


def encode_bundle(lines: Iterable[LogLine], tags: str | None = None) -> str:
    """Returns the compact JSON array body for one request."""
    entries = [build_entry(line.message, tags) for line in lines]
    return json.dumps(entries, separators=(",", ":"), ensure_ascii=False)
