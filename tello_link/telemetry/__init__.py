"""Telemetry parsing, storage and the background listener."""

from .listener import TelemetryListener
from .parser import parse_fields, parse_telemetry
from .snapshot import TelemetrySnapshot, TelemetryStore

__all__ = [
    "TelemetryListener",
    "TelemetrySnapshot",
    "TelemetryStore",
    "parse_fields",
    "parse_telemetry",
]
