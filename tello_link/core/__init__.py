"""Core primitives for tello-link."""

from .bounds import IntRange, clamp, clamp_all, render
from .errors import (
    DroneError,
    DroneTimeoutError,
    MalformedTelemetryError,
    SocketClosedError,
    TelemetryNotAvailableError,
)
from .protocols import PacketHandler

__all__ = [
    "DroneError",
    "DroneTimeoutError",
    "IntRange",
    "MalformedTelemetryError",
    "PacketHandler",
    "SocketClosedError",
    "TelemetryNotAvailableError",
    "clamp",
    "clamp_all",
    "render",
]
