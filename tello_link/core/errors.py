"""Error types raised by the drone session layer."""

from __future__ import annotations

from typing import Optional


class DroneError(RuntimeError):
    """Base class for all tello-link failures."""


class DroneTimeoutError(DroneError):
    """Raised when no datagram arrives within the configured window.

    For commands this means the outcome is unknown: the drone may or may not
    have acted on the request.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.timeout = timeout


class MalformedTelemetryError(DroneError):
    """Raised when a telemetry datagram contains a field without a ``:``."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class SocketClosedError(DroneError):
    """Raised when an operation is attempted after the session was closed."""


class TelemetryNotAvailableError(DroneError):
    """Raised when telemetry is read before the first state datagram arrived."""
