"""Client for the Tello UDP text command protocol."""

from .config import DroneConfig, load_config
from .core.errors import (
    DroneError,
    DroneTimeoutError,
    MalformedTelemetryError,
    SocketClosedError,
    TelemetryNotAvailableError,
)
from .drone import Drone
from .session import DroneSession
from .telemetry import TelemetrySnapshot

__all__ = [
    "Drone",
    "DroneConfig",
    "DroneError",
    "DroneSession",
    "DroneTimeoutError",
    "MalformedTelemetryError",
    "SocketClosedError",
    "TelemetryNotAvailableError",
    "TelemetrySnapshot",
    "load_config",
]
