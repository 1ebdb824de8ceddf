"""Constants used across the tello-link package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "tello-link"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_LOCAL_HOST = "0.0.0.0"
DEFAULT_DRONE_HOST = "192.168.10.1"

COMMAND_PORT = 8889
TELEMETRY_PORT = 8890
STREAM_PORT = 11111

DEFAULT_COMMAND_TIMEOUT_SECONDS = 3.0
DEFAULT_MOTION_TIMEOUT_SECONDS = 15.0
DEFAULT_TELEMETRY_POLL_SECONDS = 0.5
DEFAULT_STREAM_MAX_PENDING = 256

# Synthesized answer for the one verb the drone never acknowledges.
EMERGENCY_RESPONSE = "ok"
