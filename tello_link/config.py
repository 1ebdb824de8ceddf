"""Configuration loader for tello-link."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class NetworkConfig:
    local_host: str = constants.DEFAULT_LOCAL_HOST
    command_port: int = constants.COMMAND_PORT
    telemetry_port: int = constants.TELEMETRY_PORT
    stream_port: int = constants.STREAM_PORT
    remote_host: str = constants.DEFAULT_DRONE_HOST
    remote_port: int = constants.COMMAND_PORT


@dataclass(slots=True)
class TimeoutConfig:
    command_seconds: float = constants.DEFAULT_COMMAND_TIMEOUT_SECONDS
    motion_seconds: float = constants.DEFAULT_MOTION_TIMEOUT_SECONDS  # Motion commands answer when the move ends
    telemetry_receive_seconds: Optional[float] = None  # None waits indefinitely
    stream_receive_seconds: Optional[float] = None


@dataclass(slots=True)
class TelemetryConfig:
    poll_interval_seconds: float = constants.DEFAULT_TELEMETRY_POLL_SECONDS


@dataclass(slots=True)
class StreamConfig:
    max_pending_packets: int = constants.DEFAULT_STREAM_MAX_PENDING


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class HealthConfig:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 0
    telemetry_stale_seconds: Optional[float] = None  # None never marks telemetry stale


@dataclass(slots=True)
class DroneConfig:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    raw: ConfigParser = field(default_factory=ConfigParser)
    path: Optional[Path] = None

    @property
    def remote_address(self) -> tuple[str, int]:
        return (self.network.remote_host, self.network.remote_port)


def _get_float(parser: ConfigParser, section: str, key: str, default: float) -> float:
    try:
        value = parser.getfloat(section, key, fallback=default)
    except ValueError:
        return default
    return max(0.0, value)


def _get_optional_float(
    parser: ConfigParser, section: str, key: str
) -> Optional[float]:
    raw_value = parser.get(section, key, fallback="").strip()
    if not raw_value or raw_value.lower() == "none":
        return None
    try:
        return max(0.0, float(raw_value))
    except ValueError:
        return None


def _get_int(parser: ConfigParser, section: str, key: str, default: int) -> int:
    try:
        return parser.getint(section, key, fallback=default)
    except ValueError:
        return default


def load_config(path: Optional[Path] = None) -> DroneConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "network": {
                "local_host": constants.DEFAULT_LOCAL_HOST,
                "command_port": str(constants.COMMAND_PORT),
                "telemetry_port": str(constants.TELEMETRY_PORT),
                "stream_port": str(constants.STREAM_PORT),
                "remote_host": constants.DEFAULT_DRONE_HOST,
                "remote_port": str(constants.COMMAND_PORT),
            },
            "timeouts": {
                "command_seconds": str(constants.DEFAULT_COMMAND_TIMEOUT_SECONDS),
                "motion_seconds": str(constants.DEFAULT_MOTION_TIMEOUT_SECONDS),
                "telemetry_receive_seconds": "",
                "stream_receive_seconds": "",
            },
            "telemetry": {
                "poll_interval_seconds": str(constants.DEFAULT_TELEMETRY_POLL_SECONDS),
            },
            "stream": {
                "max_pending_packets": str(constants.DEFAULT_STREAM_MAX_PENDING),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
            "health": {
                "enabled": "false",
                "host": "127.0.0.1",
                "port": "0",
                "telemetry_stale_seconds": "",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    network = NetworkConfig(
        local_host=parser.get("network", "local_host"),
        command_port=_get_int(parser, "network", "command_port", constants.COMMAND_PORT),
        telemetry_port=_get_int(
            parser, "network", "telemetry_port", constants.TELEMETRY_PORT
        ),
        stream_port=_get_int(parser, "network", "stream_port", constants.STREAM_PORT),
        remote_host=parser.get("network", "remote_host"),
        remote_port=_get_int(parser, "network", "remote_port", constants.COMMAND_PORT),
    )

    timeouts = TimeoutConfig(
        command_seconds=_get_float(
            parser,
            "timeouts",
            "command_seconds",
            constants.DEFAULT_COMMAND_TIMEOUT_SECONDS,
        ),
        motion_seconds=_get_float(
            parser,
            "timeouts",
            "motion_seconds",
            constants.DEFAULT_MOTION_TIMEOUT_SECONDS,
        ),
        telemetry_receive_seconds=_get_optional_float(
            parser, "timeouts", "telemetry_receive_seconds"
        ),
        stream_receive_seconds=_get_optional_float(
            parser, "timeouts", "stream_receive_seconds"
        ),
    )

    telemetry = TelemetryConfig(
        poll_interval_seconds=_get_float(
            parser,
            "telemetry",
            "poll_interval_seconds",
            constants.DEFAULT_TELEMETRY_POLL_SECONDS,
        ),
    )

    stream = StreamConfig(
        max_pending_packets=max(
            1,
            _get_int(
                parser,
                "stream",
                "max_pending_packets",
                constants.DEFAULT_STREAM_MAX_PENDING,
            ),
        ),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    health = HealthConfig(
        enabled=parser.getboolean("health", "enabled", fallback=False),
        host=parser.get("health", "host", fallback="127.0.0.1"),
        port=_get_int(parser, "health", "port", 0),
        telemetry_stale_seconds=_get_optional_float(
            parser, "health", "telemetry_stale_seconds"
        ),
    )

    return DroneConfig(
        network=network,
        timeouts=timeouts,
        telemetry=telemetry,
        stream=stream,
        logging=logging_config,
        health=health,
        raw=parser,
        path=config_path,
    )


def save_config(config: DroneConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path or constants.DEFAULT_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
