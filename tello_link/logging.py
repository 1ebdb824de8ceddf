"""Log setup for applications flying a drone with tello-link.

The library only creates loggers. An application installs handlers once,
either directly with :func:`configure_logging` or from the ``[logging]``
section of its config file with :func:`configure_logging_from_config`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Per-datagram debug output; kept at INFO unless network logging is asked for.
NETWORK_LOGGERS = ("tello_link.adapters", "tello_link.channel")
# Third-party loggers that are noisy at DEBUG while a session is open.
QUIET_LOGGERS = ("aiohttp.access", "asyncio")


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Send tello-link logs to stderr and, optionally, to a file.

    Parameters
    ----------
    level:
        Root level name such as ``"DEBUG"``. Unknown names fall back to INFO.
    log_path:
        File to append the same records to. Parent folders are created.
    log_network:
        Keep every sent command and received datagram visible at DEBUG.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    network_level = logging.NOTSET if log_network else logging.INFO
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.NOTSET if log_network else logging.WARNING
        )


def configure_logging_from_config(config: "LoggingConfig") -> None:
    """Apply a loaded ``[logging]`` section."""

    configure_logging(config.level, log_path=config.path, log_network=config.log_network)
