"""Blocking drone client running its session on a private event loop."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Coroutine, Dict, Optional, TypeVar

from .adapters.udp import Address
from .commands import DroneCommands
from .config import DroneConfig
from .core.errors import SocketClosedError
from .core.protocols import PacketHandler
from .session import DroneSession
from .telemetry import TelemetrySnapshot, TelemetryStore

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_SHUTDOWN_JOIN_SECONDS = 5.0


class Drone(DroneCommands[str]):
    """Synchronous drone control connection.

    Construction binds the command, telemetry and stream sockets and starts
    both listeners on a background event loop thread. Every command blocks the
    calling thread until the drone answers or the timeout expires::

        with Drone() as drone:
            drone.enter_sdk_mode()
            drone.takeoff()
            drone.land()

    Issue commands from one thread at a time. A stream handler, if given, runs
    on the background loop thread.
    """

    def __init__(
        self,
        config: Optional[DroneConfig] = None,
        *,
        stream_handler: Optional[PacketHandler] = None,
        configure_logs: bool = False,
    ) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="tello-link-loop", daemon=True
        )
        self._closed = False
        self._close_lock = threading.Lock()
        self._thread.start()

        self._session = DroneSession(
            config, stream_handler=stream_handler, configure_logs=configure_logs
        )
        try:
            self._run(self._session.open())
        except BaseException:
            self._stop_loop()
            self._closed = True
            raise

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    @property
    def session(self) -> DroneSession:
        return self._session

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def telemetry(self) -> TelemetrySnapshot:
        """Latest telemetry snapshot.

        Raises:
            TelemetryNotAvailableError: Before the first state datagram is parsed.
        """
        return self._session.telemetry

    @property
    def telemetry_store(self) -> TelemetryStore:
        return self._session.telemetry_store

    @property
    def local_addresses(self) -> Dict[str, Optional[Address]]:
        return self._session.local_addresses

    def execute(self, command: str, *, timeout: Optional[float] = None) -> str:
        """Send an encoded command and block until its response.

        Raises:
            DroneTimeoutError: If the drone does not answer in time.
            SocketClosedError: If the drone connection was closed.
        """
        if self._closed:
            raise SocketClosedError(f"Cannot send {command!r}: drone connection is closed")
        return self._run(self._session.execute(command, timeout=timeout))

    def _send(self, command: str, *, motion: bool = False) -> str:
        timeout = self._session.config.timeouts.motion_seconds if motion else None
        return self.execute(command, timeout=timeout)

    def health_snapshot(self) -> Dict[str, object]:
        if self._closed:
            raise SocketClosedError("Drone connection is closed")
        return self._run(self._session.health.snapshot())

    def close(self) -> None:
        """Cancel the listeners, release the sockets and stop the loop thread."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        try:
            self._run(self._session.aclose())
        finally:
            self._stop_loop()

    def _stop_loop(self) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=_SHUTDOWN_JOIN_SECONDS)
        if self._thread.is_alive():
            LOGGER.warning("Event loop thread did not stop within %.1fs", _SHUTDOWN_JOIN_SECONDS)
            return
        self._loop.close()

    def __enter__(self) -> "Drone":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
