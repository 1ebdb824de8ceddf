"""Drone session owning the UDP endpoints and background listeners."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Dict, Optional

from .adapters.udp import Address, DatagramEndpoint, open_endpoint
from .channel import CommandChannel
from .commands import DroneCommands
from .config import DroneConfig
from .core.errors import DroneTimeoutError, SocketClosedError
from .core.protocols import PacketHandler
from .health import HealthReporter, HealthServer
from .logging import configure_logging_from_config
from .stream import StreamListener
from .telemetry import TelemetryListener, TelemetrySnapshot, TelemetryStore

LOGGER = logging.getLogger(__name__)

COMMANDS_COMPONENT = "commands"


class SessionState(str, Enum):
    CREATED = "created"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class DroneSession(DroneCommands[Awaitable[str]]):
    """Asyncio session for one drone control connection.

    Opening binds the command, telemetry and stream sockets and starts the
    telemetry and stream listeners; closing cancels the listeners and then
    releases the sockets. Use it as an async context manager::

        async with DroneSession(config) as drone:
            await drone.enter_sdk_mode()
            await drone.takeoff()

    Commands must be awaited one at a time; the drone answers a single
    outstanding request and this session does not queue callers.
    """

    def __init__(
        self,
        config: Optional[DroneConfig] = None,
        *,
        stream_handler: Optional[PacketHandler] = None,
        health: Optional[HealthReporter] = None,
        configure_logs: bool = False,
    ) -> None:
        """Initialize the session without touching the network.

        Args:
            config: Session configuration. Defaults to :class:`DroneConfig` defaults.
            stream_handler: Callback receiving raw stream payloads on the event loop.
            health: Reporter to publish component status to; one is created if omitted.
            configure_logs: Install log handlers from the config's ``[logging]``
                section when the session opens.
        """
        self._config = config or DroneConfig()
        self._stream_handler = stream_handler
        self._configure_logs = configure_logs
        self._health = health or HealthReporter(
            telemetry_stale_after=self._config.health.telemetry_stale_seconds
        )
        self._health_server: Optional[HealthServer] = None
        self._store = TelemetryStore()
        self._state = SessionState.CREATED

        self._command_endpoint: Optional[DatagramEndpoint] = None
        self._telemetry_endpoint: Optional[DatagramEndpoint] = None
        self._stream_endpoint: Optional[DatagramEndpoint] = None
        self._channel: Optional[CommandChannel] = None
        self._telemetry_listener: Optional[TelemetryListener] = None
        self._stream_listener: Optional[StreamListener] = None

    @property
    def config(self) -> DroneConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def health(self) -> HealthReporter:
        return self._health

    @property
    def telemetry_store(self) -> TelemetryStore:
        return self._store

    @property
    def telemetry(self) -> TelemetrySnapshot:
        """Latest telemetry snapshot.

        Raises:
            TelemetryNotAvailableError: Before the first state datagram is parsed.
        """
        return self._store.snapshot

    @property
    def telemetry_listener(self) -> Optional[TelemetryListener]:
        return self._telemetry_listener

    @property
    def stream_listener(self) -> Optional[StreamListener]:
        return self._stream_listener

    @property
    def local_addresses(self) -> Dict[str, Optional[Address]]:
        """Actual bound addresses, useful when ports were configured as 0."""
        return {
            "command": self._command_endpoint.local_address
            if self._command_endpoint
            else None,
            "telemetry": self._telemetry_endpoint.local_address
            if self._telemetry_endpoint
            else None,
            "stream": self._stream_endpoint.local_address
            if self._stream_endpoint
            else None,
        }

    @property
    def sockets_closed(self) -> Dict[str, bool]:
        """Whether each socket is released; sockets never bound count as released."""
        return {
            name: endpoint is None or endpoint.closed
            for name, endpoint in (
                ("command", self._command_endpoint),
                ("telemetry", self._telemetry_endpoint),
                ("stream", self._stream_endpoint),
            )
        }

    @property
    def health_port(self) -> Optional[int]:
        """Port of the running ``/healthz`` endpoint, if one was started."""
        return self._health_server.port if self._health_server else None

    async def __aenter__(self) -> "DroneSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def open(self) -> None:
        """Bind all sockets and start the background listeners."""
        if self._state == SessionState.OPEN:
            return
        if self._state != SessionState.CREATED:
            raise SocketClosedError(f"Session is {self._state.value}; open a new one")

        if self._configure_logs:
            configure_logging_from_config(self._config.logging)

        network = self._config.network
        timeouts = self._config.timeouts

        try:
            self._command_endpoint = await open_endpoint(
                "command", (network.local_host, network.command_port)
            )
            self._telemetry_endpoint = await open_endpoint(
                "telemetry", (network.local_host, network.telemetry_port), max_pending=1
            )
            self._stream_endpoint = await open_endpoint(
                "stream",
                (network.local_host, network.stream_port),
                max_pending=self._config.stream.max_pending_packets,
            )
        except OSError:
            LOGGER.error("Failed to bind drone sockets on %s", network.local_host)
            self._close_endpoints()
            self._state = SessionState.CLOSED
            raise

        self._channel = CommandChannel(
            self._command_endpoint,
            self._config.remote_address,
            timeout=timeouts.command_seconds,
        )
        self._telemetry_listener = TelemetryListener(
            self._telemetry_endpoint,
            self._store,
            poll_interval=self._config.telemetry.poll_interval_seconds,
            receive_timeout=timeouts.telemetry_receive_seconds,
            status=self._health,
        )
        self._stream_listener = StreamListener(
            self._stream_endpoint,
            handler=self._stream_handler,
            receive_timeout=timeouts.stream_receive_seconds,
            status=self._health,
        )
        self._health.watch_telemetry(self._store)
        self._health.watch_stream(self._stream_listener, self._stream_endpoint)
        self._telemetry_listener.start()
        self._stream_listener.start()
        self._state = SessionState.OPEN

        if self._config.health.enabled:
            self._health_server = HealthServer(
                self._health, self._config.health.host, self._config.health.port
            )
            try:
                await self._health_server.start()
            except OSError:
                LOGGER.warning("Health endpoint could not start", exc_info=True)
                self._health_server = None

        await self._health.set_session_state(self._state.value)
        LOGGER.info(
            "Drone session open: local %s, drone %s:%s",
            network.local_host,
            *self._config.remote_address,
        )

    async def execute(self, command: str, *, timeout: Optional[float] = None) -> str:
        """Send an encoded command and return the drone's response text.

        Raises:
            DroneTimeoutError: If the drone does not answer in time.
            SocketClosedError: If the session is not open.
        """
        if self._state != SessionState.OPEN or self._channel is None:
            raise SocketClosedError(
                f"Cannot send {command!r}: session is {self._state.value}"
            )

        try:
            response = await self._channel.execute(command, timeout=timeout)
        except DroneTimeoutError as exc:
            await self._health.update(COMMANDS_COMPONENT, False, str(exc))
            raise
        await self._health.update(COMMANDS_COMPONENT, True)
        return response

    def _send(self, command: str, *, motion: bool = False) -> Awaitable[str]:
        timeout = self._config.timeouts.motion_seconds if motion else None
        return self.execute(command, timeout=timeout)

    async def aclose(self) -> None:
        """Cancel the listeners and release every socket. Safe to call twice."""
        if self._state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        self._state = SessionState.CLOSING

        listeners = [
            listener
            for listener in (self._telemetry_listener, self._stream_listener)
            if listener is not None
        ]
        await asyncio.gather(
            *(listener.stop() for listener in listeners), return_exceptions=True
        )

        if self._channel is not None:
            self._channel.close()
        self._close_endpoints()

        if self._health_server is not None:
            await self._health_server.stop()
            self._health_server = None

        self._state = SessionState.CLOSED
        await self._health.set_session_state(self._state.value)
        LOGGER.info("Drone session closed")

    def _close_endpoints(self) -> None:
        for endpoint in (
            self._command_endpoint,
            self._telemetry_endpoint,
            self._stream_endpoint,
        ):
            if endpoint is not None:
                endpoint.close()
