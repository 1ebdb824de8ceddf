"""Background listener installing drone state datagrams as snapshots.

Design principles:
- One owned task per session, started and cancelled by the session
- Malformed datagrams are skipped, never fatal
- A receive timeout ends the loop; the last snapshot stays readable
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from .. import constants
from ..core.errors import (
    DroneTimeoutError,
    MalformedTelemetryError,
    SocketClosedError,
)
from ..core.protocols import DatagramSource, StatusSink
from .parser import parse_telemetry
from .snapshot import TelemetryStore

LOGGER = logging.getLogger(__name__)

COMPONENT_NAME = "telemetry"


class TelemetryListener:
    """Polls the telemetry socket and publishes parsed snapshots to a store."""

    def __init__(
        self,
        source: DatagramSource,
        store: TelemetryStore,
        *,
        poll_interval: float = constants.DEFAULT_TELEMETRY_POLL_SECONDS,
        receive_timeout: Optional[float] = None,
        status: Optional[StatusSink] = None,
    ) -> None:
        """Initialize the listener.

        Args:
            source: Endpoint bound on the telemetry port
            store: Store receiving each parsed snapshot
            poll_interval: Seconds to wait after each received datagram
            receive_timeout: Seconds without a datagram before the loop ends (None waits forever)
            status: Optional sink notified when the listener starts or stops
        """
        self._source = source
        self._store = store
        self._poll_interval = max(poll_interval, 0.0)
        self._receive_timeout = receive_timeout
        self._status = status
        self._task: Optional[asyncio.Task[None]] = None
        self.malformed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._listen_loop(), name="tello-telemetry")

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def wait_closed(self) -> None:
        """Wait for the loop to end on its own (timeout or closed socket)."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.shield(self._task)

    async def _listen_loop(self) -> None:
        await self._report(True, "listening")
        while True:
            try:
                payload = await self._source.receive(timeout=self._receive_timeout)
            except DroneTimeoutError:
                LOGGER.error(
                    "Telemetry listener stopped: no state datagram within %ss",
                    self._receive_timeout,
                )
                await self._report(False, "receive timeout")
                return
            except SocketClosedError:
                LOGGER.debug("Telemetry socket closed; listener exiting")
                await self._report(False, "socket closed")
                return

            self._install(payload.decode("utf-8", errors="replace"))

            if self._poll_interval:
                await asyncio.sleep(self._poll_interval)

    def _install(self, text: str) -> None:
        if not text.strip():
            return
        try:
            snapshot = parse_telemetry(text)
        except MalformedTelemetryError as exc:
            self.malformed += 1
            LOGGER.warning("Skipping malformed telemetry: %s", exc)
            return
        self._store.update(snapshot)

    async def _report(self, healthy: bool, detail: str) -> None:
        if self._status is None:
            return
        try:
            await self._status.update(COMPONENT_NAME, healthy, detail)
        except Exception:
            LOGGER.warning("Telemetry status update failed", exc_info=True)
