"""Background listener draining the video stream socket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from .core.errors import DroneTimeoutError, SocketClosedError
from .core.protocols import DatagramSource, PacketHandler, StatusSink

LOGGER = logging.getLogger(__name__)

COMPONENT_NAME = "stream"


class StreamListener:
    """Forwards raw stream payloads to an optional handler.

    Payloads are delivered as received; frame reassembly and decoding belong to
    the handler. Without a handler payloads are discarded.
    """

    def __init__(
        self,
        source: DatagramSource,
        *,
        handler: Optional[PacketHandler] = None,
        receive_timeout: Optional[float] = None,
        status: Optional[StatusSink] = None,
    ) -> None:
        self._source = source
        self._handler = handler
        self._receive_timeout = receive_timeout
        self._status = status
        self._task: Optional[asyncio.Task[None]] = None
        self.packets = 0
        self.bytes_received = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._listen_loop(), name="tello-stream")

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
                    "Stream listener stopped: no packet within %ss",
                    self._receive_timeout,
                )
                await self._report(False, "receive timeout")
                return
            except SocketClosedError:
                LOGGER.debug("Stream socket closed; listener exiting")
                await self._report(False, "socket closed")
                return

            self.packets += 1
            self.bytes_received += len(payload)
            await self._forward(payload)

    async def _forward(self, payload: bytes) -> None:
        if self._handler is None:
            return
        try:
            result = self._handler(payload)
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.warning("Stream packet handler failed", exc_info=True)

    async def _report(self, healthy: bool, detail: str) -> None:
        if self._status is None:
            return
        try:
            await self._status.update(COMPONENT_NAME, healthy, detail)
        except Exception:
            LOGGER.warning("Stream status update failed", exc_info=True)
