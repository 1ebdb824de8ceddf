"""UDP adapter wrapping asyncio datagram endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple, cast

from ..core.errors import DroneTimeoutError, SocketClosedError

LOGGER = logging.getLogger(__name__)

Address = Tuple[str, int]


class DatagramEndpoint(asyncio.DatagramProtocol):
    """Bound UDP socket exposing an awaitable inbox of received payloads.

    When ``max_pending`` is set the inbox keeps only the newest payloads and
    counts the discarded ones in ``dropped``.
    """

    def __init__(self, name: str, *, max_pending: int = 0) -> None:
        self.name = name
        self.dropped = 0
        self._max_pending = max(0, max_pending)
        self._queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_address(self) -> Optional[Address]:
        if self._transport is None:
            return None
        sockname = self._transport.get_extra_info("sockname")
        return (sockname[0], sockname[1]) if sockname else None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = cast(asyncio.DatagramTransport, transport)

    def datagram_received(self, data: bytes, addr: Address) -> None:
        if self._closed:
            return
        if self._max_pending and self._queue.qsize() >= self._max_pending:
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(data)

    def error_received(self, exc: Exception) -> None:
        LOGGER.warning("%s socket error: %s", self.name, exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None:
            LOGGER.warning("%s socket lost: %s", self.name, exc)
        self._mark_closed()

    async def receive(self, timeout: Optional[float] = None) -> bytes:
        """Wait for the next payload.

        Raises:
            DroneTimeoutError: If nothing arrives within ``timeout`` seconds.
            SocketClosedError: If the endpoint is closed before a payload arrives.
        """
        if self._closed and self._queue.empty():
            raise SocketClosedError(f"{self.name} socket is closed")

        try:
            payload = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise DroneTimeoutError(
                f"No datagram on {self.name} socket within {timeout}s",
                timeout=timeout,
            ) from exc

        if payload is None:
            # Leave the marker for any other waiter.
            self._queue.put_nowait(None)
            raise SocketClosedError(f"{self.name} socket is closed")
        return payload

    def drain(self) -> int:
        """Discard every pending payload and return how many were dropped."""
        discarded = 0
        while not self._queue.empty():
            if self._queue.get_nowait() is None:
                self._queue.put_nowait(None)
                break
            discarded += 1
        return discarded

    def send(self, payload: bytes, address: Address) -> None:
        if self._closed or self._transport is None:
            raise SocketClosedError(f"{self.name} socket is closed")
        self._transport.sendto(payload, address)

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
        self._mark_closed()

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)


async def open_endpoint(
    name: str, local_address: Address, *, max_pending: int = 0
) -> DatagramEndpoint:
    """Bind a UDP socket on ``local_address`` and return its endpoint."""

    loop = asyncio.get_running_loop()
    _, protocol = await loop.create_datagram_endpoint(
        lambda: DatagramEndpoint(name, max_pending=max_pending),
        local_addr=local_address,
    )
    endpoint = cast(DatagramEndpoint, protocol)
    LOGGER.debug("Bound %s socket on %s", name, endpoint.local_address)
    return endpoint
