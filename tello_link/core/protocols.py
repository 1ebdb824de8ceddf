"""Protocol definitions for session collaborators and callbacks."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol


PacketHandler = Callable[[bytes], Awaitable[None] | None]


class DatagramSource(Protocol):
    """Minimal contract for an endpoint the listeners can drain."""

    name: str

    async def receive(self, timeout: Optional[float] = None) -> bytes:
        """Return the next datagram payload.

        Raises:
            DroneTimeoutError: If nothing arrives within ``timeout`` seconds.
            SocketClosedError: If the endpoint was closed.
        """
        ...


class StatusSink(Protocol):
    """Receives component health transitions."""

    async def update(
        self, name: str, healthy: bool, detail: Optional[str] = None
    ) -> None:
        ...
