"""Request/response exchange over the drone command socket."""

from __future__ import annotations

import logging
from typing import Optional

from . import constants
from .adapters.udp import Address, DatagramEndpoint
from .command_names import DroneCommandNames
from .core.encoder import is_query, verb_of
from .core.errors import DroneTimeoutError, SocketClosedError

LOGGER = logging.getLogger(__name__)

RESPONSE_TERMINATOR = "\r\n"


class CommandChannel:
    """Send one command datagram and wait for exactly one answer.

    The drone keeps a single request outstanding, so callers must not overlap
    ``execute`` calls: a concurrent caller may receive the answer meant for
    another command. No lock is taken here.
    """

    def __init__(
        self,
        endpoint: DatagramEndpoint,
        remote_address: Address,
        *,
        timeout: float = constants.DEFAULT_COMMAND_TIMEOUT_SECONDS,
    ) -> None:
        self._endpoint = endpoint
        self._remote_address = remote_address
        self._timeout = timeout
        self._closed = False

    @property
    def remote_address(self) -> Address:
        return self._remote_address

    @property
    def closed(self) -> bool:
        return self._closed or self._endpoint.closed

    async def execute(self, command: str, *, timeout: Optional[float] = None) -> str:
        """Send ``command`` and return the decoded response text.

        Args:
            command: Encoded command string, e.g. ``"forward 50"``.
            timeout: Seconds to wait for the answer; defaults to the channel timeout.

        Raises:
            DroneTimeoutError: If no answer arrives in time. The outcome is unknown.
            SocketClosedError: If the channel was closed.
        """
        if self.closed:
            raise SocketClosedError(f"Cannot send {command!r}: command socket is closed")

        stale = self._endpoint.drain()
        if stale:
            LOGGER.debug("Discarded %d stale response(s) before %r", stale, command)

        LOGGER.debug("-> %s", command)
        self._endpoint.send(command.encode("utf-8"), self._remote_address)

        if verb_of(command) == DroneCommandNames.EMERGENCY:
            # The drone drops the control session without answering.
            return constants.EMERGENCY_RESPONSE

        wait_for = self._timeout if timeout is None else timeout
        try:
            payload = await self._endpoint.receive(timeout=wait_for)
        except DroneTimeoutError as exc:
            LOGGER.warning("No response to %r within %.1fs", command, wait_for)
            raise DroneTimeoutError(
                f"No response to {command!r} within {wait_for}s",
                command=command,
                timeout=wait_for,
            ) from exc

        response = payload.decode("utf-8", errors="replace")
        if is_query(command):
            response = response.rstrip(RESPONSE_TERMINATOR)
        LOGGER.debug("<- %s: %s", command, response)
        return response

    def close(self) -> None:
        self._closed = True
