import contextlib
import socket
import threading
import time
from typing import Dict, List, Optional, Tuple

import pytest

from tello_link.config import DroneConfig, NetworkConfig, TimeoutConfig, TelemetryConfig


class FakeDrone:
    """Threaded UDP responder standing in for the drone's command port.

    ``responses`` maps a command to its answer; ``None`` means stay silent.
    Unknown commands are answered with ``"ok"``. ``delays`` holds seconds to
    wait before answering a given command.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Optional[str]]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.delays = dict(delays or {})
        self.received: List[str] = []
        self.peer: Optional[Tuple[str, int]] = None
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.05)
        self.address: Tuple[str, int] = self._sock.getsockname()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="fake-drone", daemon=True)

    def start(self) -> "FakeDrone":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2.0)
        with contextlib.suppress(OSError):
            self._sock.close()

    def wait_for_command(self, command: str, timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if command in self.received:
                return True
            time.sleep(0.01)
        return False

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self._sock.recvfrom(4096)
            except TimeoutError:
                continue
            except OSError:
                break
            command = data.decode("utf-8")
            self.received.append(command)
            self.peer = addr
            response = self.responses.get(command, "ok")
            if response is None:
                continue
            delay = self.delays.get(command, 0.0)
            if delay:
                threading.Timer(delay, self._answer, args=(response, addr)).start()
            else:
                self._answer(response, addr)

    def _answer(self, response: str, addr: Tuple[str, int]) -> None:
        with contextlib.suppress(OSError):
            self._sock.sendto(response.encode("utf-8"), addr)


def send_datagram(payload: bytes, address: Tuple[str, int]) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(payload, address)


@pytest.fixture
def fake_drone():
    """Factory fixture returning started FakeDrone instances, stopped on teardown."""
    drones: List[FakeDrone] = []

    def _create(**kwargs) -> FakeDrone:
        drone = FakeDrone(**kwargs).start()
        drones.append(drone)
        return drone

    yield _create

    for drone in drones:
        drone.stop()


@pytest.fixture
def local_config():
    """Build a DroneConfig bound to ephemeral localhost ports."""

    def _create(
        remote: Tuple[str, int] = ("127.0.0.1", 9),
        *,
        command_seconds: float = 1.0,
        motion_seconds: float = 2.0,
        telemetry_receive_seconds: Optional[float] = None,
        stream_receive_seconds: Optional[float] = None,
        poll_interval_seconds: float = 0.0,
    ) -> DroneConfig:
        return DroneConfig(
            network=NetworkConfig(
                local_host="127.0.0.1",
                command_port=0,
                telemetry_port=0,
                stream_port=0,
                remote_host=remote[0],
                remote_port=remote[1],
            ),
            timeouts=TimeoutConfig(
                command_seconds=command_seconds,
                motion_seconds=motion_seconds,
                telemetry_receive_seconds=telemetry_receive_seconds,
                stream_receive_seconds=stream_receive_seconds,
            ),
            telemetry=TelemetryConfig(poll_interval_seconds=poll_interval_seconds),
        )

    return _create


@pytest.fixture
def datagram_sender():
    return send_datagram


@pytest.fixture
def free_tcp_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
