"""Public command surface shared by the async session and the blocking drone."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command_names import DroneCommandNames as Names
from .core import encoder

ResultT = TypeVar("ResultT")


class DroneCommands(ABC, Generic[ResultT]):
    """Named drone commands built on a single ``_send`` primitive.

    Arguments are clamped into the ranges the drone accepts before encoding.
    Each method returns whatever ``_send`` returns: the response text for the
    blocking :class:`~tello_link.drone.Drone`, an awaitable of it for
    :class:`~tello_link.session.DroneSession`.
    """

    @abstractmethod
    def _send(self, command: str, *, motion: bool = False) -> ResultT:
        """Deliver an encoded command; ``motion`` selects the motion timeout."""

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def enter_sdk_mode(self) -> ResultT:
        return self._send(Names.SDK_MODE)

    def takeoff(self) -> ResultT:
        return self._send(Names.TAKEOFF)

    def land(self) -> ResultT:
        return self._send(Names.LAND)

    def emergency(self) -> ResultT:
        """Stop the motors. Never waits for an answer; always yields ``"ok"``."""
        return self._send(Names.EMERGENCY)

    def stream_on(self) -> ResultT:
        return self._send(Names.STREAM_ON)

    def stream_off(self) -> ResultT:
        return self._send(Names.STREAM_OFF)

    # -------------------------------------------------------------------------
    # Motion
    # -------------------------------------------------------------------------

    def _move(self, direction: str, distance: int) -> ResultT:
        return self._send(encoder.move(direction, distance), motion=True)

    def move_forward(self, distance: int) -> ResultT:
        return self._move(Names.FORWARD, distance)

    def move_back(self, distance: int) -> ResultT:
        return self._move(Names.BACK, distance)

    def move_up(self, distance: int) -> ResultT:
        return self._move(Names.UP, distance)

    def move_down(self, distance: int) -> ResultT:
        return self._move(Names.DOWN, distance)

    def move_left(self, distance: int) -> ResultT:
        return self._move(Names.LEFT, distance)

    def move_right(self, distance: int) -> ResultT:
        return self._move(Names.RIGHT, distance)

    def go(self, x: int, y: int, z: int, speed: int) -> ResultT:
        return self._send(encoder.go(x, y, z, speed), motion=True)

    def curve(
        self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, speed: int
    ) -> ResultT:
        return self._send(encoder.curve(x1, y1, z1, x2, y2, z2, speed), motion=True)

    def rotate_clockwise(self, degree: int) -> ResultT:
        return self._send(encoder.turn(Names.CLOCKWISE, degree), motion=True)

    def rotate_counter_clockwise(self, degree: int) -> ResultT:
        return self._send(encoder.turn(Names.COUNTER_CLOCKWISE, degree), motion=True)

    def flip_left(self) -> ResultT:
        return self._send(encoder.flip("l"), motion=True)

    def flip_right(self) -> ResultT:
        return self._send(encoder.flip("r"), motion=True)

    def flip_forward(self) -> ResultT:
        return self._send(encoder.flip("f"), motion=True)

    def flip_back(self) -> ResultT:
        return self._send(encoder.flip("b"), motion=True)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def set_speed(self, speed: int) -> ResultT:
        return self._send(encoder.set_speed(speed))

    def set_rc(self, a: int, b: int, c: int, d: int) -> ResultT:
        """Send remote-control channel values (left/right, forward/back, up/down, yaw)."""
        return self._send(encoder.set_rc(a, b, c, d))

    def set_wifi_credentials(self, ssid: str, password: str) -> ResultT:
        return self._send(encoder.set_wifi(ssid, password))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_speed(self) -> ResultT:
        return self._send(encoder.query(Names.READ_SPEED))

    def get_battery(self) -> ResultT:
        return self._send(encoder.query(Names.READ_BATTERY))

    def get_flight_time(self) -> ResultT:
        return self._send(encoder.query(Names.READ_TIME))

    def get_height(self) -> ResultT:
        return self._send(encoder.query(Names.READ_HEIGHT))

    def get_temperature(self) -> ResultT:
        return self._send(encoder.query(Names.READ_TEMPERATURE))

    def get_attitude(self) -> ResultT:
        return self._send(encoder.query(Names.READ_ATTITUDE))

    def get_barometer(self) -> ResultT:
        return self._send(encoder.query(Names.READ_BAROMETER))

    def get_acceleration(self) -> ResultT:
        return self._send(encoder.query(Names.READ_ACCELERATION))

    def get_tof_distance(self) -> ResultT:
        return self._send(encoder.query(Names.READ_TOF))

    def get_wifi_snr(self) -> ResultT:
        return self._send(encoder.query(Names.READ_WIFI))
