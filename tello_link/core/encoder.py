"""Build wire-format command strings from validated parameters."""

from __future__ import annotations

from typing import Union

from ..command_names import DroneCommandNames
from .bounds import IntRange, clamp, clamp_all, render

MOVE_DISTANCE = IntRange(20, 500)
GO_COORDINATE = IntRange(20, 500)
GO_SPEED = IntRange(10, 100)
CURVE_COORDINATE = IntRange(20, 500)
CURVE_SPEED = IntRange(10, 60)
TURN_DEGREES = IntRange(1, 3600)
SET_SPEED = IntRange(10, 100)
RC_AXIS = IntRange(-100, 100)

Argument = Union[int, str]


def encode(verb: str, *args: Argument) -> str:
    """Return ``"<verb> <arg1> <arg2> ..."`` separated by single spaces."""
    if not args:
        return verb
    return " ".join([verb, *(str(arg) for arg in args)])


def verb_of(command: str) -> str:
    return command.split(" ", 1)[0]


def is_query(command: str) -> bool:
    return verb_of(command).endswith(DroneCommandNames.QUERY_SUFFIX)


def is_motion(command: str) -> bool:
    return verb_of(command) in DroneCommandNames.MOTION_VERBS


def move(direction: str, distance: int) -> str:
    if direction not in DroneCommandNames.MOVE_DIRECTIONS:
        raise ValueError(f"Unknown move direction: {direction!r}")
    return encode(direction, clamp(distance, MOVE_DISTANCE))


def go(x: int, y: int, z: int, speed: int) -> str:
    return encode(
        DroneCommandNames.GO,
        render(clamp_all((x, y, z), GO_COORDINATE)),
        clamp(speed, GO_SPEED),
    )


def curve(x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, speed: int) -> str:
    return encode(
        DroneCommandNames.CURVE,
        render(clamp_all((x1, y1, z1, x2, y2, z2), CURVE_COORDINATE)),
        clamp(speed, CURVE_SPEED),
    )


def turn(direction: str, degree: int) -> str:
    if direction not in DroneCommandNames.TURN_DIRECTIONS:
        raise ValueError(f"Unknown turn direction: {direction!r}")
    return encode(direction, clamp(degree, TURN_DEGREES))


def flip(direction: str) -> str:
    if direction not in DroneCommandNames.FLIP_DIRECTIONS:
        raise ValueError(f"Unknown flip direction: {direction!r}")
    return encode(DroneCommandNames.FLIP, direction)


def set_speed(speed: int) -> str:
    return encode(DroneCommandNames.SPEED, clamp(speed, SET_SPEED))


def set_rc(a: int, b: int, c: int, d: int) -> str:
    return encode(DroneCommandNames.RC, render(clamp_all((a, b, c, d), RC_AXIS)))


def set_wifi(ssid: str, password: str) -> str:
    return encode(DroneCommandNames.WIFI, ssid, password)


def query(name: str) -> str:
    return f"{name}{DroneCommandNames.QUERY_SUFFIX}"
