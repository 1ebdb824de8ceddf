"""Centralized verb constants for the Tello text command protocol.

Each command datagram starts with one of these verbs:
    <verb>[ <arg> <arg> ...]

Verb conventions:
- Control verbs take no arguments and answer "ok" or "error".
- Motion verbs take clamped integer arguments and answer once the move ends.
- Read verbs end with "?" and answer with a value terminated by "\\r\\n".
"""

from __future__ import annotations


class DroneCommandNames:
    """Verb constants understood by the drone."""

    # -------------------------------------------------------------------------
    # Control Commands
    # -------------------------------------------------------------------------

    SDK_MODE = "command"
    """Enter SDK mode; the drone ignores other commands until it sees this."""

    TAKEOFF = "takeoff"
    LAND = "land"

    EMERGENCY = "emergency"
    """Stop all motors immediately. The drone never answers this verb."""

    STREAM_ON = "streamon"
    STREAM_OFF = "streamoff"

    # -------------------------------------------------------------------------
    # Motion Commands
    # -------------------------------------------------------------------------

    FORWARD = "forward"
    BACK = "back"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    GO = "go"
    """Fly to x y z at speed, relative to the current position."""

    CURVE = "curve"
    """Fly a curve through two relative points at speed."""

    CLOCKWISE = "cw"
    COUNTER_CLOCKWISE = "ccw"

    FLIP = "flip"

    # -------------------------------------------------------------------------
    # Set Commands
    # -------------------------------------------------------------------------

    SPEED = "speed"
    RC = "rc"
    WIFI = "wifi"

    # -------------------------------------------------------------------------
    # Read Commands (sent with a trailing "?")
    # -------------------------------------------------------------------------

    READ_SPEED = "speed"
    READ_BATTERY = "battery"
    READ_TIME = "time"
    READ_HEIGHT = "height"
    READ_TEMPERATURE = "temp"
    READ_ATTITUDE = "attitude"
    READ_BAROMETER = "baro"
    READ_ACCELERATION = "acceleration"
    READ_TOF = "tof"
    READ_WIFI = "wifi"

    QUERY_SUFFIX = "?"

    MOVE_DIRECTIONS = frozenset({FORWARD, BACK, UP, DOWN, LEFT, RIGHT})
    TURN_DIRECTIONS = frozenset({CLOCKWISE, COUNTER_CLOCKWISE})
    FLIP_DIRECTIONS = frozenset({"l", "r", "f", "b"})

    MOTION_VERBS = MOVE_DIRECTIONS | TURN_DIRECTIONS | frozenset({GO, CURVE, FLIP})
