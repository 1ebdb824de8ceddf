"""Tests for the asyncio drone session."""

import asyncio
import time
from typing import List

import pytest

from tello_link.core.errors import (
    DroneTimeoutError,
    SocketClosedError,
    TelemetryNotAvailableError,
)
from tello_link.session import DroneSession, SessionState


async def wait_until(predicate, timeout: float = 1.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_open_binds_sockets_and_starts_listeners(fake_drone, local_config):
    drone = fake_drone()
    session = DroneSession(local_config(drone.address))

    async with session:
        assert session.state == SessionState.OPEN
        addresses = session.local_addresses
        assert all(address is not None for address in addresses.values())
        assert len({address[1] for address in addresses.values()}) == 3
        assert session.telemetry_listener.running
        assert session.stream_listener.running

    assert session.state == SessionState.CLOSED
    assert not session.telemetry_listener.running
    assert not session.stream_listener.running


@pytest.mark.asyncio
async def test_command_surface_encodes_clamped_arguments(fake_drone, local_config):
    drone = fake_drone()

    async with DroneSession(local_config(drone.address)) as session:
        await session.enter_sdk_mode()
        await session.move_forward(600)
        await session.rotate_clockwise(5000)
        await session.set_rc(-150, 0, 40, 120)
        await session.go(10, 250, 900, 200)
        await session.curve(20, 20, 20, 60, 40, 20, 100)
        await session.flip_back()
        await session.set_speed(5)
        await session.set_wifi_credentials("net", "pw")
        await session.stream_on()

    assert drone.received == [
        "command",
        "forward 500",
        "cw 3600",
        "rc -100 0 40 100",
        "go 20 250 500 100",
        "curve 20 20 20 60 40 20 60",
        "flip b",
        "speed 10",
        "wifi net pw",
        "streamon",
    ]


@pytest.mark.asyncio
async def test_query_commands_return_trimmed_values(fake_drone, local_config):
    drone = fake_drone(
        responses={
            "battery?": "83\r\n",
            "height?": "10dm\r\n",
            "tof?": "100mm\r\n",
            "wifi?": "90\r\n",
        }
    )

    async with DroneSession(local_config(drone.address)) as session:
        assert await session.get_battery() == "83"
        assert await session.get_height() == "10dm"
        assert await session.get_tof_distance() == "100mm"
        assert await session.get_wifi_snr() == "90"


@pytest.mark.asyncio
async def test_motion_commands_use_motion_timeout(fake_drone, local_config):
    drone = fake_drone(
        responses={"forward 20": "ok", "takeoff": "ok"},
        delays={"forward 20": 0.3, "takeoff": 0.3},
    )
    config = local_config(drone.address, command_seconds=0.1, motion_seconds=1.0)

    async with DroneSession(config) as session:
        assert await session.move_forward(20) == "ok"
        with pytest.raises(DroneTimeoutError):
            await session.takeoff()


@pytest.mark.asyncio
async def test_emergency_short_circuits(fake_drone, local_config):
    drone = fake_drone(responses={"emergency": None})

    async with DroneSession(local_config(drone.address, command_seconds=5.0)) as session:
        started = time.monotonic()
        assert await session.emergency() == "ok"
        assert time.monotonic() - started < 1.0


@pytest.mark.asyncio
async def test_telemetry_is_published_from_state_socket(
    fake_drone, local_config, datagram_sender
):
    drone = fake_drone()

    async with DroneSession(local_config(drone.address)) as session:
        with pytest.raises(TelemetryNotAvailableError):
            _ = session.telemetry

        datagram_sender(
            b"pitch:0;roll:1;yaw:-3;bat:83;\r\n", session.local_addresses["telemetry"]
        )
        await wait_until(lambda: session.telemetry_store.latest() is not None)

        assert session.telemetry == {"pitch": "0", "roll": "1", "yaw": "-3", "bat": "83"}


@pytest.mark.asyncio
async def test_stream_packets_reach_handler(fake_drone, local_config, datagram_sender):
    drone = fake_drone()
    packets: List[bytes] = []

    async with DroneSession(
        local_config(drone.address), stream_handler=packets.append
    ) as session:
        datagram_sender(b"\x00\x00\x00\x01", session.local_addresses["stream"])
        await wait_until(lambda: packets == [b"\x00\x00\x00\x01"])


@pytest.mark.asyncio
async def test_listener_timeout_does_not_affect_commands(fake_drone, local_config):
    drone = fake_drone()
    config = local_config(
        drone.address, telemetry_receive_seconds=0.05, stream_receive_seconds=0.05
    )

    async with DroneSession(config) as session:
        await wait_until(
            lambda: not session.telemetry_listener.running
            and not session.stream_listener.running
        )
        assert await session.takeoff() == "ok"

        health = await session.health.snapshot()
        components = health["components"]
        assert components["telemetry"]["healthy"] is False
        assert components["stream"]["healthy"] is False
        assert components["commands"]["healthy"] is True


@pytest.mark.asyncio
async def test_command_timeout_marks_commands_unhealthy(fake_drone, local_config):
    drone = fake_drone(responses={"takeoff": None})

    async with DroneSession(local_config(drone.address, command_seconds=0.1)) as session:
        with pytest.raises(DroneTimeoutError):
            await session.takeoff()

        health = await session.health.snapshot()
        assert health["status"] == "degraded"


@pytest.mark.asyncio
async def test_commands_after_close_raise_socket_closed(fake_drone, local_config):
    drone = fake_drone()
    session = DroneSession(local_config(drone.address))
    await session.open()
    await session.aclose()
    await session.aclose()

    with pytest.raises(SocketClosedError):
        await session.takeoff()
    with pytest.raises(SocketClosedError):
        await session.emergency()
    with pytest.raises(SocketClosedError):
        await session.open()
    assert drone.received == []


@pytest.mark.asyncio
async def test_commands_before_open_raise_socket_closed(local_config):
    session = DroneSession(local_config())

    with pytest.raises(SocketClosedError):
        await session.land()


@pytest.mark.asyncio
async def test_open_failure_releases_bound_sockets(fake_drone, local_config):
    drone = fake_drone()

    async with DroneSession(local_config(drone.address)) as first:
        taken_port = first.local_addresses["stream"][1]
        config = local_config(drone.address)
        config.network.stream_port = taken_port

        second = DroneSession(config)
        with pytest.raises(OSError):
            await second.open()

        assert second.state == SessionState.CLOSED
        assert second.sockets_closed == {
            "command": True,
            "telemetry": True,
            "stream": True,
        }
        assert first.sockets_closed == {
            "command": False,
            "telemetry": False,
            "stream": False,
        }


@pytest.mark.asyncio
async def test_health_server_runs_when_enabled(fake_drone, local_config, free_tcp_port):
    import aiohttp

    drone = fake_drone()
    config = local_config(drone.address)
    config.health.enabled = True
    config.health.port = free_tcp_port

    async with DroneSession(config) as session:
        assert session.health_port == free_tcp_port
        async with aiohttp.ClientSession() as client:
            async with client.get(f"http://127.0.0.1:{free_tcp_port}/healthz") as response:
                payload = await response.json()

    assert response.status == 200
    assert payload["session"] == "open"
    assert payload["telemetry"] == {"updates": 0, "ageSeconds": None, "stale": False}
    assert session.health_port is None


@pytest.mark.asyncio
async def test_health_report_follows_telemetry_and_stream(
    fake_drone, local_config, datagram_sender
):
    drone = fake_drone()

    async with DroneSession(local_config(drone.address)) as session:
        datagram_sender(b"bat:64;h:0;\r\n", session.local_addresses["telemetry"])
        datagram_sender(b"\x00\x00\x00\x01\x67", session.local_addresses["stream"])
        await wait_until(
            lambda: session.telemetry_store.updates == 1
            and session.stream_listener.packets == 1
        )

        report = await session.health.snapshot()

    assert report["telemetry"]["updates"] == 1
    assert report["telemetry"]["battery"] == 64
    assert report["telemetry"]["ageSeconds"] is not None
    assert report["stream"] == {"packets": 1, "bytes": 5, "dropped": 0}


@pytest.mark.asyncio
async def test_stale_telemetry_threshold_comes_from_config(
    fake_drone, local_config, datagram_sender
):
    drone = fake_drone()
    config = local_config(drone.address)
    config.health.telemetry_stale_seconds = 0.05

    async with DroneSession(config) as session:
        datagram_sender(b"bat:64;\r\n", session.local_addresses["telemetry"])
        await wait_until(lambda: session.telemetry_store.updates == 1)
        await asyncio.sleep(0.1)

        report = await session.health.snapshot()

    assert report["telemetry"]["stale"] is True
    assert report["status"] == "degraded"


@pytest.mark.asyncio
async def test_open_applies_logging_section_when_asked(fake_drone, local_config):
    import logging

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    drone = fake_drone()
    config = local_config(drone.address)
    config.logging.level = "DEBUG"

    try:
        async with DroneSession(config, configure_logs=True):
            assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
        logging.getLogger("tello_link.adapters").setLevel(logging.NOTSET)
        logging.getLogger("tello_link.channel").setLevel(logging.NOTSET)
        logging.getLogger("aiohttp.access").setLevel(logging.NOTSET)
        logging.getLogger("asyncio").setLevel(logging.NOTSET)


@pytest.mark.asyncio
async def test_open_leaves_logging_alone_by_default(fake_drone, local_config):
    import logging

    root = logging.getLogger()
    handlers = list(root.handlers)
    drone = fake_drone()
    config = local_config(drone.address)
    config.logging.level = "DEBUG"

    async with DroneSession(config):
        assert root.handlers == handlers
