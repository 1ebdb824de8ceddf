"""Link health for an open drone session.

The report combines three views:
- component states pushed by the listeners and the command channel
- telemetry freshness read from the snapshot store
- stream throughput and loss read from the stream listener and its inbox
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from aiohttp import web

from .telemetry import TelemetryStore

LOGGER = logging.getLogger(__name__)


class StreamStats(Protocol):
    packets: int
    bytes_received: int


class DropCounter(Protocol):
    dropped: int


@dataclass(slots=True)
class LinkComponent:
    healthy: bool
    detail: Optional[str] = None
    since: float = field(default_factory=time.monotonic)


class HealthReporter:
    """Collects the state of one drone link.

    ``telemetry_stale_after`` marks the link degraded once the newest
    telemetry snapshot is older than that many seconds.
    """

    def __init__(self, *, telemetry_stale_after: Optional[float] = None) -> None:
        self._components: Dict[str, LinkComponent] = {}
        self._session_state: Optional[str] = None
        self._telemetry_stale_after = telemetry_stale_after
        self._telemetry: Optional[TelemetryStore] = None
        self._stream: Optional[StreamStats] = None
        self._stream_inbox: Optional[DropCounter] = None
        self._lock = asyncio.Lock()

    def watch_telemetry(self, store: TelemetryStore) -> None:
        self._telemetry = store

    def watch_stream(self, stats: StreamStats, inbox: Optional[DropCounter] = None) -> None:
        self._stream = stats
        self._stream_inbox = inbox

    async def update(
        self, name: str, healthy: bool, detail: Optional[str] = None
    ) -> None:
        async with self._lock:
            current = self._components.get(name)
            if current is not None and current.healthy == healthy and current.detail == detail:
                return
            self._components[name] = LinkComponent(healthy=healthy, detail=detail)
        if not healthy:
            LOGGER.info("Link component %s degraded: %s", name, detail)

    async def set_session_state(self, state: str) -> None:
        async with self._lock:
            self._session_state = state

    async def snapshot(self) -> Dict[str, Any]:
        now = time.monotonic()
        async with self._lock:
            components = {
                name: {
                    "healthy": component.healthy,
                    "detail": component.detail,
                    "forSeconds": round(now - component.since, 3),
                }
                for name, component in self._components.items()
            }
            session_state = self._session_state

        telemetry = self._telemetry_view(now)
        degraded = (
            any(not item["healthy"] for item in components.values())
            or telemetry.get("stale", False)
            or session_state not in (None, "open")
        )

        return {
            "status": "degraded" if degraded else "ok",
            "session": session_state,
            "components": components,
            "telemetry": telemetry,
            "stream": self._stream_view(),
        }

    def _telemetry_view(self, now: float) -> Dict[str, Any]:
        if self._telemetry is None:
            return {}
        latest = self._telemetry.latest()
        if latest is None:
            return {"updates": 0, "ageSeconds": None, "stale": False}
        age = now - latest.received_at
        stale = self._telemetry_stale_after is not None and age > self._telemetry_stale_after
        return {
            "updates": self._telemetry.updates,
            "ageSeconds": round(age, 3),
            "stale": stale,
            "battery": latest.get_int("bat"),
        }

    def _stream_view(self) -> Dict[str, Any]:
        if self._stream is None:
            return {}
        return {
            "packets": self._stream.packets,
            "bytes": self._stream.bytes_received,
            "dropped": self._stream_inbox.dropped if self._stream_inbox else 0,
        }


class HealthServer:
    """Serves the link report as JSON on ``GET /healthz``.

    Answers 200 while the link is ok and 503 once it is degraded. Binding port
    0 picks a free port; ``port`` reports the one in use after ``start``.
    """

    def __init__(self, reporter: HealthReporter, host: str, port: int) -> None:
        self._reporter = reporter
        self._host = host
        self._requested_port = port
        self._runner: Optional[web.AppRunner] = None

    @property
    def port(self) -> Optional[int]:
        if self._runner is None or not self._runner.addresses:
            return None
        return self._runner.addresses[0][1]

    async def start(self) -> None:
        app = web.Application()
        app.router.add_get("/healthz", self._report)

        runner = web.AppRunner(app)
        await runner.setup()
        try:
            await web.TCPSite(runner, self._host, self._requested_port).start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        LOGGER.info("Link health on http://%s:%s/healthz", self._host, self.port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        await runner.cleanup()

    async def _report(self, request: web.Request) -> web.Response:
        report = await self._reporter.snapshot()
        return web.json_response(report, status=200 if report["status"] == "ok" else 503)
