"""Immutable telemetry snapshot and the thread-safe store that holds it."""

from __future__ import annotations

import time
from threading import Lock
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from ..core.errors import TelemetryNotAvailableError


class TelemetrySnapshot(Mapping[str, str]):
    """Read-only mapping of state field name to its raw string value."""

    __slots__ = ("_fields", "received_at")

    def __init__(
        self, fields: Mapping[str, str], *, received_at: Optional[float] = None
    ) -> None:
        self._fields = MappingProxyType(dict(fields))
        self.received_at = time.monotonic() if received_at is None else received_at

    def __getitem__(self, key: str) -> str:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"TelemetrySnapshot({dict(self._fields)!r})"

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._fields.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        value = self._fields.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def as_dict(self) -> dict[str, str]:
        return dict(self._fields)


class TelemetryStore:
    """Holds the latest snapshot; writers swap the whole reference."""

    def __init__(self) -> None:
        self._snapshot: Optional[TelemetrySnapshot] = None
        self._updates = 0
        self._lock = Lock()

    @property
    def snapshot(self) -> TelemetrySnapshot:
        """Latest snapshot.

        Raises:
            TelemetryNotAvailableError: If no state datagram was parsed yet.
        """
        with self._lock:
            snapshot = self._snapshot
        if snapshot is None:
            raise TelemetryNotAvailableError("No telemetry received yet")
        return snapshot

    @property
    def updates(self) -> int:
        with self._lock:
            return self._updates

    def latest(self) -> Optional[TelemetrySnapshot]:
        with self._lock:
            return self._snapshot

    def update(self, snapshot: TelemetrySnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot
            self._updates += 1
