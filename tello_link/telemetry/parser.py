"""Parser for the drone state datagram.

The drone reports its state on the telemetry port roughly ten times per second
as ``;``-separated ``name:value`` fields, for example::

    pitch:0;roll:1;yaw:-3;vgx:0;vgy:0;vgz:0;templ:60;temph:62;tof:10;h:0;bat:83;baro:187.45;time:0;agx:-2.00;agy:0.00;agz:-999.00;\r\n
"""

from __future__ import annotations

from typing import Dict, Optional

from ..core.errors import MalformedTelemetryError
from .snapshot import TelemetrySnapshot

FIELD_SEPARATOR = ";"
VALUE_SEPARATOR = ":"


def parse_fields(text: str) -> Dict[str, str]:
    """Split a state datagram into its fields.

    Empty segments are ignored so a trailing ``;`` is harmless.

    Raises:
        MalformedTelemetryError: If a field has no ``:`` separator.
    """
    body = text.strip().rstrip(FIELD_SEPARATOR)

    fields: Dict[str, str] = {}
    for segment in body.split(FIELD_SEPARATOR):
        if not segment:
            continue
        name, separator, value = segment.partition(VALUE_SEPARATOR)
        if not separator:
            raise MalformedTelemetryError(
                f"Telemetry field without '{VALUE_SEPARATOR}': {segment!r}",
                field=segment,
            )
        fields[name] = value
    return fields


def parse_telemetry(
    text: str, *, received_at: Optional[float] = None
) -> TelemetrySnapshot:
    return TelemetrySnapshot(parse_fields(text), received_at=received_at)
