"""Wire encoding for fan commands.

Each datagram is a compact JSON object carrying exactly one of the fields
``led``, ``power`` or ``speed``.
"""

from __future__ import annotations

import json

from fanctl.core.errors import ValidationError
from fanctl.core.model import Command, LedCommand, PowerCommand, SpeedCommand

_SEPARATORS = (",", ":")


def _fields(command: Command) -> dict[str, bool | int]:
    if isinstance(command, LedCommand):
        return {"led": command.on}
    if isinstance(command, PowerCommand):
        return {"power": command.on}
    if isinstance(command, SpeedCommand):
        return {"speed": command.level}
    raise TypeError(f"Unsupported command type: {type(command).__name__}")


def encode(command: Command) -> bytes:
    return json.dumps(_fields(command), separators=_SEPARATORS).encode("utf-8")


def decode(payload: bytes) -> Command:
    try:
        doc = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Payload is not valid JSON: {exc}") from exc

    if not isinstance(doc, dict) or len(doc) != 1:
        raise ValidationError("Payload must carry exactly one of led, power, speed")

    (key, value), = doc.items()
    if key == "led" and isinstance(value, bool):
        return LedCommand(on=value)
    if key == "power" and isinstance(value, bool):
        return PowerCommand(on=value)
    if key == "speed" and isinstance(value, int) and not isinstance(value, bool):
        return SpeedCommand(level=value)
    raise ValidationError(f"Unsupported payload field {key}={value!r}")
