import json

import pytest

from fanctl.core.encoding import decode, encode
from fanctl.core.errors import ValidationError
from fanctl.core.model import LedCommand, PowerCommand, SpeedCommand


def test_each_command_carries_exactly_one_field() -> None:
    assert encode(LedCommand(on=True)) == b'{"led":true}'
    assert encode(LedCommand(on=False)) == b'{"led":false}'
    assert encode(PowerCommand(on=True)) == b'{"power":true}'
    assert encode(PowerCommand(on=False)) == b'{"power":false}'
    assert encode(SpeedCommand(level=4)) == b'{"speed":4}'


def test_speed_encoding_is_stable_across_calls() -> None:
    encode(LedCommand(on=True))
    first = encode(SpeedCommand(level=4))
    encode(PowerCommand(on=False))
    second = encode(SpeedCommand(level=4))

    assert first == second
    assert json.loads(first) == {"speed": 4}


def test_decode_inverts_encode() -> None:
    for command in (LedCommand(on=True), PowerCommand(on=False), SpeedCommand(level=6)):
        assert decode(encode(command)) == command


@pytest.mark.parametrize(
    "payload",
    [b"not json", b"{}", b'{"led":true,"power":true}', b'{"speed":true}', b'{"mode":1}', b"[1]"],
)
def test_decode_rejects_unexpected_payloads(payload: bytes) -> None:
    with pytest.raises(ValidationError):
        decode(payload)


def test_encode_rejects_unknown_command() -> None:
    with pytest.raises(TypeError):
        encode("speed 4")  # type: ignore[arg-type]
