"""Input validation for speed levels and the fan endpoint."""

from __future__ import annotations

import ipaddress

from fanctl.core.errors import ValidationError

MIN_SPEED = 1
MAX_SPEED = 6
_UNSPECIFIED_IP = "0.0.0.0"


def is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_speed(speed: object) -> int:
    if not is_int(speed) or not MIN_SPEED <= speed <= MAX_SPEED:
        raise ValidationError(f"Fan speed must be between {MIN_SPEED} and {MAX_SPEED}")
    return speed


def validate_ip(ip: object) -> str:
    if not isinstance(ip, str):
        raise ValidationError("Invalid fan IP address")
    try:
        address = ipaddress.IPv4Address(ip.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid fan IP address '{ip}'") from exc
    if str(address) == _UNSPECIFIED_IP:
        raise ValidationError(f"IP address cannot be {_UNSPECIFIED_IP}")
    return str(address)


def validate_port(port: object) -> int:
    if not is_int(port):
        raise ValidationError("Invalid fan port number")
    if port < 1:
        raise ValidationError("Port must be greater than 0")
    if port > 65535:
        raise ValidationError("Port must be less than 65536")
    return port


def validate_bool(value: object) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("Value must be a boolean")
    return value


def is_valid_speed(speed: object) -> bool:
    return is_int(speed) and MIN_SPEED <= speed <= MAX_SPEED


def is_valid_ip(ip: object) -> bool:
    try:
        validate_ip(ip)
    except ValidationError:
        return False
    return True


def is_valid_port(port: object) -> bool:
    return is_int(port) and 1 <= port <= 65535
