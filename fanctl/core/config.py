"""Configuration loading for fanctl.

Values are resolved from built-in defaults, then an optional YAML file, then
environment variables. The merged mapping is checked against the packaged JSON
schema and the fan endpoint is run through the validation gate; any problem
raises :class:`ConfigurationError` so the process never starts serving with a
bad endpoint.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validators

from fanctl.core.errors import ConfigurationError, ValidationError
from fanctl.core.model import Endpoint, RetryPolicy
from fanctl.core.validation import is_int

LOGGER = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "fan_ip": "192.168.1.13",
    "fan_port": 5600,
    "udp_timeout_ms": 5000,
    "udp_retry_attempts": 3,
    "retry_base_delay_ms": 100,
    "log_level": "info",
    "log_file": "logs/app.log",
    "environment": "development",
}

ENV_VARS: dict[str, str] = {
    "FAN_IP": "fan_ip",
    "FAN_PORT": "fan_port",
    "UDP_TIMEOUT": "udp_timeout_ms",
    "UDP_RETRY_ATTEMPTS": "udp_retry_attempts",
    "UDP_RETRY_BASE_DELAY": "retry_base_delay_ms",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
    "FANCTL_ENV": "environment",
}

_INT_KEYS = frozenset({"fan_port", "udp_timeout_ms", "udp_retry_attempts", "retry_base_delay_ms"})


@dataclass(frozen=True)
class FanConfig:
    fan_ip: str
    fan_port: int
    udp_timeout_ms: int
    udp_retry_attempts: int
    retry_base_delay_ms: int
    log_level: str
    log_file: str
    environment: str
    endpoint: Endpoint
    source: Path | None = None

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.udp_retry_attempts,
            base_delay_s=self.retry_base_delay_ms / 1000,
            attempt_timeout_s=self.udp_timeout_ms / 1000,
        )

    @property
    def log_path(self) -> Path:
        return Path(self.log_file)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("endpoint")
        data["source"] = str(self.source) if self.source else None
        return data


def _load_schema_validator() -> Any:
    schema_text = resources.files("fanctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=validator_cls.FORMAT_CHECKER)


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "fanctl/config.yaml"


def _resolve_config_path(path: Path | None, environ: Mapping[str, str]) -> Path | None:
    if path is not None:
        return path
    if environ.get("FANCTL_CONFIG"):
        return Path(environ["FANCTL_CONFIG"])
    candidate = default_config_path()
    return candidate if candidate.is_file() else None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _coerce_env(key: str, raw: str) -> Any:
    value = raw.strip()
    if key in _INT_KEYS:
        try:
            return int(value, 10)
        except ValueError:
            # Left as a string so the schema reports the type error.
            return value
    if key in {"log_level", "environment"}:
        return value.lower()
    return value


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name, key in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is None or raw.strip() == "":
            continue
        overrides[key] = _coerce_env(key, raw)
    return overrides


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> FanConfig:
    env = os.environ if environ is None else environ
    merged: dict[str, Any] = dict(DEFAULTS)

    source = _resolve_config_path(path, env)
    if source is not None:
        merged.update(_read_yaml(source))
    merged.update(_env_overrides(env))

    validator = _load_schema_validator()
    try:
        validator.validate(merged)
    except SchemaValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise ConfigurationError(f"Configuration validation error{where}: {exc.message}") from exc

    for key in sorted(_INT_KEYS):
        if not is_int(merged[key]):
            raise ConfigurationError(
                f"Configuration validation error ({key}): {merged[key]!r} is not an integer"
            )

    try:
        endpoint = Endpoint.validated(merged["fan_ip"], merged["fan_port"])
    except ValidationError as exc:
        LOGGER.error(
            "Invalid configuration FAN_IP=%s FAN_PORT=%s: %s",
            merged["fan_ip"],
            merged["fan_port"],
            exc,
        )
        raise ConfigurationError(f"Invalid fan endpoint: {exc}") from exc

    return FanConfig(**merged, endpoint=endpoint, source=source)
