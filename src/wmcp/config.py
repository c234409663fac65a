"""Server configuration: pydantic settings, YAML loading and environment overlay.

Precedence, lowest first: model defaults, YAML file, environment variables,
command-line flags.

Example ``wmcp.yaml``::

    server:
      port: 4001
      call_timeout: 20
    weaviate:
      url: ${WEAVIATE_URL}
      api_key: ${WEAVIATE_API_KEY}
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

LogLevel = Literal["critical", "error", "warning", "info", "debug"]


class ConfigError(Exception):
    """Configuration could not be read or is invalid."""


class TelemetrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Listener, deadlines and session timing."""

    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = Field(default=4001, ge=1, le=65535)
    call_timeout: float = Field(default=30.0, gt=0)
    heartbeat_interval: float = Field(default=15.0, gt=0)
    idle_timeout: float = Field(default=300.0, gt=0)
    log_level: LogLevel = "info"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_level(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class WeaviateSettings(BaseModel):
    """Where the adapters send their REST calls."""

    model_config = ConfigDict(extra="forbid")

    url: str = "http://localhost:8080"
    api_key: str | None = Field(default=None, repr=False)
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"url must start with http:// or https://, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def _blank_key(cls, value: str | None) -> str | None:
        return value or None

    @property
    def base_url(self) -> str:
        return f"{self.url}/v1"

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


class AppSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    server: ServerSettings = Field(default_factory=ServerSettings)
    weaviate: WeaviateSettings = Field(default_factory=WeaviateSettings)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AppSettings:
        """Validate *data*, raising :class:`ConfigError` instead of pydantic errors."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        base: AppSettings | None = None,
    ) -> AppSettings:
        """Overlay ``WEAVIATE_*`` and ``WMCP_*`` variables onto *base* (or defaults)."""
        environ = os.environ if environ is None else environ
        overrides: dict[str, dict[str, Any]] = {}
        for variable, (section, key) in ENV_VARIABLES.items():
            value = environ.get(variable)
            if value:
                overrides.setdefault(section, {})[key] = value
        return (base or cls()).with_overrides(**overrides)

    def with_overrides(self, **sections: Mapping[str, Any]) -> AppSettings:
        """Return a copy with per-section overrides applied; ``None`` values are ignored."""
        data = self.model_dump()
        for section, values in sections.items():
            if section not in data:
                raise ConfigError(f"Unknown configuration section: {section}")
            _merge(data[section], values)
        return self.from_mapping(data)


ENV_VARIABLES: dict[str, tuple[str, str]] = {
    "WEAVIATE_URL": ("weaviate", "url"),
    "WEAVIATE_API_KEY": ("weaviate", "api_key"),
    "WEAVIATE_TIMEOUT": ("weaviate", "timeout"),
    "WMCP_HOST": ("server", "host"),
    "WMCP_PORT": ("server", "port"),
    "WMCP_CALL_TIMEOUT": ("server", "call_timeout"),
    "WMCP_HEARTBEAT_INTERVAL": ("server", "heartbeat_interval"),
    "WMCP_IDLE_TIMEOUT": ("server", "idle_timeout"),
    "WMCP_LOG_LEVEL": ("server", "log_level"),
}


def _merge(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    for key, value in updates.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


class SettingsLoader:
    """Load and validate a YAML settings file into :class:`AppSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> AppSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  An empty file
        yields the defaults.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        return AppSettings.from_mapping(data)


def load_settings(path: Path | None = None, environ: Mapping[str, str] | None = None) -> AppSettings:
    """Defaults, then the YAML file at *path* (if any), then the environment."""
    base = SettingsLoader(path).load() if path is not None else AppSettings()
    return AppSettings.from_env(environ, base=base)
