"""Provider attribute schema and loading helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .models import Scheme
from .versions import parse_version

CONFIG_FILE = Path.home() / ".config" / "pgprovider" / "config.toml"
CONFIG_SECTION = "provider"
_SENSITIVE_FIELDS = frozenset({"password", "password_command"})

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5432
DEFAULT_DATABASE = "postgres"
DEFAULT_USERNAME = "postgres"
DEFAULT_CONNECT_TIMEOUT = 180
DEFAULT_MAX_CONNECTIONS = 20
DEFAULT_EXPECTED_VERSION = "9.0.0"


def _env_default(name: str, fallback: Any = None, *, cast: Callable[[str], Any] = str) -> Callable[[], Any]:
    """Build a default factory reading ``name`` from the environment."""

    def _factory() -> Any:
        raw = os.environ.get(name)
        if raw is None or raw == "":
            return fallback
        return cast(raw)

    return _factory


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in {"1", "t", "true", "yes", "on"}:
        return True
    if lowered in {"0", "f", "false", "no", "off"}:
        return False
    raise ValueError(f"invalid boolean value ({raw!r})")


class ClientCertificateConfig(BaseModel):
    """SSL client certificate block."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cert: str = Field(min_length=1)
    key: str = Field(min_length=1)


class ProviderConfig(BaseModel):
    """Raw provider attributes before assembly.

    ``password`` is tri-state: ``None`` when unset, otherwise the supplied
    value, which may be empty.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    scheme: Scheme = Scheme.POSTGRES
    host: str = Field(default_factory=_env_default("PGHOST", DEFAULT_HOST), min_length=1)
    port: int = Field(default_factory=_env_default("PGPORT", DEFAULT_PORT, cast=int), ge=1, le=65535)
    database: str = Field(default_factory=_env_default("PGDATABASE", DEFAULT_DATABASE), min_length=1)
    username: str = Field(default_factory=_env_default("PGUSER", DEFAULT_USERNAME), min_length=1)
    password: str | None = Field(default_factory=_env_default("PGPASSWORD"), repr=False)
    password_command: str | None = Field(default=None, repr=False)
    database_username: str | None = None
    superuser: bool = Field(default_factory=_env_default("PGSUPERUSER", True, cast=_parse_bool))
    sslmode: str | None = Field(default_factory=_env_default("PGSSLMODE"))
    ssl_mode: str | None = Field(default=None, description="Deprecated, use `sslmode`.")
    clientcert: ClientCertificateConfig | None = None
    sslrootcert: str | None = None
    connect_timeout: int = Field(
        default_factory=_env_default("PGCONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT, cast=int),
        ge=-1,
    )
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, ge=-1)
    expected_version: str = DEFAULT_EXPECTED_VERSION
    jumphost: str | None = None

    @field_validator("clientcert", mode="before")
    @classmethod
    def _unwrap_clientcert(cls, value: object) -> object:
        # Accept the block form ``clientcert = [{cert = ..., key = ...}]``.
        if isinstance(value, (list, tuple)):
            if len(value) > 1:
                raise ValueError("at most one clientcert block is allowed")
            return value[0] if value else None
        return value

    @field_validator("expected_version")
    @classmethod
    def _validate_expected_version(cls, value: str) -> str:
        parse_version(value)
        return value

    def is_password_set(self) -> bool:
        """True when a static password was supplied, even an empty one."""

        return self.password is not None


def load_provider_config(path: Path | None = None) -> ProviderConfig:
    """Load provider attributes from the TOML file; environment fills the gaps.

    A missing file yields a config built from environment variables and
    defaults. Malformed TOML or invalid attribute values raise
    :class:`ConfigurationError`.
    """

    target = path or CONFIG_FILE
    try:
        data = _read_config_file(target)
    except FileNotFoundError:
        data = {}
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigurationError(f"Failed to read provider config '{target}': {exc}") from exc
    return parse_provider_config(data, source=str(target))


def parse_provider_config(data: dict[str, object], *, source: str = "<mapping>") -> ProviderConfig:
    """Validate a raw attribute mapping into a :class:`ProviderConfig`."""

    try:
        return ProviderConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid provider config in {source}: {_describe(exc)}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Invalid provider config in {source}: {exc}") from exc


def _read_config_file(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        raw = tomllib.load(handle)
    section = raw.get(CONFIG_SECTION, raw)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Section [{CONFIG_SECTION}] in '{path}' must be a table")
    return dict(section)


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<root>"
        value = "********" if location in _SENSITIVE_FIELDS else error.get("input")
        parts.append(f"{location}: {error['msg']} (got {value!r})")
    return "; ".join(parts)


__all__ = [
    "CONFIG_FILE",
    "ClientCertificateConfig",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_EXPECTED_VERSION",
    "DEFAULT_MAX_CONNECTIONS",
    "ProviderConfig",
    "load_provider_config",
    "parse_provider_config",
]
