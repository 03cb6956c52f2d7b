"""Turns raw provider attributes into a :class:`ConnectionDescriptor`."""

from __future__ import annotations

import logging
import shlex
from typing import TypeVar

from .command import CommandRunner, SubprocessCommandRunner
from .config import ProviderConfig
from .errors import ConfigurationError, InvalidVersionError, InvariantViolation
from .models import DEFAULT_APPLICATION_NAME, ClientCertificate, ConnectionDescriptor
from .ports import DEFAULT_PORT_ALLOCATOR, TunnelPortAllocator
from .versions import ServerVersion, parse_version

LOG = logging.getLogger(__name__)

_T = TypeVar("_T")

SSL_MODE_DEPRECATION = "Rename the `ssl_mode` attribute to `sslmode`"


class ConfigurationAssembler:
    """Applies precedence rules and resolves credentials for one configuration.

    Precedence:

    * ``sslmode`` wins whenever it is set; a non-empty ``ssl_mode`` is only a
      fallback and is reported in ``ConnectionDescriptor.deprecations``.
    * A static ``password`` that was supplied, even as an empty string, is
      used verbatim and ``password_command`` is never run. Otherwise a
      non-blank ``password_command`` is executed and its output, minus one
      trailing line terminator, becomes the password.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        port_allocator: TunnelPortAllocator | None = None,
        *,
        command_timeout: float | None = None,
        application_name: str = DEFAULT_APPLICATION_NAME,
    ) -> None:
        self._runner = runner or SubprocessCommandRunner()
        self._port_allocator = port_allocator or DEFAULT_PORT_ALLOCATOR
        self._command_timeout = command_timeout
        self._application_name = application_name

    async def assemble(self, config: ProviderConfig) -> ConnectionDescriptor:
        deprecations: list[str] = []
        sslmode = self._resolve_sslmode(config, deprecations)
        version = self._resolve_version(config)
        host = self._require(config.host, "host")
        port = self._require(config.port, "port")
        tunneled_port = None
        if config.jumphost:
            tunneled_port = self._port_allocator.port_for(host, port)
            LOG.debug(
                "Jump host %s configured; tunneling %s:%s via local port %s",
                config.jumphost,
                host,
                port,
                tunneled_port,
            )
        password = await self._resolve_password(config)
        client_certificate = None
        if config.clientcert is not None:
            client_certificate = ClientCertificate(
                cert_path=config.clientcert.cert,
                key_path=config.clientcert.key,
            )

        descriptor = ConnectionDescriptor(
            scheme=config.scheme,
            host=host,
            port=port,
            database=self._require(config.database, "database"),
            username=self._require(config.username, "username"),
            password=password,
            database_username=config.database_username or None,
            superuser=config.superuser,
            sslmode=sslmode,
            client_certificate=client_certificate,
            sslrootcert=config.sslrootcert or None,
            connect_timeout=config.connect_timeout,
            max_connections=config.max_connections,
            expected_version=version,
            jumphost=config.jumphost or None,
            tunneled_port=tunneled_port,
            application_name=self._application_name,
            deprecations=tuple(deprecations),
        )
        LOG.info(
            "Assembled %s connection to %s:%s/%s as %s",
            descriptor.scheme.value,
            descriptor.host,
            descriptor.port,
            descriptor.database,
            descriptor.username,
        )
        return descriptor

    def _resolve_sslmode(self, config: ProviderConfig, deprecations: list[str]) -> str | None:
        if config.sslmode is not None:
            return config.sslmode
        if config.ssl_mode:
            LOG.warning(SSL_MODE_DEPRECATION)
            deprecations.append(SSL_MODE_DEPRECATION)
            return config.ssl_mode
        return None

    def _resolve_version(self, config: ProviderConfig) -> ServerVersion:
        try:
            return parse_version(config.expected_version)
        except ValueError as exc:
            raise InvalidVersionError("expected_version", config.expected_version, str(exc)) from exc

    async def _resolve_password(self, config: ProviderConfig) -> str:
        if config.is_password_set():
            return config.password or ""
        if not config.password_command or not config.password_command.strip():
            return ""
        try:
            command, *args = shlex.split(config.password_command)
        except ValueError as exc:
            raise ConfigurationError(f"Cannot parse 'password_command': {exc}") from exc
        output = await self._runner.run(command, args, timeout=self._command_timeout)
        return _strip_line_terminator(output)

    @staticmethod
    def _require(value: _T | None, name: str) -> _T:
        if value is None or value == "":
            raise InvariantViolation(f"Required attribute '{name}' is missing after schema validation")
        return value


async def assemble(config: ProviderConfig, **kwargs: object) -> ConnectionDescriptor:
    """Assemble ``config`` with a one-off :class:`ConfigurationAssembler`."""

    return await ConfigurationAssembler(**kwargs).assemble(config)  # type: ignore[arg-type]


def _strip_line_terminator(value: str) -> str:
    if value.endswith("\r\n"):
        return value[:-2]
    if value.endswith("\n"):
        return value[:-1]
    return value


__all__ = ["ConfigurationAssembler", "SSL_MODE_DEPRECATION", "assemble"]
