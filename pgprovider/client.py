"""asyncpg connection helpers driven by a :class:`ConnectionDescriptor`.

Only the plain ``postgres`` scheme is handled natively; cloud schemes are
connected the same way and a warning is logged.
"""

from __future__ import annotations

import logging
import ssl

import asyncpg

from .errors import ClientConnectionError, ServerVersionMismatch
from .models import ConnectionDescriptor, Scheme
from .versions import ServerVersion

LOG = logging.getLogger(__name__)

TUNNEL_HOST = "127.0.0.1"

_VERIFYING_MODES = {"verify-ca", "verify-full"}


def connect_kwargs(descriptor: ConnectionDescriptor) -> dict[str, object]:
    """Keyword arguments for :func:`asyncpg.connect`."""

    if descriptor.scheme is not Scheme.POSTGRES:
        LOG.warning(
            "Scheme %s is not supported by the asyncpg client; connecting as plain postgres",
            descriptor.scheme.value,
        )
    kwargs: dict[str, object] = {}
    if descriptor.jumphost and descriptor.tunneled_port is not None:
        kwargs["host"] = TUNNEL_HOST
        kwargs["port"] = descriptor.tunneled_port
    else:
        kwargs["host"] = descriptor.host
        kwargs["port"] = descriptor.port
    kwargs["user"] = descriptor.username
    if descriptor.password:
        kwargs["password"] = descriptor.password
    kwargs["database"] = descriptor.database
    # Zero or negative means wait indefinitely.
    kwargs["timeout"] = descriptor.connect_timeout if descriptor.connect_timeout > 0 else None
    ssl_arg = _ssl_argument(descriptor)
    if ssl_arg is not None:
        kwargs["ssl"] = ssl_arg
    kwargs["server_settings"] = {"application_name": descriptor.application_name}
    return kwargs


async def connect(descriptor: ConnectionDescriptor) -> asyncpg.Connection:
    """Open a connection and check the server meets the expected version."""

    try:
        conn = await asyncpg.connect(**connect_kwargs(descriptor))
    except Exception as exc:
        raise ClientConnectionError(
            f"Failed to connect to {descriptor.host}:{descriptor.port}/{descriptor.database}: {exc}"
        ) from exc
    try:
        check_server_version(descriptor, server_version(conn))
    except Exception:
        await conn.close()
        raise
    return conn


def server_version(conn: asyncpg.Connection) -> ServerVersion:
    """Live server version reported by asyncpg."""

    info = conn.get_server_version()
    return ServerVersion(major=info.major, minor=info.minor, patch=info.micro)


def check_server_version(descriptor: ConnectionDescriptor, actual: ServerVersion) -> None:
    if actual < descriptor.expected_version:
        raise ServerVersionMismatch(
            f"Server {descriptor.host}:{descriptor.port} runs PostgreSQL {actual}, "
            f"expected at least {descriptor.expected_version}"
        )
    LOG.debug("Server version %s satisfies expected %s", actual, descriptor.expected_version)


def _ssl_argument(descriptor: ConnectionDescriptor) -> ssl.SSLContext | str | None:
    mode = descriptor.sslmode
    if descriptor.client_certificate is None and descriptor.sslrootcert is None:
        return mode or None
    if mode == "disable":
        return mode
    context = ssl.create_default_context(cafile=descriptor.sslrootcert)
    if mode not in _VERIFYING_MODES:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif mode == "verify-ca":
        context.check_hostname = False
    if descriptor.client_certificate is not None:
        context.load_cert_chain(
            descriptor.client_certificate.cert_path,
            descriptor.client_certificate.key_path,
        )
    return context


__all__ = [
    "TUNNEL_HOST",
    "check_server_version",
    "connect",
    "connect_kwargs",
    "server_version",
]
