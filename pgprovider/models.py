"""Shared dataclasses describing an assembled connection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .versions import ServerVersion

DEFAULT_APPLICATION_NAME = "pgprovider"


class Scheme(str, Enum):
    """Connection schemes understood by the client."""

    POSTGRES = "postgres"
    AWS_POSTGRES = "awspostgres"
    GCP_POSTGRES = "gcppostgres"


@dataclass(frozen=True, slots=True)
class ClientCertificate:
    """PEM client certificate and private key paths."""

    cert_path: str
    key_path: str


@dataclass(frozen=True, slots=True)
class ConnectionDescriptor:
    """Fully resolved, immutable parameters for opening a connection."""

    scheme: Scheme
    host: str
    port: int
    database: str
    username: str
    expected_version: ServerVersion
    password: str = field(default="", repr=False)
    database_username: str | None = None
    superuser: bool = True
    sslmode: str | None = None
    client_certificate: ClientCertificate | None = None
    sslrootcert: str | None = None
    connect_timeout: int = 180
    max_connections: int = 20
    jumphost: str | None = None
    tunneled_port: int | None = None
    application_name: str = DEFAULT_APPLICATION_NAME
    deprecations: tuple[str, ...] = ()

    def redacted(self) -> dict[str, object]:
        """Plain mapping of the descriptor with the password masked."""

        return {
            "scheme": self.scheme.value,
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "database_username": self.database_username,
            "password": "********" if self.password else "",
            "superuser": self.superuser,
            "sslmode": self.sslmode,
            "clientcert": (
                {"cert": self.client_certificate.cert_path, "key": self.client_certificate.key_path}
                if self.client_certificate
                else None
            ),
            "sslrootcert": self.sslrootcert,
            "connect_timeout": self.connect_timeout,
            "max_connections": self.max_connections,
            "expected_version": str(self.expected_version),
            "jumphost": self.jumphost,
            "tunneled_port": self.tunneled_port,
            "application_name": self.application_name,
        }


__all__ = [
    "ClientCertificate",
    "ConnectionDescriptor",
    "DEFAULT_APPLICATION_NAME",
    "Scheme",
]
