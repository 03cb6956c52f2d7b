"""Connection configuration assembly for PostgreSQL providers."""

from __future__ import annotations

from .assembler import ConfigurationAssembler, assemble
from .command import CommandRunner, SubprocessCommandRunner
from .config import ClientCertificateConfig, ProviderConfig, load_provider_config, parse_provider_config
from .errors import (
    ClientConnectionError,
    CommandExecutionError,
    ConfigurationError,
    InvalidVersionError,
    InvariantViolation,
    PgProviderError,
    ServerVersionMismatch,
)
from .models import ClientCertificate, ConnectionDescriptor, Scheme
from .ports import TunnelPortAllocator
from .versions import ServerVersion, parse_version

__version__ = "0.1.0"

__all__ = [
    "ClientCertificate",
    "ClientCertificateConfig",
    "ClientConnectionError",
    "CommandExecutionError",
    "CommandRunner",
    "ConfigurationAssembler",
    "ConfigurationError",
    "ConnectionDescriptor",
    "InvalidVersionError",
    "InvariantViolation",
    "PgProviderError",
    "ProviderConfig",
    "Scheme",
    "ServerVersion",
    "ServerVersionMismatch",
    "SubprocessCommandRunner",
    "TunnelPortAllocator",
    "__version__",
    "assemble",
    "load_provider_config",
    "parse_provider_config",
    "parse_version",
]
