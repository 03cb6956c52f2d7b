"""Error hierarchy shared by the assembler, command runner and client helpers."""

from __future__ import annotations

from typing import Sequence


class PgProviderError(RuntimeError):
    """Base error for provider configuration failures."""


class ConfigurationError(PgProviderError):
    """Raised when provider attributes cannot be turned into a descriptor."""


class InvalidVersionError(ConfigurationError):
    """Raised when the expected server version does not parse."""

    def __init__(self, attribute: str, value: str, reason: str | None = None) -> None:
        self.attribute = attribute
        self.value = value
        message = f"invalid version for '{attribute}' ({value!r})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvariantViolation(PgProviderError):
    """Raised when attributes the schema guarantees are missing."""


class CommandExecutionError(PgProviderError):
    """Raised when an external command fails, cannot start or times out."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        *,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
        reason: str,
    ) -> None:
        self.command = command
        self.arguments = tuple(args)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.reason = reason
        super().__init__(
            f"failed to run {command} {list(self.arguments)} "
            f"stdout {stdout} stderr {stderr}: {reason}"
        )


class ClientConnectionError(PgProviderError):
    """Raised when the database client cannot connect."""


class ServerVersionMismatch(PgProviderError):
    """Raised when the live server is older than the expected version."""


__all__ = [
    "ClientConnectionError",
    "CommandExecutionError",
    "ConfigurationError",
    "InvalidVersionError",
    "InvariantViolation",
    "PgProviderError",
    "ServerVersionMismatch",
]
