"""External command execution used to resolve passwords."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from .errors import CommandExecutionError

LOG = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Interface implemented by command runners."""

    async def run(self, command: str, args: Sequence[str], *, timeout: float | None = None) -> str: ...


class SubprocessCommandRunner:
    """Runs a command as a child process and returns its standard output.

    Standard input is closed, stdout and stderr are captured separately. Any
    failure raises :class:`CommandExecutionError` with both streams attached.
    If the awaiting task is cancelled or ``timeout`` elapses, the child is
    killed and reaped before the error propagates.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def run(self, command: str, args: Sequence[str], *, timeout: float | None = None) -> str:
        args = tuple(args)
        LOG.debug("Running command %s with %d argument(s)", command, len(args))
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CommandExecutionError(command, args, reason=str(exc)) from exc

        stdout_buffer = bytearray()
        stderr_buffer = bytearray()
        collect = asyncio.gather(
            _drain(process.stdout, stdout_buffer),
            _drain(process.stderr, stderr_buffer),
            process.wait(),
        )
        try:
            await asyncio.wait_for(collect, timeout)
        except asyncio.TimeoutError as exc:
            await _terminate(process)
            raise CommandExecutionError(
                command,
                args,
                stdout=stdout_buffer.decode(self._encoding, errors="replace"),
                stderr=stderr_buffer.decode(self._encoding, errors="replace"),
                returncode=process.returncode,
                reason=f"timed out after {timeout} second(s)",
            ) from exc
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        stderr = stderr_buffer.decode(self._encoding, errors="replace")
        if process.returncode != 0:
            raise CommandExecutionError(
                command,
                args,
                stdout=stdout_buffer.decode(self._encoding, errors="replace"),
                stderr=stderr,
                returncode=process.returncode,
                reason=f"exit status {process.returncode}",
            )
        try:
            return stdout_buffer.decode(self._encoding)
        except UnicodeDecodeError as exc:
            # The output is a credential; keep it out of the error message.
            raise CommandExecutionError(
                command,
                args,
                stderr=stderr,
                returncode=process.returncode,
                reason=f"output is not valid {self._encoding}",
            ) from exc


async def _drain(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            return
        buffer.extend(chunk)


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    # Shield the reap so a second cancellation cannot leave a zombie behind.
    await asyncio.shield(process.wait())
    LOG.debug("Command process %s terminated with %s", process.pid, process.returncode)


__all__ = ["CommandRunner", "SubprocessCommandRunner"]
