"""Tests for the subprocess command runner."""

from __future__ import annotations

import asyncio
import os
import time
from pathlib import Path

import pytest

from pgprovider.command import SubprocessCommandRunner
from pgprovider.errors import CommandExecutionError


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.mark.anyio
async def test_runner_returns_stdout_untouched() -> None:
    runner = SubprocessCommandRunner()

    output = await runner.run("sh", ["-c", "echo secret; echo ignored >&2"])

    assert output == "secret\n"


@pytest.mark.anyio
async def test_runner_reports_streams_on_failure() -> None:
    runner = SubprocessCommandRunner()

    with pytest.raises(CommandExecutionError) as excinfo:
        await runner.run("sh", ["-c", "echo partial; echo 'vault sealed' >&2; exit 3"])

    error = excinfo.value
    assert error.command == "sh"
    assert error.arguments == ("-c", "echo partial; echo 'vault sealed' >&2; exit 3")
    assert error.returncode == 3
    assert error.stdout == "partial\n"
    assert error.stderr == "vault sealed\n"
    message = str(error)
    assert "sh" in message
    assert "vault sealed\n" in message
    assert "partial" in message
    assert "exit status 3" in message


@pytest.mark.anyio
async def test_runner_reports_missing_executable() -> None:
    runner = SubprocessCommandRunner()

    with pytest.raises(CommandExecutionError) as excinfo:
        await runner.run("pgprovider-no-such-helper", ["--flag"])

    assert excinfo.value.returncode is None
    assert "pgprovider-no-such-helper" in str(excinfo.value)
    assert "--flag" in str(excinfo.value)


@pytest.mark.anyio
async def test_runner_kills_process_on_timeout() -> None:
    runner = SubprocessCommandRunner()
    started = time.monotonic()

    with pytest.raises(CommandExecutionError) as excinfo:
        await runner.run("sh", ["-c", "echo waiting; exec sleep 30"], timeout=0.5)

    assert time.monotonic() - started < 10
    assert "timed out" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, TimeoutError)
    assert excinfo.value.returncode is not None


async def _wait_for_pid(path: Path) -> int:
    for _ in range(200):
        if path.exists():
            content = path.read_text().strip()
            if content:
                return int(content)
        await asyncio.sleep(0.025)
    raise AssertionError("child process never reported its pid")


@pytest.mark.anyio
async def test_cancellation_kills_and_reaps_child(tmp_path: Path) -> None:
    runner = SubprocessCommandRunner()
    pid_file = tmp_path / "child.pid"
    task = asyncio.create_task(
        runner.run("sh", ["-c", f"echo $$ > {pid_file}; exec sleep 30"])
    )
    pid = await _wait_for_pid(pid_file)
    started = time.monotonic()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert time.monotonic() - started < 5
    # The child was reaped, so not even a zombie entry remains.
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.anyio
async def test_runner_rejects_undecodable_output() -> None:
    runner = SubprocessCommandRunner()

    with pytest.raises(CommandExecutionError) as excinfo:
        await runner.run("sh", ["-c", r"printf 'p\377w'"])

    assert excinfo.value.returncode == 0
    assert excinfo.value.stdout == ""
    assert "output is not valid utf-8" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


@pytest.mark.anyio
async def test_runner_keeps_non_ascii_output() -> None:
    runner = SubprocessCommandRunner()

    output = await runner.run("sh", ["-c", "printf 'p\\303\\251w'"])

    assert output == "péw"
