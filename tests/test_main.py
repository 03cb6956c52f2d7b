"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pgprovider.__main__ import main


def test_main_prints_redacted_descriptor(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[provider]
host = "db.internal"
password_command = "sh -c 'echo hunter2'"
jumphost = "bastion.internal"
expected_version = "13.4"
"""
    )

    exit_code = main(["--config", str(config_path), "--command-timeout", "10"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "hunter2" not in captured.out
    payload = json.loads(captured.out)
    assert payload["host"] == "db.internal"
    assert payload["password"] == "********"
    assert payload["expected_version"] == "13.4.0"
    assert 1024 <= payload["tunneled_port"] <= 65535


def test_main_reports_configuration_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[provider]\nexpected_version = "not-a-version"\n')

    exit_code = main(["--config", str(config_path)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "not-a-version" in captured.err


def test_main_reports_password_command_failures(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("[provider]\npassword_command = \"sh -c 'echo denied >&2; exit 1'\"\n")

    exit_code = main(["--config", str(config_path)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "denied" in captured.err
