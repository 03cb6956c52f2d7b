"""Shared fixtures for the provider tests."""

from __future__ import annotations

import pytest

PG_ENVIRONMENT = (
    "PGHOST",
    "PGPORT",
    "PGDATABASE",
    "PGUSER",
    "PGPASSWORD",
    "PGSUPERUSER",
    "PGSSLMODE",
    "PGCONNECT_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _isolate_pg_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in PG_ENVIRONMENT:
        monkeypatch.delenv(name, raising=False)
