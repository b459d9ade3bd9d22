"""Shared test fixtures for formsync."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from formsync.config import Settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FORMSYNC_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("FORMSYNC_"):
            monkeypatch.delenv(name)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway database and forms directory."""
    return Settings(
        _env_file=None,
        server_url="http://localhost:8000",
        database_url=f"sqlite:///{tmp_path / 'db' / 'formsync.db'}",
        forms_dir=tmp_path / "forms",
        debug=True,
    )
