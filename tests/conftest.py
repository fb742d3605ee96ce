"""Shared fixtures for omnify_lock tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def schemas_dir(tmp_path: Path) -> Path:
    """An empty schemas directory inside the test's temp dir."""
    path = tmp_path / "schemas"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep OMNIFY_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("OMNIFY_"):
            monkeypatch.delenv(key, raising=False)
