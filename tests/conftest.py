"""Pytest configuration helpers for gsplice tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the source directory is importable without requiring an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_process_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure each test runs with the default process configuration."""

    from gsplice.config import ENV_PREFIX, configure

    _clear_env(monkeypatch, ENV_PREFIX)
    configure()
    yield
    # Variables set by the test are still present until monkeypatch unwinds.
    _clear_env(monkeypatch, ENV_PREFIX)
    configure()


def _clear_env(monkeypatch: pytest.MonkeyPatch, prefix: str) -> None:
    for name in list(os.environ):
        if name.startswith(prefix):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def multi_material_path(tmp_path: Path) -> Path:
    """Copy the two-tool sample program into a temporary location."""

    target = tmp_path / "multi_material.gcode"
    source = FIXTURES_DIR / "multi_material.gcode"
    target.write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
    return target
