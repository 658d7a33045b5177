"""Pytest configuration for test isolation.

The CLI writes the ticker cache and its export file relative to the current
working directory by default (``./.ticker-cache.json``,
``./yahoo_finance_import.csv``), and reads a local ``.env``. When tests run in
the same working tree those files would leak between tests, so every test runs
from its own temporary directory with the cache path pointed inside it.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `broker_parser` is importable,
# and the repo root so `tests.helpers` resolves.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run each test from a private directory with its own ticker cache path."""

    workdir = tmp_path / "work"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("BROKER_PARSER_CACHE_PATH", os.fspath(workdir / ".ticker-cache.json"))
    monkeypatch.setenv("BROKER_PARSER_LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    """Undo handlers the CLI attaches so later tests never log to a closed stream."""

    logger = logging.getLogger("broker_parser")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture()
def data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"
