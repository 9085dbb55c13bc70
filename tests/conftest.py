"""Pytest configuration for test isolation.

The CLI loads ``.env`` from the working directory and configures the package
logger once per process. Left alone, a stray ``.env`` or a handler bound to a
previous test's captured stream would leak between tests, so every test runs
from its own temporary directory with logging reset afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from mrr_report.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_env_and_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run each test from ``tmp_path`` with a quiet, unconfigured logger."""

    workdir = tmp_path / "cwd"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)
    # Keep INFO chatter off captured stdout/stderr in CLI tests.
    monkeypatch.setenv("MRR_REPORT_LOG_LEVEL", "WARNING")
    reset_logging()
    yield
    reset_logging()
