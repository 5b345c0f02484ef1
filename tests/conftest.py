"""Shared pytest fixtures for flux2argo tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from flux2argo.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear any FLUX2ARGO_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("FLUX2ARGO_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path: Path) -> Generator[Path]:
    """Keep log files written by CLI invocations out of the home directory."""
    log_dir = tmp_path / "state"
    with (
        patch("flux2argo.logging.config.LOG_DIR", log_dir),
        patch("flux2argo.logging.config.LOG_FILE", log_dir / "flux2argo.log"),
    ):
        yield log_dir


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None]:
    """Drop handlers a test (or a CLI invocation) attached to the root logger."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers
    root.setLevel(original_level)
