"""Shared test fixtures for flagconv tests."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from flagconv.codec import CodecRegistry


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> CodecRegistry:
    """Provide an empty codec registry so tests never touch the default one."""
    return CodecRegistry()
