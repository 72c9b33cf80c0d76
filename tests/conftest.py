"""Shared test fixtures for specview.

Provides reusable fixtures for loading document fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specview.models import Document
from specview.output import OutputFormat, OutputManager, reset_output, set_output
from specview.parser import parse_document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (text and plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def _fixture_text(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def petstore_30_text() -> str:
    """Raw OpenAPI 3.0 petstore document text."""
    return _fixture_text("petstore_3.0.json")


@pytest.fixture
def petstore_30_raw(petstore_30_text: str) -> dict[str, Any]:
    """Raw OpenAPI 3.0 petstore document dict."""
    return json.loads(petstore_30_text)


@pytest.fixture
def swagger_20_text() -> str:
    """Raw Swagger 2.0 petstore document text."""
    return _fixture_text("swagger_2.0.json")


@pytest.fixture
def cyclic_text() -> str:
    """Raw document whose schemas reference each other in cycles."""
    return _fixture_text("cyclic.json")


# ---------------------------------------------------------------------------
# Parsed document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_doc(petstore_30_text: str) -> Document:
    """Parsed OpenAPI 3.0 petstore document."""
    return parse_document(petstore_30_text)


@pytest.fixture
def swagger_doc(swagger_20_text: str) -> Document:
    """Parsed Swagger 2.0 petstore document."""
    return parse_document(swagger_20_text)


@pytest.fixture
def cyclic_doc(cyclic_text: str) -> Document:
    """Parsed document with cyclic schema references."""
    return parse_document(cyclic_text)


@pytest.fixture
def minimal_doc() -> Document:
    """A document with no paths and no schemas."""
    return parse_document(
        '{"openapi": "3.0.0", "info": {"title": "Empty", "version": "0"}, "paths": {}}'
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, forces the XDG layout,
    clears all SPECVIEW_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("specview.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["SPECVIEW_FORMAT", "SPECVIEW_DEBOUNCE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner with stderr captured separately."""
    from typer.testing import CliRunner

    return CliRunner()
