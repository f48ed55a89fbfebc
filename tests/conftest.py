"""Shared test fixtures for pkgnet.

Provides reusable fixtures for isolated config directories, clean proxy
environments, session IO, and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pkgnet.config import Config, JsonConfigSource
from pkgnet.console import ConsoleIO
from pkgnet.models import NetworkSettings
from pkgnet.output import OutputFormat, OutputManager, reset_output, set_output
from pkgnet.proxy import reset_proxy_manager


PROXY_ENV_VARS = [
    "http_proxy",
    "HTTP_PROXY",
    "https_proxy",
    "HTTPS_PROXY",
    "no_proxy",
    "NO_PROXY",
    "CGI_HTTP_PROXY",
]


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
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


@pytest.fixture(autouse=True)
def _reset_proxy_manager_between_tests() -> None:
    """Drop the shared ProxyManager so each test re-reads its environment."""
    reset_proxy_manager()
    yield
    reset_proxy_manager()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def clean_proxy_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every proxy variable from the environment.

    Returns:
        The monkeypatch instance, so tests can set the variables they need.
    """
    for var in PROXY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def isolated_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_proxy_env: pytest.MonkeyPatch
) -> Path:
    """Isolate configuration to a temporary directory.

    Points PKGNET_HOME at ``tmp_path / "home"``, clears PKGNET_AUTH and the
    proxy variables, and changes the working directory to tmp_path.

    Returns:
        The config directory.
    """
    home = tmp_path / "home"
    monkeypatch.setenv("PKGNET_HOME", str(home))
    monkeypatch.delenv("PKGNET_AUTH", raising=False)
    monkeypatch.chdir(tmp_path)
    return home


# ---------------------------------------------------------------------------
# Session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def auth_source(tmp_path: Path) -> JsonConfigSource:
    """An auth file source inside tmp_path."""
    return JsonConfigSource(tmp_path / "auth.json", auth=True)


@pytest.fixture
def config(auth_source: JsonConfigSource) -> Config:
    """Default settings plus a GitLab instance on ``git.example.org``."""
    settings = NetworkSettings(gitlab_domains=["gitlab.com", "git.example.org"])
    return Config(settings=settings, auth_source=auth_source)


@pytest.fixture
def mock_io() -> MagicMock:
    """A ConsoleIO double with an empty credential store."""
    io = MagicMock(spec=ConsoleIO)
    io.has_authentication.return_value = False
    return io


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
