"""Shared test fixtures for httpstep.

Provides reusable fixtures for loading spec fixtures, serving them through a
mock :mod:`httpx` transport, isolating config directories, and managing
output state.  These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from httpstep.output import reset_output
from httpstep.parser.spec_loader import SpecLoader


FIXTURES_DIR = Path(__file__).parent / "fixtures"

CHUCK_SPEC_URL = "https://api.chucknorris.io/documentation"


def load_fixture(name: str) -> dict[str, Any]:
    """Load a JSON fixture file as a dict."""
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


def chuck_norris_spec() -> dict[str, Any]:
    """The single-path Swagger document served at :data:`CHUCK_SPEC_URL`."""
    return {
        "swagger": "2.0",
        "info": {"title": "Chuck Norris", "version": "1.0"},
        "paths": {
            "/jokes/random": {
                "get": {
                    "produces": ["application/json"],
                    "responses": {"200": {"description": "A random joke"}},
                }
            }
        },
    }


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager caches sys.stdout/sys.stderr at creation time; CliRunner
    swaps those streams, so a manager must not outlive its test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    return load_fixture("swagger_2.0.json")


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    return load_fixture("petstore_3.0.json")


@pytest.fixture
def tree_31_raw() -> dict[str, Any]:
    return load_fixture("tree_3.1.json")


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


def json_transport(routes: dict[str, Any]) -> httpx.MockTransport:
    """A mock transport answering each URL in *routes* with its JSON body.

    Unknown URLs get a 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_loader() -> Callable[[dict[str, Any]], SpecLoader]:
    """Factory for a :class:`SpecLoader` serving fixed documents by URL."""

    def factory(routes: dict[str, Any]) -> SpecLoader:
        return SpecLoader(transport=json_transport(routes))

    return factory


@pytest.fixture
def chuck_loader(make_loader) -> SpecLoader:
    """Loader that serves the Chuck Norris document at :data:`CHUCK_SPEC_URL`."""
    return make_loader({CHUCK_SPEC_URL: chuck_norris_spec()})


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, forces the XDG
    layout, clears HTTPSTEP_* variables, and changes into tmp_path.
    """
    monkeypatch.setattr("httpstep.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["HTTPSTEP_SPEC_URL", "HTTPSTEP_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
