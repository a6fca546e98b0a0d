"""Tests for spec loading, format detection, URL checks, and version detection."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from httpstep.exceptions import MalformedUrlError, SpecLoadError
from httpstep.models import SpecVersion
from httpstep.parser.loader import (
    _load_from_file,
    _load_from_stdin,
    _load_from_url,
    check_url,
    detect_spec_version,
    is_url,
    load_spec,
    parse_content,
    url_origin,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """Test that load_spec routes each kind of source to the right reader."""

    def test_dispatches_to_stdin(self) -> None:
        with patch("httpstep.parser.loader._load_from_stdin", return_value={"a": 1}) as mock:
            assert load_spec("-") == {"a": 1}
        mock.assert_called_once_with()

    def test_dispatches_to_url(self) -> None:
        with patch("httpstep.parser.loader._load_from_url", return_value={"a": 1}) as mock:
            load_spec("https://example.com/spec.json", timeout=5.0)
        mock.assert_called_once_with("https://example.com/spec.json", timeout=5.0)

    def test_dispatches_to_file(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "swagger_2.0.json"))
        assert result["swagger"] == "2.0"

    def test_is_url(self) -> None:
        assert is_url("http://example.com/spec.json")
        assert is_url("ftp://example.com/spec.json")
        assert not is_url("./spec.json")
        assert not is_url("-")


# ---------------------------------------------------------------------------
# _load_from_file
# ---------------------------------------------------------------------------


class TestLoadFromFile:
    """Test loading specs from local files."""

    def test_loads_json_fixture(self) -> None:
        result = _load_from_file(str(FIXTURES_DIR / "petstore_3.0.json"))
        assert result["openapi"] == "3.0.3"
        assert "/pets" in result["paths"]

    def test_loads_yaml_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "spec.yaml"
        yaml_file.write_text(
            textwrap.dedent("""\
                openapi: "3.0.0"
                info:
                  title: YAML file
                  version: "1.0"
                paths: {}
            """),
            encoding="utf-8",
        )
        result = _load_from_file(str(yaml_file))
        assert result["info"]["title"] == "YAML file"

    def test_unknown_extension_detects_content(self, tmp_path: Path) -> None:
        spec_file = tmp_path / "spec.txt"
        spec_file.write_text('{"swagger": "2.0"}', encoding="utf-8")
        assert _load_from_file(str(spec_file)) == {"swagger": "2.0"}

    def test_missing_file_raises(self) -> None:
        with pytest.raises(SpecLoadError, match="not found"):
            _load_from_file("/nonexistent/path/to/spec.json")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(SpecLoadError, match="empty"):
            _load_from_file(str(empty))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(SpecLoadError, match="Invalid JSON"):
            _load_from_file(str(bad))

    def test_non_object_json_raises(self, tmp_path: Path) -> None:
        array_file = tmp_path / "array.json"
        array_file.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(SpecLoadError, match="must be a JSON/YAML object"):
            _load_from_file(str(array_file))


# ---------------------------------------------------------------------------
# _load_from_stdin
# ---------------------------------------------------------------------------


class TestLoadFromStdin:
    """Test loading specs from stdin."""

    def test_reads_json_from_stdin(self) -> None:
        spec_json = json.dumps({"swagger": "2.0", "info": {"title": "T", "version": "1"}})
        with patch("httpstep.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(spec_json)
            result = _load_from_stdin()
        assert result["swagger"] == "2.0"

    def test_empty_stdin_raises(self) -> None:
        with patch("httpstep.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   \n\t\n  ")
            with pytest.raises(SpecLoadError, match="No input"):
                _load_from_stdin()


# ---------------------------------------------------------------------------
# _load_from_url
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    """Test the blocking URL reader."""

    def test_loads_json_from_url(self) -> None:
        mock_response = httpx.Response(
            status_code=200,
            json={"swagger": "2.0"},
            request=httpx.Request("GET", "https://example.com/spec.json"),
        )
        with patch("httpstep.parser.loader.httpx.get", return_value=mock_response):
            result = _load_from_url("https://example.com/spec.json")
        assert result == {"swagger": "2.0"}

    def test_loads_yaml_from_url(self) -> None:
        mock_response = httpx.Response(
            status_code=200,
            text='openapi: "3.1.0"\n',
            headers={"content-type": "application/x-yaml"},
            request=httpx.Request("GET", "https://example.com/spec.yaml"),
        )
        with patch("httpstep.parser.loader.httpx.get", return_value=mock_response):
            result = _load_from_url("https://example.com/spec.yaml")
        assert result == {"openapi": "3.1.0"}

    def test_http_error_raises(self) -> None:
        mock_response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("httpstep.parser.loader.httpx.get", return_value=mock_response):
            with pytest.raises(SpecLoadError, match="HTTP 404"):
                _load_from_url("https://example.com/missing.json")

    def test_connection_error_raises(self) -> None:
        with patch(
            "httpstep.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(SpecLoadError, match="Failed to fetch"):
                _load_from_url("https://unreachable.example.com/spec.json")

    def test_malformed_url_is_not_fetched(self) -> None:
        with patch("httpstep.parser.loader.httpx.get") as mock_get:
            with pytest.raises(MalformedUrlError):
                _load_from_url("ftp://example.com/spec.json")
        mock_get.assert_not_called()


# ---------------------------------------------------------------------------
# check_url / url_origin
# ---------------------------------------------------------------------------


class TestUrlChecks:
    """Test spec URL validation and origin extraction."""

    def test_accepts_https(self) -> None:
        assert check_url("https://api.chucknorris.io/documentation").host == "api.chucknorris.io"

    @pytest.mark.parametrize(
        "url",
        ["ftp://example.com/spec.json", "not a url", "https://", "documentation"],
    )
    def test_rejects_malformed(self, url: str) -> None:
        with pytest.raises(MalformedUrlError):
            check_url(url)

    def test_malformed_url_is_a_load_error(self) -> None:
        with pytest.raises(SpecLoadError):
            check_url("mailto:someone@example.com")

    def test_origin_drops_path_and_query(self) -> None:
        assert url_origin("https://api.chucknorris.io/documentation?x=1") == "https://api.chucknorris.io"

    def test_origin_keeps_port(self) -> None:
        assert url_origin("http://localhost:8080/v2/swagger.json") == "http://localhost:8080"


# ---------------------------------------------------------------------------
# parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    """Test content parsing with format detection."""

    def test_parses_json(self) -> None:
        assert parse_content('{"key": "value"}') == {"key": "value"}

    def test_parses_yaml(self) -> None:
        assert parse_content("key: value\nnested:\n  a: 1") == {"key": "value", "nested": {"a": 1}}

    def test_json_hint_forces_json_only(self) -> None:
        with pytest.raises(SpecLoadError, match="Invalid JSON"):
            parse_content("key: value", hint="json")

    def test_yaml_hint_skips_json(self) -> None:
        assert parse_content("key: value", hint="yaml") == {"key": "value"}

    def test_yaml_keys_become_strings(self) -> None:
        content = "responses:\n  200:\n    description: ok\n  true: yes\n"
        assert parse_content(content) == {
            "responses": {"200": {"description": "ok"}, "True": True}
        }

    def test_scalar_document_raises(self) -> None:
        with pytest.raises(SpecLoadError, match="must be a JSON/YAML object"):
            parse_content("just a string")

    def test_unparseable_content_raises(self) -> None:
        with pytest.raises(SpecLoadError, match="Failed to parse"):
            parse_content("{unclosed: [")


# ---------------------------------------------------------------------------
# detect_spec_version
# ---------------------------------------------------------------------------


class TestDetectSpecVersion:
    """Test version detection from the swagger/openapi field."""

    def test_swagger_2_0(self) -> None:
        assert detect_spec_version({"swagger": "2.0"}) == SpecVersion.SWAGGER_2_0

    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3"])
    def test_openapi_3_0(self, version: str) -> None:
        assert detect_spec_version({"openapi": version}) == SpecVersion.OPENAPI_3_0

    def test_openapi_3_1(self) -> None:
        assert detect_spec_version({"openapi": "3.1.0"}) == SpecVersion.OPENAPI_3_1

    def test_swagger_1_2_rejected(self) -> None:
        with pytest.raises(SpecLoadError, match="Unsupported Swagger version"):
            detect_spec_version({"swagger": "1.2"})

    def test_openapi_4_rejected(self) -> None:
        with pytest.raises(SpecLoadError, match="Unsupported OpenAPI version"):
            detect_spec_version({"openapi": "4.0.0"})

    def test_missing_version_field(self) -> None:
        with pytest.raises(SpecLoadError, match="Missing 'swagger' or 'openapi'"):
            detect_spec_version({"info": {"title": "T"}})
