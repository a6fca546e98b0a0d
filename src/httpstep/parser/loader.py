"""Load OpenAPI documents from a URL, local file, stdin, or raw text.

This module handles the blocking I/O used by the command line and the
format detection shared with the asynchronous
:class:`~httpstep.parser.spec_loader.SpecLoader`.  Documents may be JSON or
YAML; JSON is tried first.

Public functions:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`parse_content` -- Parse raw text into a document dict.
* :func:`check_url` -- Reject spec URLs without an http(s) scheme or host.
* :func:`url_origin` -- ``scheme://host[:port]`` of a spec URL.
* :func:`detect_spec_version` -- Map the ``swagger``/``openapi`` field to a
  :class:`~httpstep.models.SpecVersion`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from httpstep.exceptions import MalformedUrlError, SpecLoadError
from httpstep.models import SpecVersion


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        timeout: Request timeout in seconds for URL sources.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecLoadError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif is_url(source):
        return _load_from_url(source, timeout=timeout)
    else:
        return _load_from_file(source)


def is_url(source: str) -> bool:
    """Return True when *source* should be treated as a URL rather than a path."""
    return "://" in source


def check_url(url: str) -> httpx.URL:
    """Parse *url* and make sure it can be used to fetch a document.

    Raises:
        MalformedUrlError: If the URL cannot be parsed, does not use the
            http or https scheme, or has no host.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise MalformedUrlError(f"Malformed spec URL {url!r}: {exc}") from exc

    if parsed.scheme not in ("http", "https"):
        raise MalformedUrlError(
            f"Malformed spec URL {url!r}: expected an http or https URL"
        )
    if not parsed.host:
        raise MalformedUrlError(f"Malformed spec URL {url!r}: missing host")
    return parsed


def url_origin(url: str) -> str:
    """Return the origin (``scheme://host[:port]``) of *url*.

    Example::

        >>> url_origin("https://api.chucknorris.io/documentation")
        'https://api.chucknorris.io'
    """
    parsed = check_url(url)
    return f"{parsed.scheme}://{parsed.netloc.decode('ascii')}"


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin.

    Raises:
        SpecLoadError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecLoadError("No input received from stdin")

    return parse_content(content)


def _load_from_url(url: str, timeout: float = 30.0) -> dict[str, Any]:
    """Fetch a document from *url*. Supports JSON and YAML responses.

    Raises:
        MalformedUrlError: If *url* is not an http(s) URL.
        SpecLoadError: If the URL cannot be fetched or content cannot be parsed.
    """
    check_url(url)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    return parse_content(response.text, hint=content_type_hint(response))


def content_type_hint(response: httpx.Response) -> str:
    """Turn a response's content-type header into a :func:`parse_content` hint."""
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type:
        return "yaml"
    return ""


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    The ``.json``, ``.yaml`` and ``.yml`` extensions select the parser;
    anything else falls back to content-based detection.

    Raises:
        SpecLoadError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecLoadError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Mapping keys of YAML documents are converted to strings.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecLoadError: If the content cannot be parsed as either format or
            is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SpecLoadError(
                    "Spec must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecLoadError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SpecLoadError(
                "Spec must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return _string_keys(result)
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecLoadError(msg)


def _string_keys(node: Any) -> Any:
    """Turn every YAML mapping key into a string.

    YAML reads unquoted status codes (``200:``) and booleans as scalars, while
    OpenAPI keys are always strings.
    """
    if isinstance(node, dict):
        return {str(key): _string_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_string_keys(item) for item in node]
    return node


def detect_spec_version(spec: dict[str, Any]) -> SpecVersion:
    """Return the major version a document declares.

    Accepts ``swagger: "2.0"``, ``openapi: 3.0.x`` and ``openapi: 3.1.x``.

    Raises:
        SpecLoadError: If the version is missing or unsupported.
    """
    if "swagger" in spec:
        swagger_ver = str(spec["swagger"])
        if swagger_ver == "2.0":
            return SpecVersion.SWAGGER_2_0
        raise SpecLoadError(
            f"Unsupported Swagger version: {swagger_ver}. Only 2.0 is supported."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecLoadError(
            "Missing 'swagger' or 'openapi' field. Is this an OpenAPI document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3.0."):
        return SpecVersion.OPENAPI_3_0
    if version_str.startswith("3.1."):
        return SpecVersion.OPENAPI_3_1

    raise SpecLoadError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Supported versions are Swagger 2.0, OpenAPI 3.0.x and 3.1.x."
    )
