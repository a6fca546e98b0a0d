"""Asynchronous spec loading with a never-raising boundary.

:class:`SpecLoader` is what a hosting editor calls when the user points the
step at an OpenAPI document.  It fetches the document (for URL input) with
:class:`httpx.AsyncClient`, detects its version, validates it, resolves
``$ref`` pointers and extracts the endpoint list.

Every failure -- malformed URL, network error, HTTP error status, invalid
JSON/YAML, unsupported version, schema violation -- is caught at the
boundary, logged, and returned as a failed
:class:`~httpstep.models.LoadResult`.  Callers that only want the endpoint
list use :meth:`SpecLoader.load_endpoints`, which yields an empty list on
failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Optional, Union

import httpx

from httpstep.exceptions import SpecLoadError
from httpstep.models import Endpoint, LoadResult
from httpstep.parser.extractor import derive_base_path, extract_endpoints
from httpstep.parser.loader import (
    _load_from_file,
    check_url,
    content_type_hint,
    detect_spec_version,
    parse_content,
    url_origin,
)
from httpstep.parser.resolver import resolve_refs
from httpstep.parser.validator import validate_spec

logger = logging.getLogger(__name__)

SpecInput = Union[str, dict[str, Any]]


class SpecLoader:
    """Turns a spec URL or an already-parsed document into endpoints.

    Args:
        timeout: Request timeout in seconds for URL input.
        verify_ssl: Verify TLS certificates when fetching by URL.
        transport: Optional :mod:`httpx` transport, mainly for tests
            (``httpx.MockTransport``).

    Example::

        loader = SpecLoader()
        result = await loader.load("https://petstore.swagger.io/v2/swagger.json")
        if result.ok:
            for endpoint in result.endpoints:
                print(endpoint.name)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport

    async def load(self, source: SpecInput) -> LoadResult:
        """Load a spec given as a URL string or a parsed document dict.

        Never raises; failures come back as ``LoadResult.failure``.
        """
        return await self._guarded(self._read(source))

    async def load_text(self, text: str) -> LoadResult:
        """Load a spec from raw document text (JSON, or YAML as a fallback)."""

        async def read() -> tuple[dict[str, Any], Optional[str]]:
            return parse_content(text), None

        return await self._guarded(read())

    async def load_file(self, path: str) -> LoadResult:
        """Load a spec from a local file without blocking the event loop."""

        async def read() -> tuple[dict[str, Any], Optional[str]]:
            return await asyncio.to_thread(_load_from_file, path), None

        return await self._guarded(read())

    async def load_endpoints(self, source: SpecInput) -> list[Endpoint]:
        """Load a spec and return only its endpoints (empty on failure)."""
        result = await self.load(source)
        return result.endpoints

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    async def _guarded(
        self, reading: Awaitable[tuple[dict[str, Any], Optional[str]]]
    ) -> LoadResult:
        try:
            document, base_path = await reading
            return build_result(document, base_path)
        except SpecLoadError as exc:
            logger.warning("Failed to load spec: %s", exc)
            return LoadResult.failure(str(exc))
        except Exception as exc:
            logger.warning("Unexpected error while loading spec: %s", exc, exc_info=True)
            return LoadResult.failure(f"Unexpected error while loading spec: {exc}")

    async def _read(self, source: SpecInput) -> tuple[dict[str, Any], Optional[str]]:
        if isinstance(source, dict):
            return source, None
        if not isinstance(source, str):
            raise SpecLoadError(
                f"Spec input must be a URL or a document, got {type(source).__name__}"
            )
        return await self._fetch(source), url_origin(source)

    async def _fetch(self, url: str) -> dict[str, Any]:
        check_url(url)
        logger.debug("Fetching spec from %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                verify=self._verify_ssl,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SpecLoadError(
                f"HTTP {exc.response.status_code} fetching spec from {url}"
            ) from exc
        except httpx.RequestError as exc:
            raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

        return parse_content(response.text, hint=content_type_hint(response))


def build_result(document: dict[str, Any], base_path: Optional[str] = None) -> LoadResult:
    """Validate, dereference, and extract *document* into a successful result.

    Args:
        document: The raw document dictionary.
        base_path: Base path already known from the input (the origin of the
            spec URL). When ``None`` it is derived from the document.

    Raises:
        SpecLoadError: If the version is unsupported, validation fails, or a
            ``$ref`` cannot be resolved.
    """
    version = detect_spec_version(document)
    validate_spec(document, version)
    resolved = resolve_refs(document)
    endpoints = extract_endpoints(resolved, version)
    if base_path is None:
        base_path = derive_base_path(resolved, version)
    logger.debug("Loaded %d endpoints from OpenAPI %s document", len(endpoints), version.value)
    return LoadResult.success(endpoints, base_path=base_path, version=version)
