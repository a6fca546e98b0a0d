"""Extract endpoints and a base path from resolved OpenAPI documents.

This module walks a ``$ref``-resolved document and builds one
:class:`~httpstep.models.Endpoint` per path item, keeping the order in which
the document declares its paths.  For every operation it also records the
response media types, which the composer uses to pick a step's content type:

* Swagger 2.0 -- the operation's ``produces`` list, falling back to the
  document-level ``produces``.
* OpenAPI 3.x -- the ``content`` keys of the operation's responses, success
  (2xx) responses first, then ``default``, then the rest.

:func:`derive_base_path` reads the server declaration of a document (the
first ``servers`` entry for 3.x, ``schemes``/``host``/``basePath`` for 2.0).
"""

from __future__ import annotations

import re
from typing import Any, Optional

from httpstep.models import Endpoint, HTTPMethod, SpecVersion

# TRACE is not a Swagger 2.0 path-item field
_SWAGGER_METHODS = frozenset(m.value for m in HTTPMethod if m != HTTPMethod.TRACE)
_OPENAPI_METHODS = frozenset(m.value for m in HTTPMethod)

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


def extract_endpoints(spec: dict[str, Any], version: SpecVersion) -> list[Endpoint]:
    """Build the endpoint list of a resolved document.

    Args:
        spec: The ``$ref``-resolved document dictionary.
        version: The document's declared version.

    Returns:
        One :class:`~httpstep.models.Endpoint` per entry of ``paths``, in
        document order.  An empty list when the document declares no paths.

    Example::

        resolved = resolve_refs(raw)
        for endpoint in extract_endpoints(resolved, SpecVersion.OPENAPI_3_0):
            print(endpoint.name, endpoint.methods)
    """
    paths = spec.get("paths") or {}
    methods = _SWAGGER_METHODS if version == SpecVersion.SWAGGER_2_0 else _OPENAPI_METHODS
    global_produces = spec.get("produces") or []
    endpoints: list[Endpoint] = []

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            # Declared without a body (or a residual circular $ref target)
            endpoints.append(Endpoint(name=str(path), path_item=None))
            continue

        operations: dict[str, dict[str, Any]] = {}
        produces: dict[str, list[str]] = {}
        for key, operation in path_item.items():
            if key not in methods or not isinstance(operation, dict):
                continue
            method = key.upper()
            operations[method] = operation
            if version == SpecVersion.SWAGGER_2_0:
                # An explicit empty list overrides the document-level default
                declared = operation["produces"] if "produces" in operation else global_produces
                produces[method] = list(declared or [])
            else:
                produces[method] = _response_media_types(operation.get("responses") or {})

        endpoints.append(
            Endpoint(
                name=str(path),
                path_item=path_item,
                operations=operations,
                produces=produces,
            )
        )

    return endpoints


def _response_media_types(responses: dict[str, Any]) -> list[str]:
    """Collect the media types of an OpenAPI 3.x ``responses`` object.

    Success responses come first so that the first entry is the type a
    poller should expect back.
    """

    def rank(status: str) -> int:
        if status.startswith("2"):
            return 0
        if status == "default":
            return 1
        return 2

    media_types: list[str] = []
    for status in sorted(responses, key=rank):
        response = responses[status]
        if not isinstance(response, dict):
            continue
        for media_type in response.get("content") or {}:
            if media_type not in media_types:
                media_types.append(media_type)
    return media_types


def derive_base_path(spec: dict[str, Any], version: SpecVersion) -> Optional[str]:
    """Derive an absolute base path from the document's server declaration.

    Returns:
        The base path without a trailing slash, or ``None`` when the document
        does not declare an absolute server location.
    """
    if version == SpecVersion.SWAGGER_2_0:
        host = spec.get("host")
        if not host:
            return None
        schemes = spec.get("schemes") or ["https"]
        base_path = (spec.get("basePath") or "").rstrip("/")
        return f"{schemes[0]}://{host}{base_path}"

    servers = spec.get("servers") or []
    if not servers or not isinstance(servers[0], dict):
        return None
    server = servers[0]
    url = _expand_server_variables(str(server.get("url", "")), server.get("variables") or {})
    if not url.startswith(("http://", "https://")):
        return None
    return url.rstrip("/")


def _expand_server_variables(url: str, variables: dict[str, Any]) -> str:
    """Substitute ``{name}`` server variables with their declared defaults."""

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(substitute, url)
