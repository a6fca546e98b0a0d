"""OpenAPI document ingestion -- load, validate, resolve ``$ref``, extract endpoints.

This sub-package turns a Swagger 2.0 / OpenAPI 3.0 / 3.1 document (JSON or
YAML; URL, local file, stdin or raw text) into an ordered list of
:class:`~httpstep.models.Endpoint` objects.

Typical usage::

    from httpstep.parser import SpecLoader

    result = await SpecLoader().load("https://petstore.swagger.io/v2/swagger.json")
    names = [endpoint.name for endpoint in result.endpoints]

Sub-modules:

* :mod:`~httpstep.parser.loader` -- blocking I/O (URL, file, stdin), format
  detection, URL checks and version detection.
* :mod:`~httpstep.parser.validator` -- schema validation per version.
* :mod:`~httpstep.parser.resolver` -- recursive ``$ref`` resolution that
  leaves circular references in place.
* :mod:`~httpstep.parser.extractor` -- endpoint and base-path extraction.
* :mod:`~httpstep.parser.spec_loader` -- the asynchronous
  :class:`SpecLoader` boundary that never raises.
"""

from httpstep.parser.extractor import derive_base_path, extract_endpoints
from httpstep.parser.loader import detect_spec_version, load_spec, parse_content
from httpstep.parser.spec_loader import SpecLoader, build_result

__all__ = [
    "SpecLoader",
    "build_result",
    "derive_base_path",
    "detect_spec_version",
    "extract_endpoints",
    "load_spec",
    "parse_content",
]
