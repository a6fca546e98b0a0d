"""Schema validation of OpenAPI documents with :mod:`openapi_spec_validator`.

The validator class is chosen from the version the document declares, so a
Swagger 2.0 document is checked against the 2.0 schema, an OpenAPI 3.0.x
document against 3.0 and so on.  Validation runs on the raw document (before
``$ref`` resolution) because the validator follows references itself and
copes with recursive schemas.  Schema violations surface as
:class:`jsonschema.exceptions.ValidationError`, the base of the
validator-specific OpenAPI errors.
"""

from __future__ import annotations

from typing import Any

from jsonschema.exceptions import ValidationError
from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
    validate,
)

from httpstep.exceptions import SpecLoadError
from httpstep.models import SpecVersion

_VALIDATORS = {
    SpecVersion.SWAGGER_2_0: OpenAPIV2SpecValidator,
    SpecVersion.OPENAPI_3_0: OpenAPIV30SpecValidator,
    SpecVersion.OPENAPI_3_1: OpenAPIV31SpecValidator,
}


def validate_spec(spec: dict[str, Any], version: SpecVersion) -> None:
    """Validate *spec* against the schema of *version*.

    Args:
        spec: The raw document dictionary.
        version: The version detected by
            :func:`~httpstep.parser.loader.detect_spec_version`.

    Raises:
        SpecLoadError: If the document does not conform to the schema.
    """
    try:
        validate(spec, cls=_VALIDATORS[version])
    except ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path)
        where = f" at '{location}'" if location else ""
        raise SpecLoadError(
            f"Spec failed OpenAPI {version.value} validation{where}: {exc.message}"
        ) from exc
