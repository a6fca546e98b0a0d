"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

Performs a recursive deep-copy traversal of the document, replacing every
internal ``$ref`` (``#/...``) with the object it points to.  This applies to
path items as well as schemas, so an endpoint whose path item is a ``$ref``
ends up with its operations inlined.

Circular references are left unresolved: the ``$ref`` dict is kept at the
cycle point, so consumers may encounter residual ``{"$ref": ...}`` nodes but
resolution never recurses forever.

The single public function is :func:`resolve_refs`.
"""

from __future__ import annotations

import copy
from typing import Any

from httpstep.exceptions import SpecLoadError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Resolve all internal ``$ref`` pointers in *spec*.

    Args:
        spec: The raw OpenAPI document dictionary.

    Returns:
        A **new** dictionary (deep copy) with every resolvable ``$ref``
        replaced by its target.

    Raises:
        SpecLoadError: If a ``$ref`` points to a non-existent location, or if
            an external (non-``#/``) reference is encountered.
    """
    root = copy.deepcopy(spec)
    return _deep_resolve(root, root, seen=None)


def _resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Raises:
        SpecLoadError: If the reference is external or any pointer segment
            does not exist in the document.
    """
    if not ref.startswith("#/"):
        raise SpecLoadError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecLoadError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecLoadError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecLoadError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def _deep_resolve(obj: Any, root: dict[str, Any], seen: set[str] | None = None) -> Any:
    """Recursively resolve all ``$ref`` pointers within *obj*.

    ``seen`` holds the refs on the current resolution stack. A ref already on
    the stack is a cycle and is returned unresolved. Each branch gets its own
    copy of ``seen`` so sibling references do not interfere.
    """
    if seen is None:
        seen = set()

    if isinstance(obj, dict):
        if "$ref" in obj and isinstance(obj["$ref"], str):
            ref = obj["$ref"]
            if ref in seen:
                return obj
            seen = seen | {ref}
            resolved = _resolve_ref(ref, root)
            return _deep_resolve(resolved, root, seen)

        return {key: _deep_resolve(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, seen) for item in obj]

    return obj
