"""Tests for $ref resolution, including circular references."""

from __future__ import annotations

import pytest

from httpstep.exceptions import SpecLoadError
from httpstep.parser.resolver import resolve_refs


class TestResolveRefs:
    """Test internal $ref resolution."""

    def test_resolves_simple_ref(self) -> None:
        spec = {
            "definitions": {"Joke": {"type": "object"}},
            "paths": {"/j": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/Joke"}}}}}},
        }
        resolved = resolve_refs(spec)
        schema = resolved["paths"]["/j"]["get"]["responses"]["200"]["schema"]
        assert schema == {"type": "object"}

    def test_does_not_mutate_input(self) -> None:
        spec = {"a": {"$ref": "#/b"}, "b": {"x": 1}}
        resolve_refs(spec)
        assert spec["a"] == {"$ref": "#/b"}

    def test_resolves_path_item_ref(self, petstore_30_raw) -> None:
        resolved = resolve_refs(petstore_30_raw)
        owner = resolved["paths"]["/pets/{petId}/owner"]
        assert "get" in owner
        assert owner["get"]["operationId"] == "showOwner"

    def test_resolves_nested_chain(self) -> None:
        spec = {"a": {"$ref": "#/b"}, "b": {"$ref": "#/c"}, "c": {"value": 3}}
        assert resolve_refs(spec)["a"] == {"value": 3}

    def test_json_pointer_escaping(self) -> None:
        spec = {
            "paths": {"/users/{id}": {"get": {"operationId": "getUser"}}},
            "link": {"$ref": "#/paths/~1users~1{id}/get"},
        }
        assert resolve_refs(spec)["link"] == {"operationId": "getUser"}

    def test_array_index(self) -> None:
        spec = {"items": [{"v": 0}, {"v": 1}], "pick": {"$ref": "#/items/1"}}
        assert resolve_refs(spec)["pick"] == {"v": 1}

    def test_non_string_ref_is_plain_data(self) -> None:
        # A schema property literally named "$ref"
        spec = {"properties": {"$ref": {"type": "string"}}}
        assert resolve_refs(spec) == spec


class TestCircularRefs:
    """Test that cycles are left unresolved instead of recursing forever."""

    def test_self_reference(self, tree_31_raw) -> None:
        resolved = resolve_refs(tree_31_raw)
        node = resolved["components"]["schemas"]["Node"]
        child = node["properties"]["children"]["items"]
        assert child["type"] == "object"
        assert child["properties"]["children"]["items"] == {"$ref": "#/components/schemas/Node"}

    def test_mutual_reference(self, petstore_30_raw) -> None:
        resolved = resolve_refs(petstore_30_raw)
        pet = resolved["components"]["schemas"]["Pet"]
        owner = pet["properties"]["owner"]
        assert owner["type"] == "object"
        inner_pet = owner["properties"]["pets"]["items"]
        assert inner_pet["required"] == ["id", "name"]
        assert inner_pet["properties"]["owner"] == {"$ref": "#/components/schemas/Owner"}

    def test_sibling_refs_resolve_independently(self) -> None:
        spec = {
            "target": {"v": 1},
            "pair": [{"$ref": "#/target"}, {"$ref": "#/target"}],
        }
        assert resolve_refs(spec)["pair"] == [{"v": 1}, {"v": 1}]


class TestResolveErrors:
    """Test failures surfaced as SpecLoadError."""

    def test_missing_target(self) -> None:
        with pytest.raises(SpecLoadError, match="not found"):
            resolve_refs({"a": {"$ref": "#/missing"}})

    def test_external_ref(self) -> None:
        with pytest.raises(SpecLoadError, match="External \\$ref"):
            resolve_refs({"a": {"$ref": "other.yaml#/Pet"}})

    def test_bad_array_index(self) -> None:
        with pytest.raises(SpecLoadError, match="invalid array index"):
            resolve_refs({"items": [1], "a": {"$ref": "#/items/5"}})
