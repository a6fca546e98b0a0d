"""Tests for endpoint extraction and base-path derivation."""

from __future__ import annotations

import pytest

from httpstep.models import SpecVersion
from httpstep.parser.extractor import derive_base_path, extract_endpoints
from httpstep.parser.resolver import resolve_refs


@pytest.fixture
def swagger_endpoints(swagger_20_raw):
    return extract_endpoints(resolve_refs(swagger_20_raw), SpecVersion.SWAGGER_2_0)


@pytest.fixture
def petstore_endpoints(petstore_30_raw):
    return extract_endpoints(resolve_refs(petstore_30_raw), SpecVersion.OPENAPI_3_0)


@pytest.fixture
def tree_endpoints(tree_31_raw):
    return extract_endpoints(resolve_refs(tree_31_raw), SpecVersion.OPENAPI_3_1)


# ---------------------------------------------------------------------------
# Endpoint list
# ---------------------------------------------------------------------------


class TestEndpointOrder:
    """Endpoints follow the order in which the document declares its paths."""

    def test_swagger_order(self, swagger_endpoints) -> None:
        assert [e.name for e in swagger_endpoints] == [
            "/jokes/random",
            "/jokes/categories",
            "/jokes/{id}",
        ]

    def test_openapi_order(self, petstore_endpoints) -> None:
        assert [e.name for e in petstore_endpoints] == [
            "/pets",
            "/pets/{petId}",
            "/pets/{petId}/owner",
        ]

    def test_no_paths(self) -> None:
        spec = {"swagger": "2.0", "info": {"title": "T", "version": "1"}, "paths": {}}
        assert extract_endpoints(spec, SpecVersion.SWAGGER_2_0) == []

    def test_missing_paths_key(self) -> None:
        assert extract_endpoints({"openapi": "3.1.0"}, SpecVersion.OPENAPI_3_1) == []


class TestOperations:
    """Test the per-endpoint operation map."""

    def test_methods_upper_case_in_declaration_order(self, swagger_endpoints) -> None:
        assert swagger_endpoints[2].methods == ["GET", "DELETE"]

    def test_path_level_parameters_are_not_operations(self, petstore_endpoints) -> None:
        assert "PARAMETERS" not in petstore_endpoints[1].operations

    def test_path_item_ref_is_inlined(self, petstore_endpoints) -> None:
        owner = petstore_endpoints[2]
        assert owner.methods == ["GET"]
        assert owner.operations["GET"]["operationId"] == "showOwner"

    def test_trace_kept_for_openapi_3(self, tree_endpoints) -> None:
        assert tree_endpoints[0].methods == ["GET", "TRACE"]

    def test_trace_ignored_for_swagger(self) -> None:
        spec = {"paths": {"/x": {"get": {}, "trace": {}}}}
        endpoints = extract_endpoints(spec, SpecVersion.SWAGGER_2_0)
        assert endpoints[0].methods == ["GET"]

    def test_empty_path_item(self, tree_endpoints) -> None:
        health = tree_endpoints[1]
        assert health.name == "/health"
        assert health.path_item == {}
        assert health.methods == []

    def test_non_mapping_path_item(self) -> None:
        endpoints = extract_endpoints({"paths": {"/x": None}}, SpecVersion.OPENAPI_3_0)
        assert endpoints[0].name == "/x"
        assert endpoints[0].path_item is None
        assert endpoints[0].operations == {}


class TestProduces:
    """Test response media type collection."""

    def test_swagger_operation_produces(self, swagger_endpoints) -> None:
        assert swagger_endpoints[0].produces["GET"] == ["application/json", "text/plain"]

    def test_swagger_falls_back_to_global(self, swagger_endpoints) -> None:
        assert swagger_endpoints[1].produces["GET"] == ["application/json"]

    def test_swagger_explicit_empty_overrides_global(self, swagger_endpoints) -> None:
        assert swagger_endpoints[2].produces["DELETE"] == []

    def test_openapi_success_responses_first(self, petstore_endpoints) -> None:
        assert petstore_endpoints[0].produces["GET"] == [
            "application/json",
            "application/xml",
            "application/problem+json",
        ]

    def test_openapi_response_without_content(self, petstore_endpoints) -> None:
        assert petstore_endpoints[0].produces["POST"] == []


# ---------------------------------------------------------------------------
# Base path
# ---------------------------------------------------------------------------


class TestDeriveBasePath:
    """Test base-path derivation from server declarations."""

    def test_swagger_host_and_base_path(self, swagger_20_raw) -> None:
        assert derive_base_path(swagger_20_raw, SpecVersion.SWAGGER_2_0) == "https://api.chucknorris.io"

    def test_swagger_default_scheme(self) -> None:
        spec = {"host": "api.example.com", "basePath": "/v2"}
        assert derive_base_path(spec, SpecVersion.SWAGGER_2_0) == "https://api.example.com/v2"

    def test_swagger_without_host(self) -> None:
        assert derive_base_path({"basePath": "/v2"}, SpecVersion.SWAGGER_2_0) is None

    def test_openapi_first_server(self, petstore_30_raw) -> None:
        assert (
            derive_base_path(petstore_30_raw, SpecVersion.OPENAPI_3_0)
            == "https://petstore.example.com/v1"
        )

    def test_server_variables_use_defaults(self, tree_31_raw) -> None:
        assert (
            derive_base_path(tree_31_raw, SpecVersion.OPENAPI_3_1)
            == "https://eu.tree.example.com/api"
        )

    def test_relative_server_is_ignored(self) -> None:
        spec = {"servers": [{"url": "/v1"}]}
        assert derive_base_path(spec, SpecVersion.OPENAPI_3_0) is None

    def test_no_servers(self) -> None:
        assert derive_base_path({}, SpecVersion.OPENAPI_3_1) is None
