"""Tests for building the plan of a single endpoint."""

from __future__ import annotations

import pytest
from conftest import DATASET, INTEGER, STRING, body, header, path, query

from conjure_stub_generator.conjure_types import (
    AuthType,
    EndpointDefinition,
    ListType,
    LocationKind,
    MapType,
    OptionalType,
    PrimitiveKind,
)
from conjure_stub_generator.errors import (
    DuplicateArgumentNameError,
    IllegalPlacementError,
    InvalidAuthLocationError,
    MultipleBodyArgumentsError,
)
from conjure_stub_generator.planner import AUTH_HEADER_NAME, AUTH_HEADER_PARAM_NAME, build_endpoint_plan
from conjure_stub_generator.planner_dto import DecoderKind, EncodingKind


def test_zero_arguments_and_no_return_type():
    plan = build_endpoint_plan(EndpointDefinition(name="ping"))

    assert plan.instructions == ()
    assert plan.decoder.kind is DecoderKind.EMPTY
    assert plan.decoder.type is None
    assert plan.decoder.handle_name == "pingDeserializer"
    assert plan.body_instruction is None


def test_return_type_gives_typed_decoder(get_dataset):
    plan = build_endpoint_plan(get_dataset)

    assert plan.decoder.kind is DecoderKind.TYPED
    assert plan.decoder.type == OptionalType(DATASET)
    assert plan.decoder.handle_name == "getDatasetDeserializer"


def test_instructions_follow_declaration_order():
    endpoint = EndpointDefinition(
        name="updateDataset",
        args=(
            path("datasetRid", STRING),
            query("branch", "branch", OptionalType(STRING)),
            body("update", DATASET),
            header("traceId", "X-Trace-Id", STRING),
        ),
        returns=DATASET,
    )
    plan = build_endpoint_plan(endpoint)

    assert [i.argument.name for i in plan.instructions] == ["datasetRid", "branch", "update", "traceId"]
    assert [i.slot for i in plan.instructions] == [
        LocationKind.PATH,
        LocationKind.QUERY,
        LocationKind.BODY,
        LocationKind.HEADER,
    ]
    assert plan.body_instruction is plan.instructions[2]


def test_query_arguments_sharing_a_wire_name_both_survive():
    endpoint = EndpointDefinition(
        name="search",
        args=(
            query("first", "id", INTEGER),
            query("second", "id", ListType(INTEGER)),
        ),
    )
    plan = build_endpoint_plan(endpoint)

    assert len(plan.instructions) == 2
    first, second = plan.instructions
    assert (first.argument.name, first.wire_name, first.multi_valued) == ("first", "id", False)
    assert (second.argument.name, second.wire_name, second.multi_valued) == ("second", "id", True)


class TestAuth:
    def test_header_auth_is_placed_first(self, get_dataset):
        plan = build_endpoint_plan(get_dataset)

        auth, rid = plan.instructions
        assert auth.slot is LocationKind.HEADER
        assert auth.wire_name == AUTH_HEADER_NAME == "Authorization"
        assert auth.argument.name == AUTH_HEADER_PARAM_NAME
        assert auth.encoding.kind is EncodingKind.PLAIN
        assert auth.encoding.primitive is PrimitiveKind.BEARERTOKEN
        assert auth.encoding.name == "BearerToken"
        assert rid.argument.name == "datasetRid"

    def test_cookie_auth_is_rejected(self):
        endpoint = EndpointDefinition(name="getVersion", auth=AuthType.COOKIE)

        with pytest.raises(InvalidAuthLocationError) as excinfo:
            build_endpoint_plan(endpoint)
        assert excinfo.value.endpoint_name == "getVersion"
        assert excinfo.value.auth is AuthType.COOKIE

    def test_unauthenticated_endpoint_has_no_auth_header(self):
        plan = build_endpoint_plan(EndpointDefinition(name="ping", args=(query("q", "q", STRING),)))
        assert [i.argument.name for i in plan.instructions] == ["q"]

    def test_argument_clashing_with_auth_header_param(self):
        endpoint = EndpointDefinition(
            name="getDataset",
            args=(header(AUTH_HEADER_PARAM_NAME, "X-Other", STRING),),
            auth=AuthType.HEADER,
        )
        with pytest.raises(DuplicateArgumentNameError):
            build_endpoint_plan(endpoint)


class TestStructuralErrors:
    def test_duplicate_argument_name(self):
        endpoint = EndpointDefinition(name="search", args=(query("q", "a", STRING), header("q", "X-Q", STRING)))

        with pytest.raises(DuplicateArgumentNameError) as excinfo:
            build_endpoint_plan(endpoint)
        assert excinfo.value.argument_name == "q"
        assert excinfo.value.endpoint_name == "search"

    def test_more_than_one_body(self):
        endpoint = EndpointDefinition(name="create", args=(body("a", DATASET), body("b", STRING)))

        with pytest.raises(MultipleBodyArgumentsError, match="a, b"):
            build_endpoint_plan(endpoint)


def test_first_illegal_argument_aborts_the_endpoint():
    endpoint = EndpointDefinition(
        name="search",
        args=(
            query("ok", "ok", STRING),
            query("labels", "labels", MapType(STRING, STRING)),
            header("tags", "X-Tags", MapType(STRING, INTEGER)),
        ),
    )
    with pytest.raises(IllegalPlacementError) as excinfo:
        build_endpoint_plan(endpoint)
    assert excinfo.value.argument_name == "labels"
    assert excinfo.value.endpoint_name == "search"


def test_plan_renders_to_dict(get_dataset):
    data = build_endpoint_plan(get_dataset).to_dict()

    assert data["endpoint"] == "getDataset"
    assert data["httpMethod"] == "GET"
    assert data["httpPath"] == "/catalog/datasets/{datasetRid}"
    assert data["instructions"][0] == {
        "argument": "authHeader",
        "slot": "header",
        "wireName": "Authorization",
        "encoding": {"kind": "plain", "name": "BearerToken"},
        "multiValued": False,
        "conditional": False,
    }
    assert data["decoder"] == {
        "kind": "typed",
        "handle": "getDatasetDeserializer",
        "type": "optional<com.example.catalog.Dataset>",
    }
