"""Tests for planning whole services."""

from __future__ import annotations

import logging

import pytest
from conftest import DATASET, STRING, body, header, query

from conjure_stub_generator.conjure_types import (
    AuthType,
    EndpointDefinition,
    MapType,
    ServiceDefinition,
)
from conjure_stub_generator.errors import (
    DuplicateEndpointNameError,
    IllegalPlacementError,
    InvalidAuthLocationError,
    ServicePlanningError,
)
from conjure_stub_generator.planner import build_service_plan

VALID = EndpointDefinition(name="getDataset", args=(query("id", "id", STRING),), returns=DATASET)
ILLEGAL = EndpointDefinition(name="getLabels", args=(header("labels", "X-Labels", MapType(STRING, STRING)),))
COOKIE = EndpointDefinition(name="getVersion", auth=AuthType.COOKIE)


def test_plans_every_endpoint_in_declared_order():
    create = EndpointDefinition(name="createDataset", args=(body("request", DATASET),), auth=AuthType.HEADER)
    ping = EndpointDefinition(name="ping")
    service = ServiceDefinition(name="CatalogService", endpoints=(VALID, create, ping), package="com.example")

    plan = build_service_plan(service)

    assert plan.service is service
    assert [p.endpoint.name for p in plan.endpoint_plans] == ["getDataset", "createDataset", "ping"]
    assert plan.get("createDataset").body_instruction is not None


def test_get_unknown_endpoint():
    plan = build_service_plan(ServiceDefinition(name="CatalogService", endpoints=(VALID,)))
    with pytest.raises(KeyError):
        plan.get("missing")


def test_empty_service():
    plan = build_service_plan(ServiceDefinition(name="EmptyService"))
    assert plan.endpoint_plans == ()


def test_one_invalid_endpoint_does_not_hide_the_valid_one():
    service = ServiceDefinition(name="CatalogService", endpoints=(ILLEGAL, VALID))

    with pytest.raises(ServicePlanningError) as excinfo:
        build_service_plan(service)

    error = excinfo.value
    assert error.service_name == "CatalogService"
    assert len(error.errors) == 1
    assert isinstance(error.errors[0], IllegalPlacementError)
    assert error.errors[0].endpoint_name == "getLabels"
    assert [p.endpoint.name for p in error.plans] == ["getDataset"]


def test_all_failures_are_reported_together():
    service = ServiceDefinition(name="MetadataService", endpoints=(ILLEGAL, COOKIE, VALID))

    with pytest.raises(ServicePlanningError) as excinfo:
        build_service_plan(service)

    errors = excinfo.value.errors
    assert [type(e) for e in errors] == [IllegalPlacementError, InvalidAuthLocationError]
    assert "2 invalid endpoint(s)" in str(excinfo.value)
    assert "getLabels.labels" in str(excinfo.value)
    assert "getVersion" in str(excinfo.value)


def test_duplicate_endpoint_name():
    service = ServiceDefinition(name="CatalogService", endpoints=(VALID, VALID))

    with pytest.raises(ServicePlanningError) as excinfo:
        build_service_plan(service)

    (error,) = excinfo.value.errors
    assert isinstance(error, DuplicateEndpointNameError)
    assert error.endpoint_name == "getDataset"
    assert len(excinfo.value.plans) == 1


def test_service_plan_to_dict():
    service = ServiceDefinition(name="CatalogService", endpoints=(VALID,), package="com.example.catalog")
    data = build_service_plan(service).to_dict()

    assert data["service"] == "CatalogService"
    assert data["package"] == "com.example.catalog"
    assert [e["endpoint"] for e in data["endpoints"]] == ["getDataset"]


def test_failed_endpoint_is_logged(caplog):
    service = ServiceDefinition(name="MetadataService", endpoints=(ILLEGAL,))

    with caplog.at_level(logging.DEBUG, logger="conjure_stub_generator.planner"):
        with pytest.raises(ServicePlanningError):
            build_service_plan(service)

    assert "Could not plan endpoint MetadataService.getLabels" in caplog.text
