"""Pytest configuration and fixtures for conjure stub generator tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from conjure_stub_generator.conjure_types import (
    ArgumentDefinition,
    AuthType,
    BodyParameter,
    EndpointDefinition,
    ExternalType,
    HeaderParameter,
    ListType,
    MapType,
    OptionalType,
    PathParameter,
    PrimitiveKind,
    PrimitiveType,
    QueryParameter,
    ReferenceType,
    SetType,
)

# Test directory structure
TESTS_DIR = Path(__file__).parent
DEFINITIONS_DIR = TESTS_DIR / "definitions"
CATALOG_IR = DEFINITIONS_DIR / "catalog" / "catalog.conjure.json"
INVALID_METADATA_IR = DEFINITIONS_DIR / "catalog" / "invalid_metadata.conjure.json"

STRING = PrimitiveType(PrimitiveKind.STRING)
INTEGER = PrimitiveType(PrimitiveKind.INTEGER)
DATASET = ReferenceType("Dataset", "com.example.catalog")
EXTERNAL_LONG = ExternalType("Long", "java.lang")

PRIMITIVES = [PrimitiveType(kind) for kind in PrimitiveKind]

# One node of every shape that has no flat representation.
UNENCODABLE = [
    OptionalType(STRING),
    MapType(STRING, INTEGER),
    DATASET,
    EXTERNAL_LONG,
]

ALL_SHAPES = PRIMITIVES + UNENCODABLE + [
    ListType(INTEGER),
    SetType(STRING),
    ListType(DATASET),
    OptionalType(ListType(STRING)),
    MapType(STRING, ListType(DATASET)),
]


def body(name: str, type_node) -> ArgumentDefinition:
    return ArgumentDefinition(name, BodyParameter(), type_node)


def header(name: str, param_id: str, type_node) -> ArgumentDefinition:
    return ArgumentDefinition(name, HeaderParameter(param_id), type_node)


def path(name: str, type_node) -> ArgumentDefinition:
    return ArgumentDefinition(name, PathParameter(), type_node)


def query(name: str, param_id: str, type_node) -> ArgumentDefinition:
    return ArgumentDefinition(name, QueryParameter(param_id), type_node)


@pytest.fixture
def get_dataset() -> EndpointDefinition:
    """An authenticated endpoint with a path argument and an optional return value."""
    return EndpointDefinition(
        name="getDataset",
        args=(path("datasetRid", PrimitiveType(PrimitiveKind.RID)),),
        returns=OptionalType(DATASET),
        http_method="GET",
        auth=AuthType.HEADER,
        http_path="/catalog/datasets/{datasetRid}",
    )
