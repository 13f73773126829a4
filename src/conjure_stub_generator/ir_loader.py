"""Read conjure IR documents into service definitions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, assert_never

from pydantic import ValidationError

from conjure_stub_generator import ir_models
from conjure_stub_generator.conjure_types import (
    ArgumentDefinition,
    BodyParameter,
    EndpointDefinition,
    ExternalType,
    HeaderParameter,
    ListType,
    MapType,
    OptionalType,
    ParameterLocation,
    PathParameter,
    PrimitiveType,
    QueryParameter,
    ReferenceType,
    ServiceDefinition,
    SetType,
    TypeNode,
)
from conjure_stub_generator.errors import ConjureDefinitionError

logger = logging.getLogger(__name__)

IR_SUFFIX = ".conjure.json"


def load_services(path: str | Path) -> list[ServiceDefinition]:
    """Load all services of a conjure IR file.

    Args:
        path (str | Path): Path to the IR JSON file.

    Returns:
        list[ServiceDefinition]: The services, in the order they are declared.

    Raises:
        ConjureDefinitionError: If the file cannot be read, is not valid JSON or not a valid IR document.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConjureDefinitionError(f"{path}: cannot be read: {e}") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConjureDefinitionError(f"{path}: not a JSON document: {e}") from e

    try:
        services = services_from_ir(document)
    except ConjureDefinitionError as e:
        raise ConjureDefinitionError(f"{path}: {e}") from e

    logger.info("Loaded %d service(s) from '%s'.", len(services), path)
    return services


def services_from_ir(document: dict[str, Any]) -> list[ServiceDefinition]:
    """Convert a decoded IR document into service definitions.

    Raises:
        ConjureDefinitionError: If the document does not match the IR format.
    """
    try:
        ir_document = ir_models.IrDocument.model_validate(document)
    except ValidationError as e:
        raise ConjureDefinitionError(f"invalid conjure IR document:\n{e}") from e

    return [_to_service(ir_service) for ir_service in ir_document.services]


def _to_service(ir_service: ir_models.IrService) -> ServiceDefinition:
    return ServiceDefinition(
        name=ir_service.service_name.name,
        endpoints=tuple(_to_endpoint(ir_endpoint) for ir_endpoint in ir_service.endpoints),
        package=ir_service.service_name.package,
    )


def _to_endpoint(ir_endpoint: ir_models.IrEndpoint) -> EndpointDefinition:
    return EndpointDefinition(
        name=ir_endpoint.endpoint_name,
        args=tuple(
            ArgumentDefinition(
                name=ir_arg.arg_name,
                location=_to_location(ir_arg.param_type),
                type=to_type_node(ir_arg.type),
            )
            for ir_arg in ir_endpoint.args
        ),
        returns=to_type_node(ir_endpoint.returns) if ir_endpoint.returns is not None else None,
        auth=ir_endpoint.auth.type if ir_endpoint.auth is not None else None,
        http_method=ir_endpoint.http_method,
        http_path=ir_endpoint.http_path,
    )


def _to_location(ir_param: ir_models.IrParameterType) -> ParameterLocation:
    match ir_param:
        case ir_models.IrBodyParameter():
            return BodyParameter()
        case ir_models.IrHeaderParameter(header=header):
            return HeaderParameter(param_id=header.param_id)
        case ir_models.IrPathParameter():
            return PathParameter()
        case ir_models.IrQueryParameter(query=query):
            return QueryParameter(param_id=query.param_id)
        case _:
            assert_never(ir_param)


def to_type_node(ir_type: ir_models.IrType) -> TypeNode:
    """Convert an IR type into a type node.

    The fallback of an external type is dropped; external types are kept opaque.
    """
    match ir_type:
        case ir_models.IrPrimitiveType(primitive=kind):
            return PrimitiveType(kind)
        case ir_models.IrOptionalType(optional=body):
            return OptionalType(to_type_node(body.item_type))
        case ir_models.IrListType(list=body):
            return ListType(to_type_node(body.item_type))
        case ir_models.IrSetType(set=body):
            return SetType(to_type_node(body.item_type))
        case ir_models.IrMapType(map=body):
            return MapType(to_type_node(body.key_type), to_type_node(body.value_type))
        case ir_models.IrReferenceType(reference=reference):
            return ReferenceType(reference.name, reference.package)
        case ir_models.IrExternalType(external=external):
            return ExternalType(external.external_reference.name, external.external_reference.package)
        case _:
            assert_never(ir_type)
