"""Plan the request construction and response decoding of conjure client stubs.

Every argument of an endpoint is placed into a request slot (body, header, path or
query) together with the encoding rule that turns its value into wire text. The
legal combinations of location and type are decided here, so that an illegal
definition fails while generating instead of inside the generated client.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace

from conjure_stub_generator import helper
from conjure_stub_generator.conjure_types import (
    ArgumentDefinition,
    AuthType,
    EndpointDefinition,
    HeaderParameter,
    LocationKind,
    OptionalType,
    PathParameter,
    PrimitiveKind,
    PrimitiveType,
    QueryParameter,
    ServiceDefinition,
    TypeCategory,
    TypeNode,
    classify,
)
from conjure_stub_generator.errors import (
    ConjurePlanError,
    DuplicateArgumentNameError,
    DuplicateEndpointNameError,
    IllegalPlacementError,
    InvalidAuthLocationError,
    MultipleBodyArgumentsError,
    ServicePlanningError,
    UnencodableTypeError,
)
from conjure_stub_generator.planner_dto import EncodingRule, EndpointPlan, PlacementInstruction, ResponseDecoder, ServicePlan

logger = logging.getLogger(__name__)

AUTH_HEADER_NAME = "Authorization"
AUTH_HEADER_PARAM_NAME = "authHeader"


def plan_argument(argument: ArgumentDefinition, endpoint_name: str) -> PlacementInstruction:
    """Plan the placement of a single argument in the outgoing request.

    Args:
        argument (ArgumentDefinition): The argument to place.
        endpoint_name (str): The endpoint owning the argument, used for handle names and errors.

    Returns:
        PlacementInstruction: Where the value goes and how it is encoded.

    Raises:
        IllegalPlacementError: If the location of the argument does not accept its type.
    """
    instruction = _place(argument, argument.type, endpoint_name)
    logger.debug(
        "Placed %s.%s into %s as %s",
        endpoint_name,
        argument.name,
        instruction.slot.value,
        instruction.encoding.name,
    )
    return instruction


def _place(argument: ArgumentDefinition, type_node: TypeNode, endpoint_name: str) -> PlacementInstruction:
    """Dispatch on the location of the argument and the shape of `type_node`.

    `type_node` is the declared type, or the inner type while planning an optional.
    """
    location = argument.location
    wire_name = _wire_name(argument)

    match (location.kind, classify(type_node)):
        case (LocationKind.BODY, _):
            return PlacementInstruction(
                argument=argument,
                slot=LocationKind.BODY,
                wire_name=None,
                encoding=EncodingRule.body(endpoint_name, argument.type),
            )

        case (LocationKind.HEADER | LocationKind.QUERY, TypeCategory.OPTIONAL):
            assert isinstance(type_node, OptionalType)
            if type_node is not argument.type:
                raise IllegalPlacementError(
                    argument.name,
                    location.kind,
                    argument.type,
                    endpoint_name,
                    reason="nested optionals cannot be tested for presence",
                )
            return replace(_place(argument, type_node.item_type, endpoint_name), conditional=True)

        case (LocationKind.HEADER | LocationKind.PATH | LocationKind.QUERY, TypeCategory.REFERENCE):
            return PlacementInstruction(
                argument=argument,
                slot=location.kind,
                wire_name=wire_name,
                encoding=EncodingRule.string_conversion(),
            )

        case (LocationKind.HEADER | LocationKind.QUERY, TypeCategory.LIST | TypeCategory.SET):
            return PlacementInstruction(
                argument=argument,
                slot=location.kind,
                wire_name=wire_name,
                encoding=_flat_encoding(argument, type_node, endpoint_name),
                multi_valued=True,
            )

        case (LocationKind.PATH, TypeCategory.LIST | TypeCategory.SET):
            raise IllegalPlacementError(
                argument.name,
                location.kind,
                argument.type,
                endpoint_name,
                reason="a path segment holds a single value",
            )

        case _:
            return PlacementInstruction(
                argument=argument,
                slot=location.kind,
                wire_name=wire_name,
                encoding=_flat_encoding(argument, type_node, endpoint_name),
            )


def _wire_name(argument: ArgumentDefinition) -> str | None:
    match argument.location:
        case HeaderParameter(param_id=param_id) | QueryParameter(param_id=param_id):
            return param_id
        case PathParameter():
            # Path templates refer to the argument by its declared name.
            return argument.name
        case _:
            return None


def _flat_encoding(argument: ArgumentDefinition, type_node: TypeNode, endpoint_name: str) -> EncodingRule:
    try:
        return helper.select_flat_encoding(type_node)
    except UnencodableTypeError as e:
        raise IllegalPlacementError(
            argument.name,
            argument.location.kind,
            argument.type,
            endpoint_name,
            reason=e.reason,
        ) from e


def _auth_argument(endpoint: EndpointDefinition) -> ArgumentDefinition:
    """Build the synthetic header argument carrying the bearer token of an endpoint.

    Raises:
        InvalidAuthLocationError: If the endpoint authenticates with anything but a header.
    """
    assert endpoint.auth is not None
    if endpoint.auth is not AuthType.HEADER:
        raise InvalidAuthLocationError(endpoint.name, endpoint.auth)

    return ArgumentDefinition(
        name=AUTH_HEADER_PARAM_NAME,
        location=HeaderParameter(param_id=AUTH_HEADER_NAME),
        type=PrimitiveType(PrimitiveKind.BEARERTOKEN),
    )


def _check_arguments(endpoint: EndpointDefinition) -> None:
    names = [arg.name for arg in endpoint.args]
    if endpoint.requires_auth:
        names.append(AUTH_HEADER_PARAM_NAME)

    for name, count in Counter(names).items():
        if count > 1:
            raise DuplicateArgumentNameError(endpoint.name, name)

    bodies = [arg.name for arg in endpoint.args if arg.location.kind is LocationKind.BODY]
    if len(bodies) > 1:
        raise MultipleBodyArgumentsError(endpoint.name, bodies)


def build_endpoint_plan(endpoint: EndpointDefinition) -> EndpointPlan:
    """Build the plan of a single endpoint.

    Arguments are placed in declaration order. Instructions sharing a wire name are
    kept side by side, never merged. For authenticated endpoints the bearer token
    header is placed before every declared argument.

    Args:
        endpoint (EndpointDefinition): The endpoint to plan.

    Returns:
        EndpointPlan: The ordered placement instructions and the response decoder.

    Raises:
        ConjurePlanError: The first failure found in the endpoint.
    """
    _check_arguments(endpoint)

    instructions: list[PlacementInstruction] = []
    if endpoint.requires_auth:
        instructions.append(plan_argument(_auth_argument(endpoint), endpoint.name))

    for argument in endpoint.args:
        instructions.append(plan_argument(argument, endpoint.name))

    return EndpointPlan(
        endpoint=endpoint,
        instructions=tuple(instructions),
        decoder=ResponseDecoder.create(endpoint.name, endpoint.returns),
    )


def build_service_plan(service: ServiceDefinition) -> ServicePlan:
    """Build the plans of all endpoints of a service.

    A failing endpoint does not stop the others from being planned, so every invalid
    endpoint is reported by a single call.

    Args:
        service (ServiceDefinition): The service to plan.

    Returns:
        ServicePlan: One plan per endpoint, in declaration order.

    Raises:
        ServicePlanningError: If any endpoint failed, with all failures and the successful plans attached.
    """
    plans: list[EndpointPlan] = []
    errors: list[ConjurePlanError] = []
    seen: set[str] = set()

    for endpoint in service.endpoints:
        if endpoint.name in seen:
            errors.append(DuplicateEndpointNameError(service.name, endpoint.name))
            continue
        seen.add(endpoint.name)

        try:
            plans.append(build_endpoint_plan(endpoint))
        except ConjurePlanError as e:
            logger.debug("Could not plan endpoint %s.%s: %s", service.name, endpoint.name, e)
            errors.append(e)

    if errors:
        raise ServicePlanningError(service.name, errors, plans)

    logger.info("Planned %d endpoint(s) of service '%s'.", len(plans), service.name)
    return ServicePlan(service=service, endpoint_plans=tuple(plans))
