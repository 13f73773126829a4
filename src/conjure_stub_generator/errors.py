"""Errors raised while planning client stubs.

All of them are generation-time failures: a service definition that raises one of these
never produces a plan for the failing endpoint.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from conjure_stub_generator.conjure_types import describe_type

if TYPE_CHECKING:
    from conjure_stub_generator.conjure_types import AuthType, LocationKind, TypeNode
    from conjure_stub_generator.planner_dto import EndpointPlan


class ConjurePlanError(Exception):
    """Base class of all planning errors."""


class UnencodableTypeError(ConjurePlanError):
    """Raised when a type has no flat scalar or repeated representation."""

    def __init__(self, type_node: TypeNode, reason: str):
        self.type_node = type_node
        self.reason = reason
        super().__init__(f"Cannot serialize {describe_type(type_node)}: {reason}")


class IllegalPlacementError(ConjurePlanError):
    """Raised when a wire location does not accept the type of an argument."""

    def __init__(
        self,
        argument_name: str,
        location: LocationKind,
        type_node: TypeNode,
        endpoint_name: str | None = None,
        reason: str | None = None,
    ):
        self.argument_name = argument_name
        self.location = location
        self.type_node = type_node
        self.endpoint_name = endpoint_name

        owner = f"{endpoint_name}." if endpoint_name else ""
        message = (
            f"Argument '{owner}{argument_name}' of type {describe_type(type_node)} "
            f"cannot be placed in the {location.value} of a request"
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidAuthLocationError(ConjurePlanError):
    """Raised when an endpoint requires authentication that is not a header bearer token."""

    def __init__(self, endpoint_name: str, auth: AuthType):
        self.endpoint_name = endpoint_name
        self.auth = auth
        super().__init__(
            f"Endpoint '{endpoint_name}' uses {auth.value} authentication, only header auth is supported"
        )


class DuplicateArgumentNameError(ConjurePlanError):
    def __init__(self, endpoint_name: str, argument_name: str):
        self.endpoint_name = endpoint_name
        self.argument_name = argument_name
        super().__init__(f"Endpoint '{endpoint_name}' declares argument '{argument_name}' more than once")


class MultipleBodyArgumentsError(ConjurePlanError):
    def __init__(self, endpoint_name: str, argument_names: list[str]):
        self.endpoint_name = endpoint_name
        self.argument_names = argument_names
        super().__init__(
            f"Endpoint '{endpoint_name}' declares more than one body argument: {', '.join(argument_names)}"
        )


class DuplicateEndpointNameError(ConjurePlanError):
    def __init__(self, service_name: str, endpoint_name: str):
        self.service_name = service_name
        self.endpoint_name = endpoint_name
        super().__init__(f"Service '{service_name}' declares endpoint '{endpoint_name}' more than once")


class ServicePlanningError(ConjurePlanError):
    """Raised when one or more endpoints of a service could not be planned.

    Attributes:
        service_name: The service that failed.
        errors: Every failure, in endpoint order.
        plans: The plans of the endpoints that succeeded.
    """

    def __init__(self, service_name: str, errors: list[ConjurePlanError], plans: list[EndpointPlan]):
        self.service_name = service_name
        self.errors = errors
        self.plans = plans
        details = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"Service '{service_name}' has {len(errors)} invalid endpoint(s):\n{details}")


class ConjureDefinitionError(ValueError):
    """Raised when a conjure IR document cannot be read into a service definition."""
