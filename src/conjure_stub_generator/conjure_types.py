"""Types definitions of the conjure service model that the planner consumes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import assert_never


class PrimitiveKind(Enum):
    """Kinds of conjure primitives."""

    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    UUID = "UUID"
    RID = "RID"
    SAFELONG = "SAFELONG"
    BEARERTOKEN = "BEARERTOKEN"
    DATETIME = "DATETIME"


class TypeCategory(Enum):
    """Structural categories of a type node."""

    PRIMITIVE = "primitive"
    OPTIONAL = "optional"
    LIST = "list"
    SET = "set"
    MAP = "map"
    REFERENCE = "reference"
    EXTERNAL = "external"


class LocationKind(Enum):
    """Wire locations of an endpoint argument."""

    BODY = "body"
    HEADER = "header"
    PATH = "path"
    QUERY = "query"


class AuthType(Enum):
    """Authentication mechanisms an endpoint can declare."""

    HEADER = "header"
    COOKIE = "cookie"


# ===== Type nodes =====


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind


@dataclass(frozen=True)
class OptionalType:
    item_type: TypeNode


@dataclass(frozen=True)
class ListType:
    item_type: TypeNode


@dataclass(frozen=True)
class SetType:
    item_type: TypeNode


@dataclass(frozen=True)
class MapType:
    key_type: TypeNode
    value_type: TypeNode


@dataclass(frozen=True)
class ReferenceType:
    """A named type defined elsewhere in the conjure definition."""

    name: str
    package: str | None = None


@dataclass(frozen=True)
class ExternalType:
    """A type imported from outside the conjure definition."""

    name: str
    package: str | None = None


TypeNode = PrimitiveType | OptionalType | ListType | SetType | MapType | ReferenceType | ExternalType


def classify(node: TypeNode) -> TypeCategory:
    """Determine the structural category of a type node.

    Args:
        node (TypeNode): The type to classify.

    Returns:
        TypeCategory: The category of the node.
    """
    match node:
        case PrimitiveType():
            return TypeCategory.PRIMITIVE
        case OptionalType():
            return TypeCategory.OPTIONAL
        case ListType():
            return TypeCategory.LIST
        case SetType():
            return TypeCategory.SET
        case MapType():
            return TypeCategory.MAP
        case ReferenceType():
            return TypeCategory.REFERENCE
        case ExternalType():
            return TypeCategory.EXTERNAL
        case _:
            assert_never(node)


def describe_type(node: TypeNode) -> str:
    """Render a type node the way it is written in conjure definitions.

    E.g. `OptionalType(ListType(PrimitiveType(INTEGER)))` becomes `optional<list<integer>>`.

    Args:
        node (TypeNode): The type to describe.

    Returns:
        str: A readable description of the type.
    """
    match node:
        case PrimitiveType(kind=kind):
            return kind.value.lower()
        case OptionalType(item_type=item) | ListType(item_type=item) | SetType(item_type=item):
            return f"{classify(node).value}<{describe_type(item)}>"
        case MapType(key_type=key, value_type=value):
            return f"map<{describe_type(key)}, {describe_type(value)}>"
        case ReferenceType(name=name, package=package) | ExternalType(name=name, package=package):
            return f"{package}.{name}" if package else name
        case _:
            assert_never(node)


# ===== Parameter locations =====


@dataclass(frozen=True)
class BodyParameter:
    @property
    def kind(self) -> LocationKind:
        return LocationKind.BODY


@dataclass(frozen=True)
class HeaderParameter:
    """A header argument; `param_id` is the header name on the wire."""

    param_id: str

    @property
    def kind(self) -> LocationKind:
        return LocationKind.HEADER


@dataclass(frozen=True)
class PathParameter:
    @property
    def kind(self) -> LocationKind:
        return LocationKind.PATH


@dataclass(frozen=True)
class QueryParameter:
    """A query argument; `param_id` is the query key on the wire."""

    param_id: str

    @property
    def kind(self) -> LocationKind:
        return LocationKind.QUERY


ParameterLocation = BodyParameter | HeaderParameter | PathParameter | QueryParameter


# ===== Definitions =====


@dataclass(frozen=True)
class ArgumentDefinition:
    """A single endpoint argument.

    Attributes:
        name: The local name of the argument, unique within its endpoint.
        location: Where the argument is placed in the request.
        type: The declared type of the argument.
    """

    name: str
    location: ParameterLocation
    type: TypeNode


@dataclass(frozen=True)
class EndpointDefinition:
    """A single endpoint of a service.

    Attributes:
        name: The endpoint name, unique within its service.
        args: The arguments in declaration order.
        returns: The declared return type, or None for endpoints without a response body.
        auth: The authentication mechanism, or None if the endpoint is unauthenticated.
        http_method: The HTTP method, e.g. "GET".
        http_path: The HTTP path template, e.g. "/catalog/{datasetRid}".
    """

    name: str
    args: tuple[ArgumentDefinition, ...] = ()
    returns: TypeNode | None = None
    auth: AuthType | None = None
    http_method: str = "GET"
    http_path: str = "/"

    @property
    def requires_auth(self) -> bool:
        return self.auth is not None


@dataclass(frozen=True)
class ServiceDefinition:
    name: str
    endpoints: tuple[EndpointDefinition, ...] = ()
    package: str | None = None
