"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

from typing import assert_never

from conjure_stub_generator.conjure_types import (
    ExternalType,
    ListType,
    MapType,
    OptionalType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    SetType,
    TypeNode,
)
from conjure_stub_generator.errors import UnencodableTypeError
from conjure_stub_generator.planner_dto import EncodingRule

PRIMITIVE_TO_TYPE_NAME = {
    PrimitiveKind.BEARERTOKEN: "BearerToken",
    PrimitiveKind.BOOLEAN: "Boolean",
    PrimitiveKind.DATETIME: "DateTime",
    PrimitiveKind.DOUBLE: "Double",
    PrimitiveKind.INTEGER: "Integer",
    PrimitiveKind.RID: "Rid",
    PrimitiveKind.SAFELONG: "SafeLong",
    PrimitiveKind.STRING: "String",
    PrimitiveKind.UUID: "Uuid",
}

LIST_SUFFIX = "List"
SET_SUFFIX = "Set"


def primitive_type_name(kind: PrimitiveKind) -> str:
    """Get the name of the plain encoding rule of a primitive.

    Args:
        kind (PrimitiveKind): The primitive kind.

    Returns:
        str: The rule name, e.g. `SafeLong` for `SAFELONG`.
    """
    return PRIMITIVE_TO_TYPE_NAME[kind]


def select_flat_encoding(node: TypeNode) -> EncodingRule:
    """Select the plain encoding rule of a type.

    Primitives get a scalar rule, lists and sets of primitives get the repeated
    variant of their item's rule. Nothing else has a flat textual representation.

    Args:
        node (TypeNode): The type to encode.

    Returns:
        EncodingRule: The scalar or repeated rule.

    Raises:
        UnencodableTypeError: If the type has no flat representation.
    """
    match node:
        case PrimitiveType(kind=kind):
            return EncodingRule.plain(kind, primitive_type_name(kind))
        case ListType(item_type=item):
            return EncodingRule.repeated(_select_item_encoding(node, item), LIST_SUFFIX)
        case SetType(item_type=item):
            return EncodingRule.repeated(_select_item_encoding(node, item), SET_SUFFIX)
        case OptionalType():
            raise UnencodableTypeError(node, "optionals have no plain representation")
        case MapType():
            raise UnencodableTypeError(node, "maps have no plain representation")
        case ReferenceType():
            raise UnencodableTypeError(node, "references have no plain representation")
        case ExternalType():
            raise UnencodableTypeError(node, "external types have no plain representation")
        case _:
            assert_never(node)


def _select_item_encoding(collection: TypeNode, item: TypeNode) -> EncodingRule:
    # Only one level of list/set over a primitive is supported.
    if not isinstance(item, PrimitiveType):
        raise UnencodableTypeError(collection, "only collections of primitives can be serialized")
    return select_flat_encoding(item)
