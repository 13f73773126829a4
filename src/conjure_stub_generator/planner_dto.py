"""Immutable plans handed to the code emitter: encoding rules, placements and decoders."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from conjure_stub_generator.conjure_types import (
    ArgumentDefinition,
    EndpointDefinition,
    LocationKind,
    PrimitiveKind,
    ServiceDefinition,
    TypeNode,
    describe_type,
)

BODY_SERIALIZER_SUFFIX = "Serializer"
BODY_DESERIALIZER_SUFFIX = "Deserializer"
STRING_CONVERSION_NAME = "toString"


class EncodingKind(Enum):
    """How a single argument value is turned into its wire representation."""

    BODY = "body"
    PLAIN = "plain"
    PLAIN_REPEATED = "plain-repeated"
    STRING_CONVERSION = "string-conversion"


class DecoderKind(Enum):
    TYPED = "typed"
    EMPTY = "empty"


# ===== Encoding rules =====


@dataclass(frozen=True)
class EncodingRule:
    """An encoding rule applied to an argument value.

    Attributes:
        kind: The family of the rule.
        name: The rule name handed to the emitter, e.g. "Integer", "IntegerList",
            "toString" or "createDatasetSerializer".
        primitive: The primitive the plain rule encodes, for plain rules only.
        type: The declared type keyed by the body serializer, for body rules only.
    """

    kind: EncodingKind
    name: str
    primitive: PrimitiveKind | None = None
    type: TypeNode | None = None

    @classmethod
    def plain(cls, primitive: PrimitiveKind, name: str) -> EncodingRule:
        return cls(kind=EncodingKind.PLAIN, name=name, primitive=primitive)

    @classmethod
    def repeated(cls, scalar: EncodingRule, collection_suffix: str) -> EncodingRule:
        """Create the repeated variant of a scalar rule.

        E.g. the scalar rule `Integer` becomes `IntegerList` or `IntegerSet`.

        Args:
            scalar (EncodingRule): The rule of a single item.
            collection_suffix (str): The collection name appended to the scalar rule name.

        Returns:
            EncodingRule: The repeated rule.
        """
        return cls(kind=EncodingKind.PLAIN_REPEATED, name=f"{scalar.name}{collection_suffix}", primitive=scalar.primitive)

    @classmethod
    def body(cls, endpoint_name: str, type_node: TypeNode) -> EncodingRule:
        return cls(kind=EncodingKind.BODY, name=f"{endpoint_name}{BODY_SERIALIZER_SUFFIX}", type=type_node)

    @classmethod
    def string_conversion(cls) -> EncodingRule:
        return cls(kind=EncodingKind.STRING_CONVERSION, name=STRING_CONVERSION_NAME)

    @property
    def is_flat(self) -> bool:
        return self.kind in (EncodingKind.PLAIN, EncodingKind.PLAIN_REPEATED)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "name": self.name}
        if self.type is not None:
            data["type"] = describe_type(self.type)
        return data


# ===== Plans =====


@dataclass(frozen=True)
class PlacementInstruction:
    """Where and how one argument is written into the outgoing request.

    Attributes:
        argument: The argument this instruction places.
        slot: The request slot receiving the value.
        wire_name: The header name, query key or path parameter name; None for the body.
        encoding: The rule that converts the value.
        multi_valued: Whether every item becomes its own header or query entry under `wire_name`.
        conditional: Whether the instruction only applies when the run-time value is present.
    """

    argument: ArgumentDefinition
    slot: LocationKind
    wire_name: str | None
    encoding: EncodingRule
    multi_valued: bool = False
    conditional: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "argument": self.argument.name,
            "slot": self.slot.value,
            "wireName": self.wire_name,
            "encoding": self.encoding.to_dict(),
            "multiValued": self.multi_valued,
            "conditional": self.conditional,
        }


@dataclass(frozen=True)
class ResponseDecoder:
    """How the response body of an endpoint is decoded."""

    kind: DecoderKind
    handle_name: str
    type: TypeNode | None = None

    @classmethod
    def create(cls, endpoint_name: str, returns: TypeNode | None) -> ResponseDecoder:
        """Derive the decoder from the declared return type of an endpoint.

        Args:
            endpoint_name (str): The endpoint the decoder belongs to.
            returns (TypeNode | None): The declared return type.

        Returns:
            ResponseDecoder: A typed body decoder, or an empty-body decoder when nothing is returned.
        """
        kind = DecoderKind.EMPTY if returns is None else DecoderKind.TYPED
        return cls(kind=kind, handle_name=f"{endpoint_name}{BODY_DESERIALIZER_SUFFIX}", type=returns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "handle": self.handle_name,
            "type": describe_type(self.type) if self.type is not None else None,
        }


@dataclass(frozen=True)
class EndpointPlan:
    endpoint: EndpointDefinition
    instructions: tuple[PlacementInstruction, ...]
    decoder: ResponseDecoder

    @property
    def body_instruction(self) -> PlacementInstruction | None:
        return next((i for i in self.instructions if i.slot is LocationKind.BODY), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint.name,
            "httpMethod": self.endpoint.http_method,
            "httpPath": self.endpoint.http_path,
            "instructions": [instruction.to_dict() for instruction in self.instructions],
            "decoder": self.decoder.to_dict(),
        }


@dataclass(frozen=True)
class ServicePlan:
    service: ServiceDefinition
    endpoint_plans: tuple[EndpointPlan, ...]

    def get(self, endpoint_name: str) -> EndpointPlan:
        """Look up the plan of an endpoint by name.

        Raises:
            KeyError: If the service has no endpoint with that name.
        """
        for plan in self.endpoint_plans:
            if plan.endpoint.name == endpoint_name:
                return plan
        raise KeyError(endpoint_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.service.name,
            "package": self.service.package,
            "endpoints": [plan.to_dict() for plan in self.endpoint_plans],
        }
