"""Pydantic models of the conjure intermediate representation (IR) JSON document.

Only the parts of the IR the planner needs are modelled; documentation, markers,
tags and type definitions are ignored.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from conjure_stub_generator.conjure_types import AuthType, PrimitiveKind


class IrModel(BaseModel):
    """Base of all IR models: frozen, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class IrTypeName(IrModel):
    name: str
    package: str | None = None


# ===== Types =====


class IrPrimitiveType(IrModel):
    type: Literal["primitive"]
    primitive: PrimitiveKind


class IrItemType(IrModel):
    item_type: IrType = Field(alias="itemType")


class IrOptionalType(IrModel):
    type: Literal["optional"]
    optional: IrItemType


class IrListType(IrModel):
    type: Literal["list"]
    list: IrItemType


class IrSetType(IrModel):
    type: Literal["set"]
    set: IrItemType


class IrMapBody(IrModel):
    key_type: IrType = Field(alias="keyType")
    value_type: IrType = Field(alias="valueType")


class IrMapType(IrModel):
    type: Literal["map"]
    map: IrMapBody


class IrReferenceType(IrModel):
    type: Literal["reference"]
    reference: IrTypeName


class IrExternalBody(IrModel):
    external_reference: IrTypeName = Field(alias="externalReference")
    fallback: IrType | None = None


class IrExternalType(IrModel):
    type: Literal["external"]
    external: IrExternalBody


IrType = Annotated[
    IrPrimitiveType | IrOptionalType | IrListType | IrSetType | IrMapType | IrReferenceType | IrExternalType,
    Field(discriminator="type"),
]


# ===== Parameter types =====


class IrEmpty(IrModel):
    pass


class IrParamId(IrModel):
    param_id: str = Field(alias="paramId")


class IrBodyParameter(IrModel):
    type: Literal["body"]
    body: IrEmpty = Field(default_factory=IrEmpty)


class IrHeaderParameter(IrModel):
    type: Literal["header"]
    header: IrParamId


class IrPathParameter(IrModel):
    type: Literal["path"]
    path: IrEmpty = Field(default_factory=IrEmpty)


class IrQueryParameter(IrModel):
    type: Literal["query"]
    query: IrParamId


IrParameterType = Annotated[
    IrBodyParameter | IrHeaderParameter | IrPathParameter | IrQueryParameter,
    Field(discriminator="type"),
]


# ===== Services =====


class IrAuth(IrModel):
    type: AuthType


class IrArgument(IrModel):
    arg_name: str = Field(alias="argName")
    type: IrType
    param_type: IrParameterType = Field(alias="paramType")


class IrEndpoint(IrModel):
    endpoint_name: str = Field(alias="endpointName")
    http_method: str = Field(default="GET", alias="httpMethod")
    http_path: str = Field(default="/", alias="httpPath")
    auth: IrAuth | None = None
    args: list[IrArgument] = Field(default_factory=list)
    returns: IrType | None = None


class IrService(IrModel):
    service_name: IrTypeName = Field(alias="serviceName")
    endpoints: list[IrEndpoint] = Field(default_factory=list)


class IrDocument(IrModel):
    version: int = 1
    services: list[IrService] = Field(default_factory=list)


for _model in (
    IrItemType,
    IrOptionalType,
    IrListType,
    IrSetType,
    IrMapBody,
    IrMapType,
    IrExternalBody,
    IrExternalType,
    IrArgument,
    IrEndpoint,
    IrService,
    IrDocument,
):
    _model.model_rebuild()
