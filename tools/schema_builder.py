"""
Schema construction for discovered tools

For every ToolDefinition this builds:
- the JSON Schema advertised as the tool's input schema
- the JSON Schema describing the tool's output
- a pydantic model used to validate and coerce call arguments

Argument models key their fields by parameter position (arg1, arg2, ...) and
accept the public camelCase names as aliases, so any catalog identifier is
usable regardless of Python naming rules.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Optional, Union
from uuid import UUID

from pydantic import (
    AfterValidator,
    Base64Bytes,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    create_model,
)

from introspection.type_mapping import (
    ArrayType,
    BooleanType,
    FloatType,
    Int64Type,
    IntegerType,
    INT64_PATTERN,
    NullableType,
    OpenType,
    SemanticType,
    StringType,
    map_pg_type,
    to_json_schema,
    unwrap_nullable,
)
from models import ObjectKind, ToolDefinition

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Strict validation of the JSON form: values must already have the JSON type the
# input schema advertises. Strings still parse as uuid, date, date-time and base64.
ARGUMENTS_CONFIG = ConfigDict(extra="ignore", populate_by_name=False, strict=True)


def _to_int64(value: Union[int, str]) -> int:
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError("value is outside the 64-bit integer range")
    return number


# JSON integer, or a decimal string for values beyond the exact range of JSON numbers
Int64Argument = Annotated[
    Union[int, Annotated[str, StringConstraints(pattern=INT64_PATTERN)]],
    AfterValidator(_to_int64),
]


@dataclass(frozen=True)
class ToolSchemas:
    """Everything derived from a definition that invocation needs"""
    input_schema: dict[str, Any]
    output_schema: dict[str, Any]
    arguments_model: type[BaseModel]
    result_type: SemanticType = OpenType()
    column_types: Mapping[str, SemanticType] = field(default_factory=lambda: MappingProxyType({}))


def argument_field_name(position: int) -> str:
    return f"arg{position}"


def _string_annotation(semantic: StringType) -> Any:
    if semantic.content_encoding == "base64":
        return Base64Bytes
    if semantic.format == "uuid":
        return UUID
    if semantic.format == "date":
        return date
    if semantic.format == "date-time":
        return datetime
    if semantic.pattern:
        # numeric/decimal: validated as text, handed to asyncpg as an exact Decimal
        return Annotated[str, StringConstraints(pattern=semantic.pattern), AfterValidator(Decimal)]
    return str


def python_annotation(semantic: SemanticType) -> Any:
    """Python type used by the argument model for one semantic type."""
    if isinstance(semantic, NullableType):
        return Optional[python_annotation(semantic.inner)]
    if isinstance(semantic, ArrayType):
        return list[python_annotation(semantic.items)]
    if isinstance(semantic, StringType):
        return _string_annotation(semantic)
    if isinstance(semantic, IntegerType):
        return int
    if isinstance(semantic, Int64Type):
        return Int64Argument
    if isinstance(semantic, FloatType):
        return float
    if isinstance(semantic, BooleanType):
        return bool
    if isinstance(semantic, OpenType):
        return Any
    raise TypeError(f"Unsupported semantic type: {semantic!r}")


def _model_name(tool_name: str) -> str:
    return f"{tool_name[:1].upper()}{tool_name[1:]}Arguments"


def build_arguments_model(definition: ToolDefinition) -> type[BaseModel]:
    """Pydantic model for a tool's arguments. VIEW tools get an empty model."""
    fields: dict[str, Any] = {}
    for param in definition.parameters:
        semantic = map_pg_type(param.pg_type, False)
        fields[argument_field_name(param.position)] = (
            python_annotation(semantic),
            Field(..., alias=param.public_name, description=param.description),
        )
    return create_model(_model_name(definition.tool_name), __config__=ARGUMENTS_CONFIG, **fields)


def validate_arguments(model: type[BaseModel], arguments: dict[str, Any]) -> BaseModel:
    """Validate caller arguments in their JSON form. Raises pydantic.ValidationError."""
    return model.model_validate_json(json.dumps(arguments))


def build_input_schema(definition: ToolDefinition) -> dict[str, Any]:
    """Object schema with one required property per parameter. Parameters are never nullable."""
    properties = {
        param.public_name: to_json_schema(map_pg_type(param.pg_type, False), param.description)
        for param in definition.parameters
    }
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if properties:
        schema["required"] = list(properties)
    return schema


def _column_types(definition: ToolDefinition) -> dict[str, SemanticType]:
    return {column.name: map_pg_type(column.pg_type, column.nullable) for column in definition.columns}


def build_output_schema(definition: ToolDefinition) -> dict[str, Any]:
    """
    VIEW: array of row objects, one property per column.
    FUNCTION: open when the return type is open JSON, otherwise the mapped
    return type, wrapped in an array for set-returning functions.
    """
    if definition.kind is ObjectKind.VIEW:
        properties = {
            column.name: to_json_schema(map_pg_type(column.pg_type, column.nullable), column.description)
            for column in definition.columns
        }
        row_schema: dict[str, Any] = {"type": "object", "properties": properties}
        if properties:
            row_schema["required"] = list(properties)
        return {"type": "array", "items": row_schema}

    semantic = map_pg_type(definition.return_type, False)
    if isinstance(unwrap_nullable(semantic), OpenType):
        return {}
    if definition.returns_set:
        return {"type": "array", "items": to_json_schema(semantic)}
    return to_json_schema(semantic)


def build_tool_schemas(definition: ToolDefinition) -> ToolSchemas:
    """Build every schema for one definition. Raises if the definition cannot be expressed."""
    if definition.kind is ObjectKind.VIEW:
        return ToolSchemas(
            input_schema=build_input_schema(definition),
            output_schema=build_output_schema(definition),
            arguments_model=build_arguments_model(definition),
            column_types=MappingProxyType(_column_types(definition)),
        )

    return ToolSchemas(
        input_schema=build_input_schema(definition),
        output_schema=build_output_schema(definition),
        arguments_model=build_arguments_model(definition),
        result_type=map_pg_type(definition.return_type, False),
    )
