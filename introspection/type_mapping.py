"""
PostgreSQL type → semantic type mapping

The semantic type model is closed: every catalog type maps to exactly one of
the variants below. Unknown catalog types degrade to OpenType with a warning,
never an exception.

    map_pg_type("int4", False)          -> IntegerType()
    map_pg_type("_uuid", False)         -> ArrayType(StringType(format="uuid"))
    map_pg_type("timestamptz", True)    -> NullableType(StringType(format="date-time"))
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

NUMERIC_PATTERN = r"^-?\d+(\.\d+)?$"
INT64_PATTERN = r"^-?\d+$"


@dataclass(frozen=True)
class StringType:
    format: Optional[str] = None
    pattern: Optional[str] = None
    content_encoding: Optional[str] = None


@dataclass(frozen=True)
class IntegerType:
    """Integers that fit a JSON number exactly (int2/int4)."""


@dataclass(frozen=True)
class Int64Type:
    """64-bit integers. Carried as exact decimal strings on the wire."""


@dataclass(frozen=True)
class FloatType:
    pass


@dataclass(frozen=True)
class BooleanType:
    pass


@dataclass(frozen=True)
class OpenType:
    """Any JSON value (json/jsonb, and the fallback for unknown catalog types)."""


@dataclass(frozen=True)
class ArrayType:
    items: "SemanticType"


@dataclass(frozen=True)
class NullableType:
    inner: "SemanticType"


SemanticType = Union[
    StringType, IntegerType, Int64Type, FloatType, BooleanType, OpenType, ArrayType, NullableType
]


_STRING = StringType()

TYPE_TABLE: dict[str, SemanticType] = {
    # Text
    "text": _STRING,
    "varchar": _STRING,
    "charactervarying": _STRING,
    "char": _STRING,
    "character": _STRING,
    "bpchar": _STRING,
    "name": _STRING,
    # Integers that fit a JSON number
    "int2": IntegerType(),
    "int4": IntegerType(),
    "int": IntegerType(),
    "integer": IntegerType(),
    "smallint": IntegerType(),
    "serial": IntegerType(),
    "serial2": IntegerType(),
    "serial4": IntegerType(),
    "smallserial": IntegerType(),
    # 64-bit integers
    "int8": Int64Type(),
    "bigint": Int64Type(),
    "bigserial": Int64Type(),
    "serial8": Int64Type(),
    # Arbitrary precision, kept as strings
    "numeric": StringType(pattern=NUMERIC_PATTERN),
    "decimal": StringType(pattern=NUMERIC_PATTERN),
    # Floating point
    "real": FloatType(),
    "float4": FloatType(),
    "float8": FloatType(),
    "doubleprecision": FloatType(),
    # Boolean
    "bool": BooleanType(),
    "boolean": BooleanType(),
    # Formatted strings
    "uuid": StringType(format="uuid"),
    "date": StringType(format="date"),
    "timestamp": StringType(format="date-time"),
    "timestamptz": StringType(format="date-time"),
    "timestampwithtimezone": StringType(format="date-time"),
    "timestampwithouttimezone": StringType(format="date-time"),
    # JSON
    "json": OpenType(),
    "jsonb": OpenType(),
    # Binary, exchanged as base64 text
    "bytea": StringType(content_encoding="base64"),
}


def split_array_type(pg_type: str) -> tuple[bool, str]:
    """
    Detect array-ness and return (is_array, normalised element type name).

    Arrays appear either as udt names with a leading underscore (_int4)
    or with a trailing bracket pair (text[]).
    """
    element = pg_type.strip()
    is_array = False
    if element.startswith("_"):
        is_array = True
        element = element[1:]
    elif element.endswith("[]"):
        is_array = True
        element = element[:-2]
    return is_array, element.lower().replace(" ", "")


def map_pg_type(pg_type: str, nullable: bool) -> SemanticType:
    """
    Map a catalog type name and nullability to a semantic type.

    Pure and total. The nullable wrapper goes around the whole value
    (array or scalar): it means "the column may be NULL", not "elements may be NULL".
    """
    is_array, element = split_array_type(pg_type)

    semantic = TYPE_TABLE.get(element)
    if semantic is None:
        logger.warning(f"Unknown PostgreSQL element type '{element}' (from '{pg_type}'), mapping to an open schema")
        semantic = OpenType()

    if is_array:
        semantic = ArrayType(semantic)
    if nullable:
        semantic = NullableType(semantic)
    return semantic


def unwrap_nullable(semantic: SemanticType) -> SemanticType:
    while isinstance(semantic, NullableType):
        semantic = semantic.inner
    return semantic


def to_json_schema(semantic: SemanticType, description: Optional[str] = None) -> dict[str, Any]:
    """Render a semantic type as a JSON Schema fragment."""
    if isinstance(semantic, NullableType):
        schema: dict[str, Any] = {"anyOf": [to_json_schema(semantic.inner), {"type": "null"}]}
    elif isinstance(semantic, ArrayType):
        schema = {"type": "array", "items": to_json_schema(semantic.items)}
    elif isinstance(semantic, StringType):
        schema = {"type": "string"}
        if semantic.format:
            schema["format"] = semantic.format
        if semantic.pattern:
            schema["pattern"] = semantic.pattern
        if semantic.content_encoding:
            schema["contentEncoding"] = semantic.content_encoding
    elif isinstance(semantic, IntegerType):
        schema = {"type": "integer"}
    elif isinstance(semantic, Int64Type):
        # Callers may send either form; results are always the string form
        schema = {"type": ["integer", "string"], "format": "int64", "pattern": INT64_PATTERN}
    elif isinstance(semantic, FloatType):
        schema = {"type": "number"}
    elif isinstance(semantic, BooleanType):
        schema = {"type": "boolean"}
    elif isinstance(semantic, OpenType):
        schema = {}
    else:
        raise TypeError(f"Unsupported semantic type: {semantic!r}")

    if description:
        schema["description"] = description
    return schema
