"""
Result encoding

Converts raw asyncpg values into JSON-safe structures, guided by the semantic
type of the tool output where one is known:

- 64-bit integers become exact decimal strings (JSON numbers lose precision above 2^53)
- Decimal becomes its exact string form
- datetime/date/time become ISO-8601
- UUID becomes its canonical string
- bytes become base64 text
- asyncpg Records become dicts
"""

import base64
import json
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from introspection.type_mapping import (
    ArrayType,
    Int64Type,
    NullableType,
    OpenType,
    SemanticType,
)

_OPEN = OpenType()


def to_jsonable(value: Any) -> Any:
    """Structural conversion for values whose semantic type is open or scalar."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping) or hasattr(value, "items"):
        # asyncpg.Record is not a Mapping but exposes items()
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def encode_value(value: Any, semantic: SemanticType = _OPEN) -> Any:
    """Encode one value according to its semantic type."""
    if value is None:
        return None
    if isinstance(semantic, NullableType):
        return encode_value(value, semantic.inner)
    if isinstance(semantic, Int64Type):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return to_jsonable(value)
    if isinstance(semantic, ArrayType) and isinstance(value, (list, tuple)):
        return [encode_value(item, semantic.items) for item in value]
    return to_jsonable(value)


def encode_rows(rows, column_types: Mapping[str, SemanticType]) -> list[dict[str, Any]]:
    """Encode row mappings column by column. Columns without a known type are encoded structurally."""
    return [
        {
            str(key): encode_value(item, column_types.get(key, _OPEN))
            for key, item in row.items()
        }
        for row in rows
    ]


def is_empty_result(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple)) and len(value) == 0)


def render_payload(tool_name: str, value: Any) -> str:
    """Render an encoded result as the text content of a tool result."""
    if is_empty_result(value):
        return f"Tool {tool_name} executed successfully, returning no content."
    return json.dumps(value, indent=2, default=str)
