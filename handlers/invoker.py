"""
Tool Invocation Handler
Handles every discovered VIEW and FUNCTION tool.

Each call is stateless: validate -> dispatch -> encode -> result. Argument
errors are reported before the database is touched; database failures become
tool-level error results and never propagate to the transport.
"""

import logging
from typing import Any

from mcp import types
from pydantic import ValidationError

from errors import ArgumentValidationError
from introspection.type_mapping import OpenType, SemanticType, unwrap_nullable
from models import ObjectKind
from tools.schema_builder import validate_arguments
from utils.encoding import encode_rows, encode_value, render_payload, to_jsonable
from utils.error_messages import enhance_error_message

logger = logging.getLogger(__name__)


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        isError=True,
        content=[types.TextContent(type="text", text=message)]
    )


def encode_function_result(raw: Any, result_type: SemanticType, returns_set: bool) -> Any:
    """
    Encode what a function call produced.

    Set-returning functions come back as rows. When the declared element type
    is a plain scalar each row has a single column, which is unwrapped.
    """
    if not returns_set:
        return encode_value(raw, result_type)

    rows = raw or []
    if not isinstance(unwrap_nullable(result_type), OpenType) and all(len(row) == 1 for row in rows):
        return [encode_value(next(iter(row.values())), result_type) for row in rows]
    return [to_jsonable(row) for row in rows]


async def invoke_tool(objects, tool, arguments: dict[str, Any]) -> types.CallToolResult:
    """
    Run one discovered tool.

    Args:
        objects: ObjectRepository (read_all / call)
        tool: RegisteredTool being invoked
        arguments: Raw caller-supplied arguments, keyed by public name
    """
    definition = tool.definition
    logger.info(f"Tool handler invoked: {tool.name}")

    try:
        validated = validate_arguments(tool.arguments_model, arguments)
    except ValidationError as e:
        error = ArgumentValidationError(tool.name, e.errors())
        logger.warning(str(error))
        return error_result(str(error))

    try:
        if definition.kind is ObjectKind.VIEW:
            rows = await objects.read_all(definition.source_name)
            payload = encode_rows(rows, tool.column_types)
        else:
            raw = await objects.call(
                definition.source_name,
                tool.catalog_arguments(validated),
                returns_set=bool(definition.returns_set),
            )
            payload = encode_function_result(raw, tool.result_type, bool(definition.returns_set))
    except Exception as e:
        logger.error(f"Error executing tool {tool.name}: {e}", exc_info=True)
        return error_result(f"Tool execution failed: {enhance_error_message(e)}")

    logger.info(f"Tool {tool.name} executed successfully.")
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=render_payload(tool.name, payload))]
    )
