"""
MCP Tools Package

- schema_builder: input/output JSON Schemas and argument models per definition
- registered_tool: RegisteredTool, the unit held by the registry
- builtin_tools: tools served regardless of the scanned schema (getInfo)
"""

import logging
from typing import Iterable

from models import ToolDefinition

from .builtin_tools import BUILTIN_TOOL_NAMES, GET_INFO_TOOL_NAME, GetInfoArguments, get_builtin_tools, get_info_tool
from .registered_tool import RegisteredTool, ToolHandler
from .schema_builder import ToolSchemas, build_tool_schemas

logger = logging.getLogger(__name__)


def build_tool_catalog(definitions: Iterable[ToolDefinition], handler: ToolHandler) -> list[RegisteredTool]:
    """
    Build one RegisteredTool per definition.

    A definition whose schemas cannot be built is logged and omitted; the
    rest still register.
    """
    tools = []
    for definition in definitions:
        try:
            schemas = build_tool_schemas(definition)
        except Exception as e:
            logger.warning(f"Failed to build tool {definition.tool_name} ({definition.source_name}), skipping: {e}")
            continue

        tools.append(
            RegisteredTool(
                name=definition.tool_name,
                description=definition.description,
                input_schema=schemas.input_schema,
                output_schema=schemas.output_schema,
                arguments_model=schemas.arguments_model,
                handler=handler,
                definition=definition,
                result_type=schemas.result_type,
                column_types=schemas.column_types,
            )
        )
        logger.info(f"Registered tool: {definition.tool_name} (type: {definition.kind.value})")
    return tools


__all__ = [
    'BUILTIN_TOOL_NAMES',
    'GET_INFO_TOOL_NAME',
    'GetInfoArguments',
    'RegisteredTool',
    'ToolHandler',
    'ToolSchemas',
    'build_tool_catalog',
    'build_tool_schemas',
    'get_builtin_tools',
    'get_info_tool',
]
