"""
Handler Registry - Maps tool names to registered tools

Built-in tools are registered first, followed by every tool discovered from
the scanned schema. The resulting registry is an immutable mapping built once
per discovery pass; concurrent readers need no synchronization.

Usage:
    from handlers import build_registry, get_handler

    registry = build_registry(report.definitions, repos.objects)
    tool = get_handler(registry, name)
    if tool:
        result = await tool.invoke(arguments)
"""

import logging
from functools import partial
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from models import ToolDefinition
from tools import GET_INFO_TOOL_NAME, GetInfoArguments, RegisteredTool, build_tool_catalog, get_info_tool

from . import info_handlers
from . import invoker

logger = logging.getLogger(__name__)

ToolRegistry = Mapping[str, RegisteredTool]


# Built-in handlers: {tool_name: handler_function}
BUILTIN_HANDLERS = {
    GET_INFO_TOOL_NAME: info_handlers.handle_get_info,
}


def builtin_tools() -> list[RegisteredTool]:
    """RegisteredTool entries for tools served regardless of the scanned schema"""
    info = get_info_tool()
    return [
        RegisteredTool(
            name=info.name,
            description=info.description,
            input_schema=info.inputSchema,
            output_schema={"type": "string"},
            arguments_model=GetInfoArguments,
            handler=BUILTIN_HANDLERS[info.name],
        )
    ]


def build_registry(definitions: Iterable[ToolDefinition], objects) -> ToolRegistry:
    """
    Build the immutable name -> RegisteredTool mapping for one discovery pass.

    Args:
        definitions: Discovered tool definitions
        objects: ObjectRepository used by discovered tools

    A discovered tool whose name is already taken is dropped with a warning;
    the earlier registration stands.
    """
    registry: dict[str, RegisteredTool] = {}
    discovered = build_tool_catalog(definitions, partial(invoker.invoke_tool, objects))

    for tool in [*builtin_tools(), *discovered]:
        if tool.name in registry:
            logger.warning(f"Tool name '{tool.name}' already registered, skipping duplicate")
            continue
        registry[tool.name] = tool

    logger.info(f"Registry built with {len(registry)} tools")
    return MappingProxyType(registry)


def get_handler(registry: ToolRegistry, tool_name: str) -> Optional[RegisteredTool]:
    """Get the registered tool for a name, or None"""
    return registry.get(tool_name)


def list_all_handlers(registry: ToolRegistry) -> list[str]:
    """Get list of all registered tool names"""
    return list(registry.keys())


__all__ = [
    'BUILTIN_HANDLERS',
    'ToolRegistry',
    'build_registry',
    'builtin_tools',
    'get_handler',
    'list_all_handlers',
]
