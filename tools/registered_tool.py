"""
RegisteredTool - one callable tool as held by the registry
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional

from mcp import types
from pydantic import BaseModel

from introspection.type_mapping import OpenType, SemanticType
from models import ToolDefinition

from .schema_builder import argument_field_name

# handler(tool, arguments) -> CallToolResult
ToolHandler = Callable[["RegisteredTool", dict[str, Any]], Awaitable[types.CallToolResult]]


@dataclass(frozen=True)
class RegisteredTool:
    """
    Immutable after construction, so one instance can serve concurrent calls.
    Built-in tools have no ToolDefinition.
    """
    name: str
    description: Optional[str]
    input_schema: dict[str, Any]
    output_schema: dict[str, Any]
    arguments_model: type[BaseModel]
    handler: ToolHandler = field(repr=False, compare=False)
    definition: Optional[ToolDefinition] = None
    result_type: SemanticType = OpenType()
    column_types: Mapping[str, SemanticType] = field(default_factory=lambda: MappingProxyType({}))

    def to_mcp_tool(self) -> types.Tool:
        # The output schema is not advertised: MCP output schemas must be
        # objects and require structured content alongside the text result.
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )

    def catalog_arguments(self, validated: BaseModel) -> dict[str, Any]:
        """Map validated arguments back to catalog parameter names, in position order."""
        if self.definition is None:
            return {}
        return {
            param.name: getattr(validated, argument_field_name(param.position))
            for param in self.definition.parameters
        }

    async def invoke(self, arguments: Optional[dict[str, Any]]) -> types.CallToolResult:
        return await self.handler(self, arguments or {})
