"""
Built-in MCP Tools
Tools served by every instance regardless of what the scanned schema contains.
"""

from typing import Optional

from mcp import types
from pydantic import BaseModel, ConfigDict

GET_INFO_TOOL_NAME = "getInfo"


class GetInfoArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")

    infoType: Optional[str] = None


def get_info_tool() -> types.Tool:
    """Server information tool."""
    return types.Tool(
        name=GET_INFO_TOOL_NAME,
        description="Get information about the server, such as its version.",
        inputSchema={
            "type": "object",
            "properties": {
                "infoType": {
                    "type": "string",
                    "description": "Kind of information to return (e.g. 'version')"
                }
            }
        }
    )


def get_builtin_tools() -> list[types.Tool]:
    return [get_info_tool()]


BUILTIN_TOOL_NAMES = tuple(tool.name for tool in get_builtin_tools())
