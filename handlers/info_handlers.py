"""
Server Information Handlers
Handles: getInfo
"""

import logging
from typing import Any

from mcp import types
from pydantic import ValidationError

from config import SERVER_NAME, SERVER_VERSION
from errors import ArgumentValidationError

logger = logging.getLogger(__name__)


async def handle_get_info(tool, arguments: dict[str, Any]) -> types.CallToolResult:
    """Report the server version or echo the requested info type"""
    try:
        validated = tool.arguments_model.model_validate(arguments)
    except ValidationError as e:
        error = ArgumentValidationError(tool.name, e.errors())
        logger.warning(str(error))
        return types.CallToolResult(
            isError=True,
            content=[types.TextContent(type="text", text=str(error))]
        )

    info_type = validated.infoType
    if info_type == "version":
        message = f"Server Version: {SERVER_VERSION} ({SERVER_NAME})"
    elif info_type:
        message = f"Requested info type: {info_type}"
    else:
        message = f"This is the {SERVER_NAME} server. Provide 'version' in infoType for details."

    return types.CallToolResult(content=[types.TextContent(type="text", text=message)])
