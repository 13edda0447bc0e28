"""
Exception types for discovery, tool invocation and configuration
"""

from typing import Any, Optional


class ToolifyError(Exception):
    """Base class for all server errors"""


class ConfigError(ToolifyError):
    """Configuration file missing, unreadable or invalid"""


class CatalogUnreachableError(ToolifyError):
    """Listing catalog objects failed; nothing can be served for this discovery pass."""


class MalformedCatalogResponseError(ToolifyError):
    """A single object's catalog payload could not be used. The object is skipped."""

    def __init__(self, object_name: str, reason: str):
        self.object_name = object_name
        self.reason = reason
        super().__init__(f"{object_name}: {reason}")


class NameCollisionError(ToolifyError):
    """Two definitions normalise to the same public tool name."""

    def __init__(self, tool_name: str, source_name: str, existing_source: str):
        self.tool_name = tool_name
        self.source_name = source_name
        self.existing_source = existing_source
        super().__init__(
            f"Tool name '{tool_name}' from '{source_name}' collides with '{existing_source}'"
        )


class ArgumentValidationError(ToolifyError):
    """Caller-supplied arguments do not match a tool's input schema."""

    def __init__(self, tool_name: str, issues: Optional[list[dict[str, Any]]] = None):
        self.tool_name = tool_name
        self.issues = issues or []
        super().__init__(f"Invalid arguments for {tool_name}: {self.describe()}")

    def describe(self) -> str:
        parts = []
        for issue in self.issues:
            location = ".".join(str(part) for part in issue.get("loc", ())) or "(arguments)"
            parts.append(f"{location}: {issue.get('msg', 'invalid value')}")
        return "; ".join(parts) or "arguments rejected"


class ToolCallError(ToolifyError):
    """Raised by the stdio transport to report a tool-level error result."""
