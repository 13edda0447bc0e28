"""
Catalog introspection package

- type_mapping: PostgreSQL type names → semantic types → JSON Schema
- naming: catalog identifiers → public camelCase names
- introspector: discovery pass producing ToolDefinitions
"""

from .introspector import DiscoveryReport, SchemaIntrospector, SkippedObject, build_tool_definition
from .naming import to_public_name
from .type_mapping import map_pg_type, to_json_schema

__all__ = [
    'DiscoveryReport',
    'SchemaIntrospector',
    'SkippedObject',
    'build_tool_definition',
    'to_public_name',
    'map_pg_type',
    'to_json_schema',
]
