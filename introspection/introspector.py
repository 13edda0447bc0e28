"""
Schema introspection

Discovers views and functions in the scanned schema and turns each into a
ToolDefinition. Discovery is a fold over the listed objects: successes are
accumulated, per-object failures are logged and recorded as skips, and only a
failure of the initial listing aborts the pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import ValidationError

from errors import CatalogUnreachableError, MalformedCatalogResponseError, NameCollisionError
from .naming import to_public_name
from models import (
    FunctionDetails,
    NamedColumn,
    NamedParameter,
    ObjectKind,
    SchemaObject,
    ToolDefinition,
    ViewDetails,
    object_details_adapter,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedObject:
    """An object left out of the tool set, and why"""
    name: str
    kind: Optional[ObjectKind]
    reason: str


@dataclass
class DiscoveryReport:
    definitions: list[ToolDefinition] = field(default_factory=list)
    skipped: list[SkippedObject] = field(default_factory=list)

    @property
    def tool_names(self) -> list[str]:
        return [definition.tool_name for definition in self.definitions]


def _validation_summary(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in issue['loc']) or '(root)'}: {issue['msg']}"
        for issue in error.errors()
    )


def build_tool_definition(details: Union[ViewDetails, FunctionDetails]) -> ToolDefinition:
    """
    Transform validated catalog details into a ToolDefinition.

    Raises:
        MalformedCatalogResponseError: parameter positions are not 1..n,
            or two parameters share a public name
    """
    description = details.comment or None

    if isinstance(details, ViewDetails):
        columns = tuple(
            NamedColumn(
                name=column.column_name,
                public_name=to_public_name(column.column_name),
                pg_type=column.data_type,
                nullable=column.is_nullable,
                description=column.comment or None,
            )
            for column in details.columns
        )
        return ToolDefinition(
            tool_name=to_public_name(details.object_name),
            source_name=details.object_name,
            kind=ObjectKind.VIEW,
            description=description,
            columns=columns,
        )

    ordered = sorted(details.parameters, key=lambda p: p.position)
    positions = [p.position for p in ordered]
    if positions != list(range(1, len(ordered) + 1)):
        raise MalformedCatalogResponseError(
            details.object_name,
            f"parameter positions {positions} are not contiguous from 1",
        )

    parameters = []
    seen: dict[str, str] = {}
    for param in ordered:
        public_name = to_public_name(param.parameter_name)
        if public_name in seen:
            raise MalformedCatalogResponseError(
                details.object_name,
                f"parameters '{seen[public_name]}' and '{param.parameter_name}' "
                f"both normalise to '{public_name}'",
            )
        seen[public_name] = param.parameter_name
        parameters.append(
            NamedParameter(
                name=param.parameter_name,
                public_name=public_name,
                pg_type=param.data_type,
                position=param.position,
                # No per-parameter comments in the catalog; fall back to the function's
                description=description,
            )
        )

    return ToolDefinition(
        tool_name=to_public_name(details.object_name),
        source_name=details.object_name,
        kind=ObjectKind.FUNCTION,
        description=description,
        parameters=tuple(parameters),
        return_type=details.return_type,
        returns_set=details.returns_set,
    )


class SchemaIntrospector:
    """
    Introspects the scanned schema through the catalog repository to discover
    views and functions suitable for exposing as MCP tools.
    """

    def __init__(self, catalog, reserved_names: tuple[str, ...] = ()):
        """
        Args:
            catalog: Object with async list_objects() and fetch_details(name, kind)
            reserved_names: Public names already taken (built-in tools)
        """
        self.catalog = catalog
        self.reserved_names = reserved_names

    async def discover(self) -> list[ToolDefinition]:
        """Run a discovery pass and return only the resulting definitions."""
        report = await self.run()
        return report.definitions

    async def run(self) -> DiscoveryReport:
        """
        Run one complete discovery pass.

        Raises:
            CatalogUnreachableError: the object listing failed or was unusable
        """
        logger.info("Starting schema introspection...")
        objects, report = await self._list_objects()

        taken: dict[str, str] = {name: "(built-in)" for name in self.reserved_names}
        for obj in objects:
            try:
                definition = await self._introspect_object(obj)
                if definition.tool_name in taken:
                    raise NameCollisionError(
                        definition.tool_name, definition.source_name, taken[definition.tool_name]
                    )
            except (MalformedCatalogResponseError, NameCollisionError) as e:
                logger.warning(f"Skipping {obj.object_type.value} {obj.object_name}: {e}")
                report.skipped.append(SkippedObject(obj.object_name, obj.object_type, str(e)))
                continue
            except Exception as e:
                logger.warning(
                    f"Failed to introspect {obj.object_type.value} {obj.object_name}, skipping: {e}"
                )
                report.skipped.append(SkippedObject(obj.object_name, obj.object_type, f"{type(e).__name__}: {e}"))
                continue

            taken[definition.tool_name] = definition.source_name
            report.definitions.append(definition)

        logger.info(
            f"Schema introspection completed. Found {len(report.definitions)} tools, "
            f"skipped {len(report.skipped)} objects."
        )
        return report

    async def _list_objects(self) -> tuple[list[SchemaObject], DiscoveryReport]:
        try:
            payload = await self.catalog.list_objects()
        except Exception as e:
            logger.error(f"Failed to fetch schema objects: {e}", exc_info=True)
            raise CatalogUnreachableError(f"Failed to list catalog objects: {e}") from e

        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise CatalogUnreachableError(
                f"Catalog listing returned {type(payload).__name__}, expected a list"
            )

        report = DiscoveryReport()
        objects = []
        for item in payload:
            try:
                objects.append(SchemaObject.model_validate(item))
            except ValidationError as e:
                name = item.get("object_name", "<unnamed>") if isinstance(item, dict) else "<unnamed>"
                logger.warning(f"Skipping malformed catalog entry {name}: {_validation_summary(e)}")
                report.skipped.append(SkippedObject(str(name), None, _validation_summary(e)))

        logger.info(f"Found {len(objects)} objects in catalog.")
        return objects, report

    async def _introspect_object(self, obj: SchemaObject) -> ToolDefinition:
        logger.debug(f"Fetching details for {obj.object_type.value}: {obj.object_name}")
        payload: Any = await self.catalog.fetch_details(obj.object_name, obj.object_type)

        if not payload or not isinstance(payload, dict):
            raise MalformedCatalogResponseError(obj.object_name, "details not found or not an object")

        try:
            details = object_details_adapter.validate_python(payload)
        except ValidationError as e:
            raise MalformedCatalogResponseError(obj.object_name, _validation_summary(e)) from e

        if details.object_type != obj.object_type.value:
            raise MalformedCatalogResponseError(
                obj.object_name,
                f"listed as {obj.object_type.value} but details describe a {details.object_type}",
            )

        return build_tool_definition(details)
