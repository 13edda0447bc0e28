"""
Tool lifecycle strategies

How long a discovered tool registry lives:
- persistent: one discovery pass, reused by every call for the life of the process
- per_call: a fresh discovery pass (and a fresh registry) for every request
"""

import asyncio
import logging
from typing import Optional

from config import ServerConfig
from handlers import ToolRegistry, build_registry
from introspection import DiscoveryReport, SchemaIntrospector
from tools import BUILTIN_TOOL_NAMES

logger = logging.getLogger(__name__)


class ToolLifecycle:
    """Base strategy: owns discovery and hands out registries"""

    name = "base"

    def __init__(self, repos):
        self.repos = repos
        self.last_report: Optional[DiscoveryReport] = None

    async def discover(self) -> ToolRegistry:
        """Run one discovery pass and build a registry from it"""
        introspector = SchemaIntrospector(self.repos.catalog, reserved_names=BUILTIN_TOOL_NAMES)
        report = await introspector.run()
        self.last_report = report
        for skipped in report.skipped:
            logger.debug(f"Skipped {skipped.name}: {skipped.reason}")
        return build_registry(report.definitions, self.repos.objects)

    async def start(self):
        """Prepare for serving. Raises CatalogUnreachableError when discovery is fatal."""

    async def get_registry(self) -> ToolRegistry:
        raise NotImplementedError


class PersistentLifecycle(ToolLifecycle):
    """Discover once; every call shares the same immutable registry"""

    name = "persistent"

    def __init__(self, repos):
        super().__init__(repos)
        self._registry: Optional[ToolRegistry] = None
        self._lock = asyncio.Lock()

    async def start(self):
        await self.get_registry()

    async def get_registry(self) -> ToolRegistry:
        if self._registry is not None:
            return self._registry
        # Only the first caller runs discovery; the rest wait for its result
        async with self._lock:
            if self._registry is None:
                self._registry = await self.discover()
                logger.info(f"Tool registry ready with {len(self._registry)} tools")
        return self._registry


class PerCallLifecycle(ToolLifecycle):
    """Rediscover for every request, trading latency for freshness"""

    name = "per_call"

    async def get_registry(self) -> ToolRegistry:
        return await self.discover()


LIFECYCLES = {
    PersistentLifecycle.name: PersistentLifecycle,
    PerCallLifecycle.name: PerCallLifecycle,
}


def create_lifecycle(config: ServerConfig, repos) -> ToolLifecycle:
    """Select the lifecycle strategy named by the server configuration"""
    try:
        lifecycle_class = LIFECYCLES[config.lifecycle]
    except KeyError:
        raise ValueError(f"Unknown tool lifecycle: {config.lifecycle}")
    logger.info(f"Using {lifecycle_class.name} tool lifecycle")
    return lifecycle_class(repos)
