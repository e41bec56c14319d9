"""
toolkit-hub Tool Registry

Maps exposed tool names to guarded handlers. For each loaded package
the exposed set is computed once, at startup, from the manifest and
the package policy:

    exposed = tools ∩ allowed_tools (if set)   -- closed allowlist
              minus mutating tools (unless allow_writes)

Allowlisting and write-gating are independent; a write tool must pass
both. Exposed names are ``<package>_<tool>`` and must be unique across
the whole registry.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from toolkit_hub.config import PackagePolicy
from toolkit_hub.exceptions import RegistryCollisionError
from toolkit_hub.logging import get_logger
from toolkit_hub.packages.manifest import PackageManifest, ToolDefinition
from toolkit_hub.tools.models import ToolResult

logger = get_logger("toolkit_hub.registry")

GuardedHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]
PipelineFactory = Callable[[str, ToolDefinition, PackagePolicy], GuardedHandler]


def full_tool_name(package: str, tool: str) -> str:
    return f"{package}_{tool}"


class RegisteredTool:
    """A tool bound into the registry under its namespaced name.

    ``handler`` is the guardrail-wrapped callable; the raw package handler
    is only reachable through it.
    """

    def __init__(
        self,
        full_name: str,
        package: str,
        definition: ToolDefinition,
        policy: PackagePolicy | None,
        handler: GuardedHandler,
    ):
        self.full_name = full_name
        self.package = package
        self.definition = definition
        self.policy = policy
        self.handler = handler

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def mutates(self) -> bool:
        return self.definition.mutates

    async def __call__(self, arguments: dict[str, Any] | None = None) -> ToolResult:
        return await self.handler(arguments or {})


def exposed_tools(
    package: str, manifest: PackageManifest, policy: PackagePolicy
) -> list[ToolDefinition]:
    """Apply allowlist and write-gating to a manifest, keeping manifest order."""
    declared = set(manifest.tool_names())
    if policy.allowed_tools is not None:
        unknown = sorted(policy.allowed_tools - declared)
        if unknown:
            logger.warning(
                "Allowlist names tools the package does not declare: %s",
                ", ".join(unknown),
                extra={"package": package},
            )

    result: list[ToolDefinition] = []
    for tool in manifest.tools:
        if policy.allowed_tools is not None and tool.name not in policy.allowed_tools:
            logger.debug("Tool not allowlisted", extra={"package": package, "tool": tool.name})
            continue
        if tool.mutates and not policy.allow_writes:
            logger.info("Write tool gated off", extra={"package": package, "tool": tool.name})
            continue
        result.append(tool)
    return result


class ToolRegistry:
    """Registry of every exposed tool, keyed by namespaced name.

    Populated during initialization and read-only afterwards.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, tool: RegisteredTool) -> None:
        """Register a tool.

        Raises RegistryCollisionError if the name is already taken.
        """
        if tool.full_name in self._tools:
            raise RegistryCollisionError(tool.full_name)
        self._tools[tool.full_name] = tool

    def register_package(
        self,
        package: str,
        manifest: PackageManifest,
        policy: PackagePolicy,
        pipeline_factory: PipelineFactory,
    ) -> list[RegisteredTool]:
        """Bind a package's exposed tools, each wrapped by the pipeline factory.

        A colliding name is logged and skipped; the rest still register.
        """
        registered: list[RegisteredTool] = []
        for definition in exposed_tools(package, manifest, policy):
            tool = RegisteredTool(
                full_name=full_tool_name(package, definition.name),
                package=package,
                definition=definition,
                policy=policy,
                handler=pipeline_factory(package, definition, policy),
            )
            try:
                self.register(tool)
            except RegistryCollisionError as e:
                logger.error(
                    "%s; dropping later registration",
                    e,
                    extra={"package": package, "tool": definition.name},
                )
                continue
            registered.append(tool)
        return registered

    def get(self, full_name: str) -> RegisteredTool | None:
        return self._tools.get(full_name)

    def get_all(self) -> list[RegisteredTool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def for_package(self, package: str) -> list[RegisteredTool]:
        return [t for t in self._tools.values() if t.package == package]

    def get_schemas(self) -> list[dict]:
        """Describe every registered tool for a transport's tool listing."""
        return [
            {
                "name": t.full_name,
                "description": t.definition.description,
                "input_schema": t.definition.input_schema(),
            }
            for t in self._tools.values()
        ]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._tools
