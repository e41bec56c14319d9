"""
toolkit-hub Orchestrator

Builds the immutable HubContext at startup and dispatches calls:

    load_config → PackageLoader → ToolRegistry (policy-filtered)
                → GuardrailPipeline (per tool) → StatusReporter

Initialization never fails for operational reasons. A missing or
invalid config degrades to an empty package set, failing packages are
recorded and skipped, and the status/health operations are always
registered.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from toolkit_hub.audit.invocation_log import InvocationLog
from toolkit_hub.config import HubSettings, OrchestratorConfig, PackagePolicy, load_config
from toolkit_hub.exceptions import ConfigError, GuardrailError
from toolkit_hub.logging import get_logger
from toolkit_hub.packages.loader import LoadedPackage, PackageLoader
from toolkit_hub.packages.manifest import ToolDefinition
from toolkit_hub.status import StatusReporter
from toolkit_hub.tools.models import ToolResult
from toolkit_hub.tools.registry import RegisteredTool, ToolRegistry
from toolkit_hub.tools.router import GuardrailPipeline

logger = get_logger("toolkit_hub.hub")

META_PACKAGE = "orchestrator"
STATUS_TOOL = "orchestrator_status"
HEALTH_TOOL = "orchestrator_health"


@dataclass(frozen=True)
class HubContext:
    """Everything built at startup. Read-only for the life of the process."""

    config: OrchestratorConfig
    config_error: ConfigError | None
    packages: dict[str, LoadedPackage]
    registry: ToolRegistry
    invocation_log: InvocationLog
    reporter: StatusReporter

    @property
    def settings(self) -> HubSettings:
        return self.config.settings


class ToolkitHub:
    """Loads packages and exposes their guarded operations.

    Usage:
        hub = ToolkitHub(config_path="~/.config/toolkit-hub/config.yaml")
        await hub.initialize()
        result = await hub.call_tool("sheets_list_sheets", {"spreadsheet_id": "abc123"})
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        config: OrchestratorConfig | None = None,
        loader: PackageLoader | None = None,
        log_stream: TextIO | None = None,
    ):
        self._config_path = config_path
        self._preloaded_config = config
        self._loader = loader or PackageLoader()
        self._log_stream = log_stream
        self._context: HubContext | None = None

    @property
    def context(self) -> HubContext:
        if self._context is None:
            raise GuardrailError("ToolkitHub.initialize() has not been called")
        return self._context

    @property
    def initialized(self) -> bool:
        return self._context is not None

    def _load_config(self) -> tuple[OrchestratorConfig, ConfigError | None]:
        if self._preloaded_config is not None:
            return self._preloaded_config, None
        try:
            return load_config(self._config_path), None
        except ConfigError as e:
            logger.error(
                "Failed to load orchestrator config: %s",
                e,
                extra={"error_code": e.code.value},
            )
            return OrchestratorConfig.empty(), e

    async def initialize(self) -> HubContext:
        """Build the hub context. Safe to call once; later calls return the same context."""
        if self._context is not None:
            return self._context

        from toolkit_hub import __version__

        config, config_error = self._load_config()
        settings = config.settings
        invocation_log = InvocationLog(
            enabled=settings.log_invocations,
            log_file=settings.log_file,
            stream=self._log_stream,
        )
        registry = ToolRegistry()
        packages = await self._loader.load_all(config)
        reporter = StatusReporter(config, packages, registry, __version__, config_error)

        self._register_meta_tools(registry, reporter)

        def pipeline_for(package: str, definition: ToolDefinition, policy: PackagePolicy):
            return GuardrailPipeline(
                package,
                definition,
                policy,
                invocation_log=invocation_log,
                handler_timeout_s=settings.handler_timeout_s,
            )

        for name, loaded in packages.items():
            if loaded.manifest is None:
                continue
            bound = registry.register_package(name, loaded.manifest, loaded.policy, pipeline_for)
            logger.info(
                "Registered %d of %d declared tools",
                len(bound),
                len(loaded.manifest.tools),
                extra={"package": name},
            )

        self._context = HubContext(
            config=config,
            config_error=config_error,
            packages=packages,
            registry=registry,
            invocation_log=invocation_log,
            reporter=reporter,
        )
        return self._context

    def _register_meta_tools(self, registry: ToolRegistry, reporter: StatusReporter) -> None:
        async def status(arguments: dict[str, Any]) -> ToolResult:
            return ToolResult.ok(reporter.render_status())

        async def health(arguments: dict[str, Any]) -> ToolResult:
            report = await reporter.build_health()
            return ToolResult.ok(json.dumps(report, indent=2, default=str))

        for full_name, description, handler in (
            (
                STATUS_TOOL,
                "Show which packages are configured, loaded, and how they are secured.",
                status,
            ),
            (
                HEALTH_TOOL,
                "Machine-readable health report: overall status plus per-package diagnostics.",
                health,
            ),
        ):
            definition = ToolDefinition(
                name=full_name.removeprefix(f"{META_PACKAGE}_"),
                description=description,
                mutates=False,
                handler=handler,
            )
            registry.register(
                RegisteredTool(
                    full_name=full_name,
                    package=META_PACKAGE,
                    definition=definition,
                    policy=None,
                    handler=handler,
                )
            )

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Invoke an exposed tool through its guardrail pipeline."""
        tool = self.context.registry.get(name)
        if tool is None:
            return ToolResult.error(f"Unknown tool: {name}")
        return await tool(arguments or {})

    def list_tools(self) -> list[dict]:
        return self.context.registry.get_schemas()

    def tool_names(self) -> list[str]:
        return self.context.registry.names()

    async def status(self) -> str:
        return self.context.reporter.render_status()

    async def health(self) -> dict[str, Any]:
        return await self.context.reporter.build_health()

    def shutdown(self) -> None:
        if self._context is not None:
            self._context.invocation_log.close()
