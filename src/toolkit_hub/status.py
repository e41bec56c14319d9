"""
toolkit-hub Status Reporting

Two read-only views over the hub's load state:

- render_status(): Markdown text for a human operator
- build_health(): structured dict for tooling, with overall
  ready / degraded / unhealthy

Both redact policy detail: resource-scope values are reduced to a
count and load errors are reported by kind and one-line message,
never with a traceback.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any

from pydantic import BaseModel

from toolkit_hub.config import OrchestratorConfig, PackagePolicy
from toolkit_hub.exceptions import ConfigError
from toolkit_hub.packages.loader import LoadedPackage, validate_package_path
from toolkit_hub.packages.manifest import HealthCheckResult
from toolkit_hub.tools.registry import ToolRegistry


class PackageStateKind(str, Enum):
    DISABLED = "Disabled"
    LOADED = "Loaded"
    FAILED = "Failed"
    ENABLED_BUT_NOT_LOADED = "EnabledButNotLoaded"


class HealthStatus(str, Enum):
    READY = "ready"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class PackageState(BaseModel):
    kind: PackageStateKind
    version: str | None = None
    tool_count: int | None = None
    error_kind: str | None = None
    error_message: str | None = None

    def describe(self) -> str:
        if self.kind == PackageStateKind.LOADED:
            return f"✓ Loaded (v{self.version}, {self.tool_count} tools)"
        if self.kind == PackageStateKind.FAILED:
            return f"✗ Failed ({self.error_kind}: {self.error_message})"
        if self.kind == PackageStateKind.DISABLED:
            return "○ Disabled"
        return "⚠ Enabled but not loaded"


class StatusReporter:
    """Aggregates config, load results, and registry into status views.

    Holds references only; never mutates the state it reports on.
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        packages: dict[str, LoadedPackage],
        registry: ToolRegistry,
        version: str,
        config_error: ConfigError | None = None,
    ):
        self._config = config
        self._packages = packages
        self._registry = registry
        self._version = version
        self._config_error = config_error

    @property
    def config_loaded(self) -> bool:
        return self._config_error is None

    def package_state(self, name: str) -> PackageState:
        policy = self._config.packages[name]
        if not policy.enabled:
            return PackageState(kind=PackageStateKind.DISABLED)

        loaded = self._packages.get(name)
        if loaded is None:
            return PackageState(kind=PackageStateKind.ENABLED_BUT_NOT_LOADED)
        if loaded.load_error is not None:
            return PackageState(
                kind=PackageStateKind.FAILED,
                error_kind=loaded.load_error.kind.value,
                error_message=loaded.load_error.message,
            )
        if loaded.manifest is None:
            return PackageState(kind=PackageStateKind.ENABLED_BUT_NOT_LOADED)
        return PackageState(
            kind=PackageStateKind.LOADED,
            version=loaded.manifest.version,
            tool_count=len(self._registry.for_package(name)),
        )

    def overall_status(self) -> HealthStatus:
        if not self.config_loaded:
            return HealthStatus.UNHEALTHY
        for name, policy in self._config.packages.items():
            if policy.enabled and self.package_state(name).kind != PackageStateKind.LOADED:
                return HealthStatus.DEGRADED
        return HealthStatus.READY

    # ─── Human view ─────────────────────────────────────────

    def render_status(self) -> str:
        lines: list[str] = ["## Toolkit Hub Status", ""]
        lines.append(f"**Version:** {self._version}")
        if self.config_loaded:
            lines.append("**Config loaded:** Yes")
        else:
            lines.append(f"**Config loaded:** No ({self._config_error.code.value})")
        lines.append(f"**Exposed tools:** {len(self._registry)}")
        lines.append("")

        if not self._config.packages:
            lines.append("No packages configured.")
            return "\n".join(lines)

        lines.append("### Packages")
        lines.append("")
        for name, policy in self._config.packages.items():
            state = self.package_state(name)
            lines.append(f"- **{name}**: {state.describe()}")
            lines.append(f"  Path: {policy.path}")
            lines.append(f"  Security: {_security_line(policy)}")
        return "\n".join(lines)

    # ─── Machine view ───────────────────────────────────────

    async def build_health(self) -> dict[str, Any]:
        packages: dict[str, Any] = {}
        for name, policy in self._config.packages.items():
            packages[name] = await self._package_health(name, policy)

        return {
            "status": self.overall_status().value,
            "version": self._version,
            "config_loaded": self.config_loaded,
            "config_error": (
                {"code": self._config_error.code.value, "message": str(self._config_error)}
                if self._config_error is not None
                else None
            ),
            "tool_count": len(self._registry),
            "packages": packages,
        }

    async def _package_health(self, name: str, policy: PackagePolicy) -> dict[str, Any]:
        state = self.package_state(name)
        loaded = self._packages.get(name)
        validation = loaded.validation if loaded is not None else validate_package_path(policy.path)

        entry: dict[str, Any] = {
            "enabled": policy.enabled,
            "loaded": state.kind == PackageStateKind.LOADED,
            "state": state.kind.value,
            "path": policy.path,
            "version": state.version,
            "tool_count": state.tool_count or 0,
            "validation": validation.model_dump(),
            "load_error": (
                {"kind": state.error_kind, "message": state.error_message}
                if state.kind == PackageStateKind.FAILED
                else None
            ),
            "health_check": None,
            "security": _security_summary(policy),
        }

        if loaded is not None and loaded.manifest is not None and loaded.manifest.health_check:
            entry["health_check"] = await _run_health_check(loaded)
        return entry


async def _run_health_check(loaded: LoadedPackage) -> dict[str, Any]:
    """Run a package's own health check; failures are embedded, never raised."""
    try:
        raw = loaded.manifest.health_check()
        if inspect.isawaitable(raw):
            raw = await raw
        result = HealthCheckResult.model_validate(raw)
    except Exception as e:
        return {"ok": False, "error": str(e) or type(e).__name__}
    return result.model_dump()


def _security_summary(policy: PackagePolicy) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "allow_writes": policy.allow_writes,
        "allowlist_count": len(policy.allowed_tools) if policy.allowed_tools is not None else None,
        "resource_scope": None,
    }
    if policy.resource_scope is not None:
        summary["resource_scope"] = {
            "param": policy.resource_scope.param,
            "allowed_count": len(policy.resource_scope.allowed),
        }
    return summary


def _security_line(policy: PackagePolicy) -> str:
    parts = [f"writes: {'enabled' if policy.allow_writes else 'disabled'}"]
    if policy.allowed_tools is not None:
        parts.append(f"allowlist: {len(policy.allowed_tools)} tools")
    if policy.resource_scope is not None:
        count = len(policy.resource_scope.allowed)
        parts.append(f"scoped: {policy.resource_scope.param} ({count} allowed values)")
    return ", ".join(parts)
