"""
toolkit-hub — Policy-Guarded Capability Hub

Loads capability packages on demand and exposes their operations under
one namespaced surface, enforcing allowlists, write-gating, and
resource scoping on every call.

Usage:
    from toolkit_hub import ToolkitHub

    hub = ToolkitHub()
    await hub.initialize()
    result = await hub.call_tool("sheets_list_sheets", {"spreadsheet_id": "abc123"})
    print(result.content)
"""

from toolkit_hub.config import (
    HubSettings,
    OrchestratorConfig,
    PackagePolicy,
    ResourceScope,
    load_config,
)
from toolkit_hub.exceptions import (
    ConfigError,
    HubError,
    LoadErrorKind,
    PackageLoadError,
    RegistryCollisionError,
)
from toolkit_hub.hub import HubContext, ToolkitHub
from toolkit_hub.packages import PackageManifest, ToolDefinition
from toolkit_hub.tools import InvocationOutcome, ToolResult

__version__ = "0.3.0"

__all__ = [
    # Main API
    "ToolkitHub",
    "HubContext",
    "__version__",
    # Config
    "HubSettings",
    "OrchestratorConfig",
    "PackagePolicy",
    "ResourceScope",
    "load_config",
    # Package contract
    "PackageManifest",
    "ToolDefinition",
    # Results
    "InvocationOutcome",
    "ToolResult",
    # Errors
    "ConfigError",
    "HubError",
    "LoadErrorKind",
    "PackageLoadError",
    "RegistryCollisionError",
]
