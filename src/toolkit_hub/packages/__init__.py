"""
toolkit-hub Package Discovery

Capability packages live on disk and describe their operations in a
manifest. The loader imports each enabled package in isolation:

    Config → PackageLoader → LoadedPackage (manifest or classified error)

Components:
- PackageManifest / ToolDefinition: the contract a package implements
- PackageLoader: loads every enabled package, isolating failures
- LoadedPackage: one entry per enabled package, loaded or not
"""

from toolkit_hub.packages.loader import (
    LoadedPackage,
    LoadError,
    PackageLoader,
    PathValidation,
    load_manifest,
    validate_package_path,
)
from toolkit_hub.packages.manifest import HealthCheckResult, PackageManifest, ToolDefinition

__all__ = [
    "HealthCheckResult",
    "LoadError",
    "LoadedPackage",
    "PackageLoader",
    "PackageManifest",
    "PathValidation",
    "ToolDefinition",
    "load_manifest",
    "validate_package_path",
]
