"""
toolkit-hub Package Loader

Resolves each enabled package's on-disk manifest and classifies any
failure. One package failing never prevents the others from loading,
and never prevents the hub from starting.

Build contract: a package at ``<path>`` is built when
``<path>/dist/manifest.py`` exists and defines a module-level
``manifest`` (a PackageManifest or a mapping that validates into one).
"""

from __future__ import annotations

import asyncio
import importlib.util
import sys
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType

from pydantic import BaseModel, ConfigDict, ValidationError

from toolkit_hub.config import OrchestratorConfig, PackagePolicy, get_enabled_packages
from toolkit_hub.exceptions import LoadErrorKind, PackageLoadError
from toolkit_hub.logging import get_logger
from toolkit_hub.packages.manifest import PackageManifest

logger = get_logger("toolkit_hub.loader")

DIST_DIR = "dist"
ENTRY_POINT = "manifest.py"
MANIFEST_ATTR = "manifest"
MODULE_PREFIX = "toolkit_hub_pkg_"


class PathValidation(BaseModel):
    """On-disk checks for a package path, reported by the health view."""

    model_config = ConfigDict(frozen=True)

    path_exists: bool = False
    dist_exists: bool = False
    entry_point_exists: bool = False


class LoadError(BaseModel):
    """Classified load failure stored on a LoadedPackage."""

    model_config = ConfigDict(frozen=True)

    kind: LoadErrorKind
    message: str

    @classmethod
    def from_exception(cls, exc: PackageLoadError) -> LoadError:
        return cls(kind=exc.kind, message=exc.reason)


class LoadedPackage(BaseModel):
    """Outcome of loading one configured package."""

    model_config = ConfigDict(frozen=True)

    config_name: str
    policy: PackagePolicy
    manifest: PackageManifest | None = None
    load_error: LoadError | None = None
    validation: PathValidation = PathValidation()

    @property
    def loaded(self) -> bool:
        return self.manifest is not None


def entry_point_for(path: str | Path) -> Path:
    return Path(path) / DIST_DIR / ENTRY_POINT


def validate_package_path(path: str | Path) -> PathValidation:
    root = Path(path)
    return PathValidation(
        path_exists=root.is_dir(),
        dist_exists=(root / DIST_DIR).is_dir(),
        entry_point_exists=entry_point_for(root).is_file(),
    )


def _import_entry_point(name: str, entry_point: Path) -> ModuleType:
    module_name = f"{MODULE_PREFIX}{name}"
    spec = importlib.util.spec_from_file_location(module_name, entry_point)
    if spec is None or spec.loader is None:
        raise PackageLoadError(name, LoadErrorKind.LOAD_FAILURE, f"Cannot import {entry_point}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise PackageLoadError(name, LoadErrorKind.LOAD_FAILURE, str(e) or type(e).__name__) from e
    except SystemExit as e:
        sys.modules.pop(module_name, None)
        raise PackageLoadError(
            name, LoadErrorKind.LOAD_FAILURE, f"module called sys.exit({e.code!r}) during import"
        ) from e
    return module


def _coerce_manifest(name: str, raw: object) -> PackageManifest:
    if isinstance(raw, PackageManifest):
        return raw
    if not isinstance(raw, Mapping):
        raise PackageLoadError(
            name,
            LoadErrorKind.MALFORMED_MANIFEST,
            f"'{MANIFEST_ATTR}' must be a PackageManifest, got {type(raw).__name__}",
        )
    if not isinstance(raw.get("tools"), list):
        raise PackageLoadError(name, LoadErrorKind.MALFORMED_MANIFEST, "manifest has no 'tools' list")
    try:
        return PackageManifest.model_validate(dict(raw))
    except ValidationError as e:
        issues = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise PackageLoadError(name, LoadErrorKind.MALFORMED_MANIFEST, issues) from e


def resolve_manifest(name: str, policy: PackagePolicy) -> PackageManifest:
    """Locate, import, and validate one package's manifest.

    Raises:
        PackageLoadError: classified as NOT_FOUND, NOT_BUILT, LOAD_FAILURE,
            or MALFORMED_MANIFEST.
    """
    root = Path(policy.path)
    if not root.is_dir():
        raise PackageLoadError(name, LoadErrorKind.NOT_FOUND, f"Package path does not exist: {root}")

    entry_point = entry_point_for(root)
    if not entry_point.is_file():
        raise PackageLoadError(
            name, LoadErrorKind.NOT_BUILT, f"No {DIST_DIR}/{ENTRY_POINT} under {root}; build the package first"
        )

    module = _import_entry_point(name, entry_point)
    if not hasattr(module, MANIFEST_ATTR):
        raise PackageLoadError(
            name, LoadErrorKind.MALFORMED_MANIFEST, f"{entry_point} defines no '{MANIFEST_ATTR}'"
        )
    return _coerce_manifest(name, getattr(module, MANIFEST_ATTR))


async def load_manifest(name: str, policy: PackagePolicy) -> LoadedPackage:
    """Load one package. Never raises for operational failures."""
    validation = validate_package_path(policy.path)
    try:
        manifest = await asyncio.to_thread(resolve_manifest, name, policy)
    except PackageLoadError as e:
        logger.warning(
            "Package failed to load: %s",
            e.reason,
            extra={"package": name, "error_code": e.kind.value, "path": policy.path},
        )
        return LoadedPackage(
            config_name=name,
            policy=policy,
            load_error=LoadError.from_exception(e),
            validation=validation,
        )

    logger.info(
        "Package loaded: %s %s",
        manifest.name,
        manifest.version,
        extra={"package": name, "tool_count": len(manifest.tools)},
    )
    return LoadedPackage(config_name=name, policy=policy, manifest=manifest, validation=validation)


class PackageLoader:
    """Loads every enabled package in a config, one at a time."""

    async def load_all(self, config: OrchestratorConfig) -> dict[str, LoadedPackage]:
        loaded: dict[str, LoadedPackage] = {}
        for name, policy in get_enabled_packages(config).items():
            loaded[name] = await load_manifest(name, policy)
        return loaded
