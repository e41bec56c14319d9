"""
toolkit-hub Exceptions

Structured exception hierarchy for the hub. All hub-specific
exceptions inherit from HubError.

Exception hierarchy:
    HubError
    +-- ConfigError             (config missing, unparsable, or invalid)
    +-- PackageLoadError        (one package could not be loaded)
    +-- RegistryCollisionError  (two tools resolved to the same exposed name)
    +-- GuardrailError          (fault inside the guardrail machinery itself)

ConfigError and PackageLoadError are operational: they are caught at
startup and surfaced through status/health. GuardrailError signals a
programming error and is allowed to terminate the process.
"""

from __future__ import annotations

from enum import Enum


class ConfigErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class LoadErrorKind(str, Enum):
    """Classification of a package load failure."""
    NOT_BUILT = "NOT_BUILT"
    NOT_FOUND = "NOT_FOUND"
    MALFORMED_MANIFEST = "MALFORMED_MANIFEST"
    LOAD_FAILURE = "LOAD_FAILURE"


class HubError(Exception):
    """Base exception for all hub errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(HubError):
    """Raised when the orchestrator config cannot be used.

    The hub catches this at startup and continues with an empty config.
    """

    def __init__(self, message: str, code: ConfigErrorCode, details: dict | None = None):
        super().__init__(message, details={"code": code.value, **(details or {})})
        self.code = code


class PackageLoadError(HubError):
    """Raised when a package manifest cannot be resolved or validated.

    Never escapes the loader; it is stored on the LoadedPackage instead.
    """

    def __init__(self, package: str, kind: LoadErrorKind, message: str):
        super().__init__(
            f"Package '{package}' failed to load ({kind.value}): {message}",
            details={"package": package, "kind": kind.value},
        )
        self.package = package
        self.kind = kind
        self.reason = message


class RegistryCollisionError(HubError):
    """Raised when an exposed tool name is already registered."""

    def __init__(self, full_name: str):
        super().__init__(
            f"Tool '{full_name}' is already registered",
            details={"full_name": full_name},
        )
        self.full_name = full_name


class GuardrailError(HubError):
    """Raised for faults in the guardrail pipeline itself, never for handler errors."""

    pass
