"""
toolkit-hub Configuration

Loads the orchestrator policy file (YAML) into frozen pydantic models.
The config is read once at startup and never mutated; a change requires
a restart.

Example config.yaml:

    schema_version: "1.0"
    packages:
      sheets:
        path: ~/packages/google-sheets
        allow_writes: false
        resource_scope:
          param: spreadsheet_id
          allowed: ["abc123"]
      briefing:
        path: ~/packages/content-feed
        allowed_tools: [run_weekly_digest, content_feed_status]
    settings:
      log_invocations: true
      log_file: ~/.local/state/toolkit-hub/invocations.jsonl
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from toolkit_hub.exceptions import ConfigError, ConfigErrorCode

CONFIG_ENV_VAR = "TOOLKIT_HUB_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/toolkit-hub/config.yaml")
NAME_PATTERN = r"^[A-Za-z0-9_]+$"


def expand_path(value: str) -> str:
    """Expand a leading ~ to the user's home directory."""
    if value.startswith("~"):
        return str(Path(value).expanduser())
    return value


class ResourceScope(BaseModel):
    """Restricts one named tool parameter to a finite set of values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    param: str = Field(..., min_length=1)
    allowed: frozenset[str] = Field(default_factory=frozenset)


class PackagePolicy(BaseModel):
    """Security policy for one configured package."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    enabled: bool = True
    allow_writes: bool = False
    allowed_tools: frozenset[str] | None = None
    resource_scope: ResourceScope | None = None

    @field_validator("path")
    @classmethod
    def _expand(cls, v: str) -> str:
        return expand_path(v)


class HubSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    log_invocations: bool = False
    log_file: str | None = None
    handler_timeout_s: float | None = Field(default=None, gt=0)

    @field_validator("log_file")
    @classmethod
    def _expand(cls, v: str | None) -> str | None:
        return expand_path(v) if v else v


class OrchestratorConfig(BaseModel):
    """Top-level policy document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: str
    packages: dict[str, PackagePolicy] = Field(default_factory=dict)
    settings: HubSettings = Field(default_factory=HubSettings)

    @field_validator("packages")
    @classmethod
    def _package_keys(cls, v: dict[str, PackagePolicy]) -> dict[str, PackagePolicy]:
        for name in v:
            if not re.match(NAME_PATTERN, name):
                raise ValueError(
                    f"package key '{name}' must contain only ASCII letters, digits, or underscores"
                )
        return v

    @classmethod
    def empty(cls) -> OrchestratorConfig:
        """Config used when the real one could not be loaded."""
        return cls(schema_version="1.0")


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Pick the config file: explicit argument, then env var, then default."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def parse_config(text: str) -> OrchestratorConfig:
    """Parse and validate YAML config text.

    Raises:
        ConfigError: PARSE_ERROR for invalid YAML, VALIDATION_ERROR for
            schema violations.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config: {e}", ConfigErrorCode.PARSE_ERROR) from e

    if not isinstance(raw, dict):
        raise ConfigError(
            "Config validation failed: top level must be a mapping",
            ConfigErrorCode.VALIDATION_ERROR,
        )

    try:
        return OrchestratorConfig.model_validate(raw)
    except ValidationError as e:
        issues = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(
            f"Config validation failed: {issues}", ConfigErrorCode.VALIDATION_ERROR
        ) from e


def load_config(path: str | Path | None = None) -> OrchestratorConfig:
    """Load the orchestrator config from disk.

    Raises:
        ConfigError: NOT_FOUND if the file does not exist or cannot be
            read, PARSE_ERROR if it is not UTF-8, otherwise as
            parse_config().
    """
    config_path = resolve_config_path(path)
    details = {"path": str(config_path)}
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found at {config_path}. Create it with your package registry.",
            ConfigErrorCode.NOT_FOUND,
            details=details,
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Config file at {config_path} could not be read: {e.strerror or e}",
            ConfigErrorCode.NOT_FOUND,
            details=details,
        ) from e
    except UnicodeDecodeError as e:
        raise ConfigError(
            f"Config file at {config_path} is not valid UTF-8: {e.reason}",
            ConfigErrorCode.PARSE_ERROR,
            details=details,
        ) from e
    return parse_config(text)


def get_enabled_packages(config: OrchestratorConfig) -> dict[str, PackagePolicy]:
    """Return enabled packages, preserving config order."""
    return {name: policy for name, policy in config.packages.items() if policy.enabled}
