"""Configuration loader for docforest.

A single configuration file (docforest_config.yaml) controls the project
identity, the visibility threshold, merge behaviour and output layout.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .access import AccessLevel
from .exceptions import ConfigError
from .models import OutputFormat, PageLayout

CONFIG_FILE_NAME = "docforest_config.yaml"
DEFAULT_PROJECT_TITLE = "Documentation"


class MergeConfig(BaseModel):
    """Switches for the two order-dependent extension merge outcomes."""

    # External extensions are grouped last-first
    reverse_external_order: bool = True
    # An extension is attached to every same-titled type, not just the first
    duplicate_internal_matches: bool = True


class OutputConfig(BaseModel):
    """Configuration for rendered output."""

    layout: PageLayout = PageLayout.SINGLE_PAGE
    format: OutputFormat = OutputFormat.MARKDOWN
    code_syntax: str = "swift"


class DocsConfig(BaseModel):
    """Top-level docforest configuration."""

    project_title: str | None = None
    project_root: Path | None = None
    minimum_access: AccessLevel = AccessLevel.INTERNAL
    merge: MergeConfig = Field(default_factory=MergeConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("minimum_access", mode="before")
    @classmethod
    def parse_access_label(cls, v: Any) -> Any:
        """Accept access labels such as 'public' as well as enum values."""
        if isinstance(v, str):
            level = AccessLevel.parse(v)
            if level is None:
                valid = ", ".join(member.label for member in AccessLevel)
                raise ValueError(f"Invalid minimum_access: '{v}'. Valid values: {valid}")
            return level
        return v

    @field_validator("project_title", mode="before")
    @classmethod
    def blank_title_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def title(self) -> str:
        """Project title, falling back to the project root name."""
        if self.project_title:
            return self.project_title
        if self.project_root and self.project_root.name:
            return self.project_root.name
        return DEFAULT_PROJECT_TITLE


def load_config(config_path: Path | str) -> DocsConfig:
    """Load configuration from a YAML file.

    Relative project_root values are resolved against the config file's
    directory.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config must contain a mapping at the root level")

    try:
        config = DocsConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e

    if config.project_root and not config.project_root.is_absolute():
        config.project_root = (config_path.parent / config.project_root).resolve()
    return config
