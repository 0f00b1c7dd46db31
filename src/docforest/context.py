"""Per-invocation settings chosen on the command line.

The CLI records the selected config file and any overrides here; config
discovery and loading read them back. Overrides are applied to a copy, so a
loaded DocsConfig is never changed in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .access import AccessLevel
from .config import DocsConfig


@dataclass
class RunContext:
    """Settings that take precedence over docforest_config.yaml."""

    config_path: Path | None = None
    minimum_access: AccessLevel | None = None
    project_title: str | None = None

    def apply(self, config: DocsConfig) -> DocsConfig:
        """Return a copy of config with the overrides applied."""
        updates: dict[str, object] = {}
        if self.minimum_access is not None:
            updates["minimum_access"] = self.minimum_access
        if self.project_title:
            updates["project_title"] = self.project_title
        if not updates:
            return config
        return config.model_copy(update=updates)


_context = RunContext()


def get_context() -> RunContext:
    return _context


def get_config_path() -> Path | None:
    """Config file selected with --config, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    _context.config_path = path


def set_overrides(
    minimum_access: AccessLevel | None = None, project_title: str | None = None
) -> None:
    """Record command-line overrides for the current invocation."""
    _context.minimum_access = minimum_access
    _context.project_title = project_title


def apply_overrides(config: DocsConfig) -> DocsConfig:
    return _context.apply(config)


def reset_context() -> None:
    """Forget the config path and every override."""
    global _context
    _context = RunContext()
