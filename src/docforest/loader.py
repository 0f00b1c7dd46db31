"""Entity store loading with the full processing pipeline."""

from __future__ import annotations

from pathlib import Path

from . import context
from .config import CONFIG_FILE_NAME, DocsConfig, load_config
from .store import EntityStore


def discover_config(
    payload_path: Path | str | None = None,
    config_path: Path | None = None,
) -> DocsConfig | None:
    """Discover the docforest config from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. payload directory / docforest_config.yaml
    4. Current directory / docforest_config.yaml
    """
    if config_path and config_path.exists():
        return load_config(config_path)

    ctx_config = context.get_config_path()
    if ctx_config and ctx_config.exists():
        return load_config(ctx_config)

    if payload_path is not None:
        dir_config = Path(payload_path).parent / CONFIG_FILE_NAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILE_NAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return None


def load_store(
    paths: list[Path] | Path | str,
    config_path: Path | None = None,
    *,
    config: DocsConfig | None = None,
) -> EntityStore:
    """Load and fully process one or more indexer payloads.

    This is the main entry point. It handles:
    1. Config discovery (unless config is given)
    2. Ingestion of every payload (undecodable payloads contribute nothing)
    3. Internal then external extension merging

    Returns:
        A merged EntityStore, ready for queries
    """
    if isinstance(paths, (str, Path)):
        paths = [Path(paths)]

    if config is None:
        config = discover_config(paths[0] if paths else None, config_path) or DocsConfig()

    store = EntityStore(config)
    for path in paths:
        store.ingest_file(path)
    store.merge_extensions()
    return store
