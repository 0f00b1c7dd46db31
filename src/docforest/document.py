"""Backend-agnostic document generator for docforest."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .access import docset_type
from .config import DocsConfig
from .logger import get_logger
from .models import DocEntity, IndexEntry, OutputFormat, PageLayout

if TYPE_CHECKING:
    from .backends.base import DocumentBackend
    from .store import EntityStore

logger = get_logger()

LANDING_PAGE_NAMES = ("doclandingpage.md", "readme.md", "readme")
PAGE_SEPARATOR = "\n\n\n"


def find_landing_page(directory: Path | str) -> Path | None:
    """Find the page to show first in multi-page output.

    A doclandingpage.md wins over readme.md, which wins over a bare readme.
    Names are matched case-insensitively.

    Returns:
        Path of the landing page, or None if the directory has none
    """
    directory = Path(directory)
    if not directory.is_dir():
        return None
    by_name = {path.name.lower(): path for path in directory.iterdir() if path.is_file()}
    for name in LANDING_PAGE_NAMES:
        if name in by_name:
            return by_name[name]
    return None


class DocumentGenerator:
    """Generate documentation for an entity store using a pluggable backend.

    The generator decides which entities get pages and where they live;
    format-specific rendering is delegated to the backend.
    """

    def __init__(
        self,
        store: EntityStore,
        backend: DocumentBackend,
        config: DocsConfig | None = None,
    ):
        self.store = store
        self.backend = backend
        self.config = config or store.config

    def entities(self) -> list[DocEntity]:
        """Top-level entities that get their own page."""
        minimum_access = self.config.minimum_access
        return [e for e in self.store.top_level_index if e.access >= minimum_access]

    def render_page(self, entity: DocEntity) -> str:
        return self.backend.render_entity(entity, self.config.minimum_access)

    def render_contents(self, layout: PageLayout) -> str:
        return self.backend.render_contents(
            self.store.top_level_index, self.config.minimum_access, layout
        )

    def generate(self) -> str:
        """Generate single-page output: the contents followed by every page."""
        pages = PAGE_SEPARATOR.join(self.render_page(entity) for entity in self.entities())
        contents = self.render_contents(PageLayout.SINGLE_PAGE)
        return contents + "\n\n" + pages

    def generate_pages(self, landing_page: str | None = None) -> dict[str, str]:
        """Generate multi-page output.

        Args:
            landing_page: Optional text for the landing page

        Returns:
            Mapping of relative file path to file contents
        """
        extension = self.backend.file_extension
        files: dict[str, str] = {}
        for entity in self.entities():
            path = entity.link_path(PageLayout.MULTI_PAGE, self.backend.output_format)
            if path in files:
                logger.checks(f"Page {path} already generated, replacing it with '{entity.title}'")
            files[path] = self.render_page(entity)

        files[f"contents.{extension}"] = self.render_contents(PageLayout.MULTI_PAGE)
        if landing_page is not None:
            files[f"doclandingpage.{extension}"] = self.backend.render_markdown(landing_page)
        logger.changes(f"Generated {len(files)} files")
        return files

    def index_entries(self) -> list[IndexEntry]:
        """Lookup index rows (name, type, path) for every visible top-level entity."""
        ordered = sorted(self.store.top_level_index, key=lambda e: e.kind_label)
        return [
            IndexEntry(
                name=entity.title,
                type=docset_type(entity.kind),
                path=entity.link_path(PageLayout.MULTI_PAGE, OutputFormat.HTML),
            )
            for entity in ordered
            if entity.access >= self.config.minimum_access
        ]
