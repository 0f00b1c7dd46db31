"""Base abstractions for document rendering backends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from docforest.access import AccessLevel
    from docforest.models import DocEntity, OutputFormat, PageLayout


class DocumentBackend(Protocol):
    """Protocol for document rendering backends.

    Backends turn entities into text in a specific format. The
    DocumentGenerator decides which entities appear and where each page
    lives; the backend only renders.
    """

    output_format: OutputFormat

    @property
    def file_extension(self) -> str:
        """Extension used for multi-page files and links."""
        ...

    def render_entity(self, entity: DocEntity, minimum_access: AccessLevel) -> str:
        """Render the page for one entity.

        Args:
            entity: The entity to render
            minimum_access: Members below this access level are left out

        Returns:
            Rendered page text
        """
        ...

    def render_markdown(self, text: str) -> str:
        """Convert hand-written markdown (such as a landing page) to this format."""
        ...

    def render_contents(
        self,
        entities: Sequence[DocEntity],
        minimum_access: AccessLevel,
        layout: PageLayout,
    ) -> str:
        """Render the contents listing for a set of top-level entities.

        Args:
            entities: Candidate entities, in top-level index order
            minimum_access: Entities below this access level are left out
            layout: Determines whether links are anchors or relative files

        Returns:
            Rendered contents text
        """
        ...
