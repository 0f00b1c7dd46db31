"""HTML backend for entity documentation.

Pages are projected to markdown first and converted to HTML fragments with
mistune. Wrapping fragments in a full page is left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence

import mistune

from docforest.access import AccessLevel
from docforest.backends.markdown import MarkdownBackend
from docforest.models import DocEntity, OutputFormat, PageLayout


def markdown_to_html(text: str) -> str:
    """Convert markdown text to an HTML fragment."""
    result = mistune.html(text)
    assert isinstance(result, str), "HTML renderer must return a string"
    return result


class HtmlBackend(MarkdownBackend):
    """Backend for generating HTML fragments."""

    output_format = OutputFormat.HTML

    def render_entity(self, entity: DocEntity, minimum_access: AccessLevel) -> str:
        """Render the HTML fragment for one entity."""
        return markdown_to_html(super().render_entity(entity, minimum_access))

    def render_markdown(self, text: str) -> str:
        return markdown_to_html(text)

    def render_contents(
        self,
        entities: Sequence[DocEntity],
        minimum_access: AccessLevel,
        layout: PageLayout,
    ) -> str:
        """Render the HTML contents listing."""
        return markdown_to_html(super().render_contents(entities, minimum_access, layout))
