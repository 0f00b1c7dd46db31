"""Markdown backend for entity documentation."""

from __future__ import annotations

from collections.abc import Sequence

from docforest import markup
from docforest.access import AccessLevel
from docforest.markup import MarkupNode
from docforest.models import NO_DOCUMENTATION, DocEntity, OutputFormat, PageLayout


class MarkdownBackend:
    """Backend for generating markdown pages."""

    output_format = OutputFormat.MARKDOWN

    def __init__(self, code_syntax: str = "swift"):
        """Initialize markdown backend.

        Args:
            code_syntax: Syntax tag for fenced declaration blocks
        """
        self.code_syntax = code_syntax

    @property
    def file_extension(self) -> str:
        return self.output_format.extension

    def render_entity(self, entity: DocEntity, minimum_access: AccessLevel) -> str:
        """Render the markdown page for one entity."""
        return markup.finalize(self.entity_page(entity, minimum_access))

    def render_markdown(self, text: str) -> str:
        return text

    def render_contents(
        self,
        entities: Sequence[DocEntity],
        minimum_access: AccessLevel,
        layout: PageLayout,
    ) -> str:
        """Render the markdown contents listing."""
        return markup.finalize(self.contents(entities, minimum_access, layout))

    def entity_page(self, entity: DocEntity, minimum_access: AccessLevel) -> MarkupNode:
        """Build the page for an entity.

        The page holds the title, kind, declaration and comment, then one
        bullet per member at or above minimum_access. The members divider is
        left out when no member is visible. Attached extensions follow in
        their own section.
        """
        page: MarkupNode = markup.document(
            markup.header(2, entity.title),
            markup.italics(entity.kind_label),
            markup.code_block(entity.declaration, syntax=self.code_syntax),
            markup.paragraph(entity.comment or NO_DOCUMENTATION),
        )

        members = entity.visible_children(minimum_access)
        if members:
            page = markup.append(
                page,
                markup.hr(),
                markup.header(4, "Members"),
                *(self.member_item(member) for member in members),
            )

        extension_nodes = self._extension_nodes(entity, minimum_access)
        if extension_nodes:
            page = markup.append(
                page, markup.hr(), markup.header(4, "Extensions"), *extension_nodes
            )
        return page

    def member_item(self, member: DocEntity) -> MarkupNode:
        """Bullet describing a single member."""
        return markup.unordered_list_item(
            str(markup.bold(member.title)),
            markup.paragraph(str(markup.italics(member.kind_label))),
            markup.code_block(member.declaration, syntax=self.code_syntax),
            markup.paragraph(member.comment or NO_DOCUMENTATION),
        )

    def _extension_nodes(self, entity: DocEntity, minimum_access: AccessLevel) -> list[MarkupNode]:
        nodes: list[MarkupNode] = []
        for extension in entity.extensions:
            if extension.access < minimum_access:
                continue
            heading = extension.title
            if extension.source_file:
                heading += f" ({extension.source_file})"
            nodes.append(markup.header(5, heading))
            nodes.append(markup.code_block(extension.declaration, syntax=self.code_syntax))
            if extension.comment:
                nodes.append(markup.paragraph(extension.comment))
            nodes.extend(
                self.member_item(member) for member in extension.visible_children(minimum_access)
            )
        return nodes

    def contents(
        self,
        entities: Sequence[DocEntity],
        minimum_access: AccessLevel,
        layout: PageLayout,
    ) -> MarkupNode:
        """Build the contents listing.

        Entities are grouped under a heading per kind. sorted() is stable, so
        entities of the same kind keep their input order. Reference numbers
        are positions in the sorted list, hidden entities included.
        """
        nodes: list[MarkupNode] = []
        references: list[str] = []
        current_heading = ""
        ordered = sorted(entities, key=lambda e: e.kind_label)
        for index, entity in enumerate(ordered):
            if entity.access < minimum_access:
                continue
            heading = entity.kind_label.title()
            if heading != current_heading:
                current_heading = heading
                nodes.append(markup.header(4, heading))
            nodes.append(markup.unordered_list_item(f"[{entity.title}][{index}]"))
            references.append(f"[{index}]:{entity.link_path(layout, self.output_format)}")

        if references:
            nodes.append(markup.paragraph("\n".join(references)))
        return markup.document(*nodes)
