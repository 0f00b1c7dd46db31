"""Data models for docforest."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from .access import AccessLevel, Kind, kind_label

NO_DECLARATION = "no declaration"
NO_DOCUMENTATION = "No documentation"
LAZY_ATTRIBUTE = "lazy"

# Computed properties tend to render with a dangling " =" on the end
_TRAILING_ASSIGNMENT = re.compile(r"\s+=$")
_NON_WORD = re.compile(r"\W+")


class PageLayout(str, Enum):
    """How rendered pages are laid out on disk."""

    SINGLE_PAGE = "single_page"
    MULTI_PAGE = "multi_page"


class OutputFormat(str, Enum):
    """Output file format."""

    MARKDOWN = "markdown"
    HTML = "html"

    @property
    def extension(self) -> str:
        return "md" if self is OutputFormat.MARKDOWN else "html"


def slugify(text: str, *, lowercase: bool = True) -> str:
    """Replace runs of non-word characters with hyphens.

    Lowercased slugs are used for anchors and kind folders, case-preserving
    slugs for file names.
    """
    if lowercase:
        text = text.lower()
    return _NON_WORD.sub("-", text)


@dataclass(frozen=True)
class IndexEntry:
    """One row of the external lookup index."""

    name: str
    type: str
    path: str


@dataclass(frozen=True, eq=False)
class DocEntity:
    """A documentable construct and everything nested inside it.

    Entities are immutable. Extensions are attached by building a new forest
    (see docforest.store) and never take part in equality.
    """

    title: str
    access: AccessLevel
    comment: str | None
    source_file: str
    kind: Kind
    children: tuple[DocEntity, ...] = ()
    attributes: frozenset[str] = frozenset()
    doc_declaration: str | None = None
    parsed_declaration: str | None = None
    extensions: tuple[DocEntity, ...] = ()
    synthetic: bool = False

    @property
    def declaration(self) -> str:
        """Effective code declaration.

        The parsed declaration wins unless the entity is lazy, in which case
        the documentation declaration is more faithful.
        """
        if LAZY_ATTRIBUTE in self.attributes:
            candidates = (self.doc_declaration, self.parsed_declaration)
        else:
            candidates = (self.parsed_declaration, self.doc_declaration)
        declaration = next((c for c in candidates if c), NO_DECLARATION)
        return _TRAILING_ASSIGNMENT.sub("", declaration)

    @property
    def kind_label(self) -> str:
        return kind_label(self.kind)

    def walk(self) -> Iterator[DocEntity]:
        """Yield this entity followed by every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def visible_children(self, minimum_access: AccessLevel) -> list[DocEntity]:
        return [child for child in self.children if child.access >= minimum_access]

    def link_path(
        self,
        layout: PageLayout = PageLayout.MULTI_PAGE,
        output_format: OutputFormat = OutputFormat.HTML,
    ) -> str:
        """Relative link to this entity's rendered page.

        Returns:
            "#anchor" for single page output, "Folder/File.ext" for multi page
        """
        if layout is PageLayout.SINGLE_PAGE:
            return f"#{slugify(self.title)}"
        folder = slugify(self.kind_label)
        file_name = slugify(self.title, lowercase=False)
        return f"{folder}/{file_name}.{output_format.extension}"

    def _identity(self) -> tuple[object, ...]:
        return (
            self.title,
            self.access,
            self.comment,
            self.source_file,
            self.kind,
            self.children,
            self.attributes,
            self.declaration,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocEntity):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        members = " - ".join(f"{c.title}:{c.kind_label}" for c in self.children)
        extensions = " - ".join(f"{e.title}:{e.kind_label}" for e in self.extensions)
        return (
            f"{self.title} ({self.access.label}) {self.kind_label}\n"
            f"\tProperties: {members}\n"
            f"\tExtensions: {extensions}"
        )
