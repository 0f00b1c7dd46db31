"""Markup assembly DSL.

Documents are built from three node shapes: an Element carrying text, an
IndentedCollection whose children share an inherited indentation, and a
NonIndentedCollection of top-level siblings. Nodes are immutable; the
builders below compose new trees rather than mutating existing ones.

Link targets are never kept in shared state. render() returns the links it
met alongside the text, and finalize() turns them into a reference block, so
any number of documents can be rendered independently.
"""

from __future__ import annotations

import re
import zlib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

INDENT = "\t"
FALLBACK_URL = "#"

_LIST_MARKER = re.compile(r"^(\* |\d+\. )")
_TRAILING_WHITESPACE = re.compile(r"\s+$")


class MarkupType(Enum):
    """Whether an element flows inline or ends its own line."""

    INLINE = "inline"
    BLOCK = "block"


@dataclass(frozen=True)
class Attributes:
    """Rendering attributes of an element.

    references holds link targets whose markers were already baked into the
    element text (see paragraph_with_inline); they are reported by render()
    but not marked a second time.
    """

    indentation: int = 0
    link: str | None = None
    newline_prefix: int = 0
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class Element:
    """A run of text, optionally followed by an indented child subtree."""

    text: str
    type: MarkupType = MarkupType.INLINE
    attributes: Attributes = field(default_factory=Attributes)
    child: MarkupNode | None = None

    def __str__(self) -> str:
        return describe(self)


@dataclass(frozen=True)
class IndentedCollection:
    """Nodes rendered at a shared, inherited indentation level."""

    nodes: tuple[MarkupNode, ...] = ()

    def __str__(self) -> str:
        return describe(self)


@dataclass(frozen=True)
class NonIndentedCollection:
    """Top-level sibling nodes, with consecutive list items kept together."""

    nodes: tuple[MarkupNode, ...] = ()

    def __str__(self) -> str:
        return describe(self)


MarkupNode = Element | IndentedCollection | NonIndentedCollection


class Rendered(NamedTuple):
    """Rendered text and the link targets referenced by it."""

    text: str
    links: list[str]


def reference_id(url: str) -> int:
    """Stable numeric marker for a link target."""
    return zlib.crc32(url.encode("utf-8"))


def unique_links(links: Iterable[str]) -> list[str]:
    """Distinct links in order of first appearance."""
    return list(dict.fromkeys(links))


class LinkRegistry:
    """Per-document accumulator of distinct link targets.

    Pass one to link() to record targets as they are created, then hand it
    to finalize(), which drains it into the reference block.
    """

    def __init__(self) -> None:
        self._links: dict[str, None] = {}

    def register(self, url: str) -> None:
        self._links[url] = None

    def drain(self) -> list[str]:
        """Return every registered link and clear the registry."""
        links = list(self._links)
        self._links.clear()
        return links

    def clear(self) -> None:
        self._links.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._links

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._links))


def render(
    node: MarkupNode, inherited_indentation: int = 0, *, inline_links: bool = False
) -> Rendered:
    """Render a node tree to text.

    Args:
        node: Node to render
        inherited_indentation: Indentation level imposed by enclosing nodes
        inline_links: Write link targets directly into the text instead of
            emitting reference markers

    Returns:
        The text and the link targets it refers to (inline links excluded)
    """
    if isinstance(node, Element):
        return _render_element(node, inherited_indentation, inline_links)
    if isinstance(node, IndentedCollection):
        return _render_indented(node, inherited_indentation, inline_links)
    return _render_non_indented(node, inherited_indentation, inline_links)


def _render_element(node: Element, inherited_indentation: int, inline_links: bool) -> Rendered:
    attrs = node.attributes
    text = node.text
    links: list[str] = []

    if attrs.link is not None:
        if inline_links:
            text += f"({attrs.link})"
        else:
            text += f"[{reference_id(attrs.link)}]"
            links.append(attrs.link)
    links.extend(attrs.references)

    indentation = INDENT * attrs.indentation
    text = indentation + text
    # Keep multi-line text (code blocks) aligned with its first line
    text = text.replace("\n", "\n" + indentation + INDENT * inherited_indentation)
    text = "\n" * attrs.newline_prefix + text
    if node.type is MarkupType.BLOCK:
        text += "\n"

    if node.child is not None:
        child = render(node.child, inherited_indentation + 1, inline_links=inline_links)
        text += child.text
        links.extend(child.links)
    return Rendered(text, links)


def _render_indented(
    node: IndentedCollection, inherited_indentation: int, inline_links: bool
) -> Rendered:
    text = ""
    links: list[str] = []
    for child in node.nodes:
        rendered = render(child, inherited_indentation, inline_links=inline_links)
        if not text or text.endswith("\n"):
            text += INDENT * inherited_indentation
        text += rendered.text
        links.extend(rendered.links)
    return Rendered(text, links)


def _render_non_indented(
    node: NonIndentedCollection, inherited_indentation: int, inline_links: bool
) -> Rendered:
    text = ""
    links: list[str] = []
    previous_is_list_item = False
    for child in node.nodes:
        rendered = render(child, inherited_indentation, inline_links=inline_links)
        is_list_item = bool(_LIST_MARKER.match(rendered.text))
        # Consecutive list items must not be separated by a blank line
        if is_list_item and previous_is_list_item:
            text = _TRAILING_WHITESPACE.sub("", text) + "\n"
        text += rendered.text + "\n"
        links.extend(rendered.links)
        previous_is_list_item = is_list_item
    return Rendered(text, links)


def describe(node: MarkupNode) -> str:
    """Inline-link rendering with surrounding whitespace stripped."""
    return render(node, inline_links=True).text.strip()


def finalize(node: MarkupNode, registry: LinkRegistry | None = None) -> str:
    """Render a complete document followed by its link reference definitions.

    Every distinct link target referenced by the document (plus anything
    still held by the registry, which is drained) gets exactly one
    "[marker]:url" line.
    """
    rendered = render(node, inline_links=False)
    links = rendered.links
    if registry is not None:
        links = links + registry.drain()
    definitions = "\n".join(f"[{reference_id(url)}]:{url}" for url in unique_links(links))
    return rendered.text + "\n" + definitions


# Builders


def document(*children: MarkupNode) -> NonIndentedCollection:
    return NonIndentedCollection(tuple(children))


def element(
    value: str,
    type: MarkupType,  # noqa: A002 - mirrors the Element field name
    attributes: Attributes | None = None,
    child: MarkupNode | None = None,
) -> Element:
    return Element(str(value), type, attributes or Attributes(), child)


def header(level: int, text: str) -> Element:
    """Heading; the level is clamped to 1..6."""
    level = min(max(level, 1), 6)
    return Element(f"{'#' * level} {text}", MarkupType.BLOCK)


def paragraph(text: str, indentation: int = 0) -> Element:
    return Element(text, MarkupType.BLOCK, Attributes(indentation=indentation))


def paragraph_with_inline(elements: Iterable[MarkupNode], indentation: int = 0) -> Element:
    """Paragraph composed of inline nodes joined by single spaces.

    Each node is rendered on its own; link targets they refer to travel with
    the paragraph as references.
    """
    parts = [render(node) for node in elements]
    value = " ".join(part.text for part in parts)
    references = tuple(link for part in parts for link in part.links)
    return Element(
        value, MarkupType.BLOCK, Attributes(indentation=indentation, references=references)
    )


def text(value: str, indentation: int = 0) -> Element:
    return Element(value, MarkupType.INLINE, Attributes(indentation=indentation))


def unordered_list_item(value: str, *children: MarkupNode, indentation: int = 0) -> Element:
    return Element(
        f"* {value}",
        MarkupType.BLOCK,
        Attributes(indentation=indentation),
        IndentedCollection(children),
    )


def ordered_list_item(value: str, *children: MarkupNode, indentation: int = 0) -> Element:
    return Element(
        f"1. {value}",
        MarkupType.BLOCK,
        Attributes(indentation=indentation),
        IndentedCollection(children),
    )


def code_block(value: str, syntax: str = "", indentation: int = 0) -> Element:
    return Element(
        f"```{syntax}\n{value}\n```", MarkupType.BLOCK, Attributes(indentation=indentation)
    )


def code_inline(value: str) -> Element:
    return Element(f"`{value}`")


def link(value: str, destination: str, registry: LinkRegistry | None = None) -> Element:
    """Inline link; the destination is registered right away when a registry is given."""
    url = destination.strip() or FALLBACK_URL
    if registry is not None:
        registry.register(url)
    return Element(f"[{value}]", MarkupType.INLINE, Attributes(link=url))


def italics(value: str) -> Element:
    return Element(f"*{value}*")


def bold(value: str) -> Element:
    return Element(f"**{value}**")


def bold_italics(value: str) -> Element:
    return Element(f"***{value}***")


def newline() -> Element:
    return Element("\n")


def hr() -> Element:
    return Element("___", MarkupType.BLOCK)


def append(node: MarkupNode, *nodes: MarkupNode) -> MarkupNode:
    """Return a new tree with nodes added as siblings of node's contents.

    Collections are extended. An element gets the nodes appended to its child
    subtree, which is created as an indented collection if missing.
    """
    if isinstance(node, NonIndentedCollection):
        return NonIndentedCollection(node.nodes + nodes)
    if isinstance(node, IndentedCollection):
        return IndentedCollection(node.nodes + nodes)
    if node.child is not None:
        return Element(node.text, node.type, node.attributes, append(node.child, *nodes))
    return Element(node.text, node.type, node.attributes, IndentedCollection(nodes))
