"""Entity store: ingestion, extension merging, search and indices."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

from .access import EXTENDABLE_KINDS, TOP_LEVEL_KINDS, AccessLevel, EntityKind, Kind
from .config import DocsConfig
from .exceptions import ParseError
from .logger import get_logger
from .models import DocEntity
from .parser import EntityParser, SourceRecords

logger = get_logger()


def flatten(docs: Iterable[DocEntity]) -> Iterator[DocEntity]:
    """Yield every entity in the forest and all of their descendants."""
    for doc in docs:
        yield from doc.walk()


def _is_source_extension(doc: DocEntity) -> bool:
    """True for extension entities that came from input records."""
    return doc.kind is EntityKind.EXTENSION and not doc.synthetic


def _attach(entity: DocEntity, attachments: dict[int, list[DocEntity]]) -> DocEntity:
    """Rebuild an entity tree with pending extensions attached.

    Attachments are keyed by the id() of the target in the original forest,
    so untouched subtrees are returned as-is.
    """
    children = tuple(_attach(child, attachments) for child in entity.children)
    pending = attachments.get(id(entity), [])
    children_changed = any(new is not old for new, old in zip(children, entity.children))
    if not pending and not children_changed:
        return entity
    attached = tuple(_attach(ext, attachments) for ext in pending)
    return replace(entity, children=children, extensions=entity.extensions + attached)


def merge_internal_extensions(
    docs: Iterable[DocEntity], *, duplicate_matches: bool = True
) -> list[DocEntity]:
    """Fold extensions of in-project types into those types.

    Every top-level extension is matched by title against every class,
    struct, enum and protocol anywhere in the forest. With duplicate_matches
    an extension is attached to each same-titled type; otherwise only to the
    first one found. Matched extensions leave the top level and the order of
    the remaining entries is preserved.

    Returns:
        A new top-level list; the input entities are not modified
    """
    docs = list(docs)
    targets = [doc for doc in flatten(docs) if doc.kind in EXTENDABLE_KINDS]

    attachments: dict[int, list[DocEntity]] = {}
    matched: set[int] = set()
    for index, extension in enumerate(docs):
        if not _is_source_extension(extension):
            continue
        for target in targets:
            if target.title != extension.title:
                continue
            attachments.setdefault(id(target), []).append(extension)
            matched.add(index)
            logger.checks(
                f"Extension '{extension.title}' from {extension.source_file} "
                f"matches {target.kind_label} '{target.title}'"
            )
            if not duplicate_matches:
                break

    if not matched:
        return docs

    logger.changes(f"Merged {len(matched)} extension(s) into in-project types")
    remaining = [doc for index, doc in enumerate(docs) if index not in matched]
    return [_attach(doc, attachments) for doc in remaining]


def make_extension_group(
    title: str, source_file: str, members: Iterable[DocEntity] = ()
) -> DocEntity:
    """Create the synthetic container that groups extensions of an external type."""
    return DocEntity(
        title=title,
        access=AccessLevel.OPEN,
        comment=f"The following are extensions on the {title} Type.",
        source_file=source_file,
        kind=EntityKind.EXTENSION,
        extensions=tuple(members),
        synthetic=True,
    )


def merge_external_extensions(
    docs: Iterable[DocEntity], *, project_title: str, reverse_order: bool = True
) -> list[DocEntity]:
    """Group the remaining top-level extensions by title.

    Each distinct title gets one synthetic container appended to the top
    level. Extensions are pulled from the back of the list, so by default the
    container holds them in reverse encounter order. A synthetic container
    already present for a title is extended rather than duplicated.

    Returns:
        A new top-level list; the input entities are not modified
    """
    docs = list(docs)
    titles = list(dict.fromkeys(doc.title for doc in docs if _is_source_extension(doc)))

    groups: list[DocEntity] = []
    for title in titles:
        members = [doc for doc in docs if _is_source_extension(doc) and doc.title == title]
        if reverse_order:
            members.reverse()
        docs = [doc for doc in docs if not (_is_source_extension(doc) and doc.title == title)]

        existing = next(
            (i for i, doc in enumerate(docs) if doc.synthetic and doc.title == title), None
        )
        if existing is not None:
            group = docs[existing]
            docs[existing] = replace(group, extensions=group.extensions + tuple(members))
        else:
            groups.append(make_extension_group(title, project_title, members))
        logger.changes(f"Grouped {len(members)} extension(s) on external type '{title}'")

    return docs + groups


class EntityStore:
    """Owns the documentation forest and answers queries about it.

    Entities are ingested first, then merge_extensions() consolidates
    extensions in one step. Queries always see either the pre-merge or the
    fully merged forest.
    """

    def __init__(self, config: DocsConfig | None = None):
        self.config = config or DocsConfig()
        self.parser = EntityParser(self.config.project_root)
        self._docs: list[DocEntity] = []

    @property
    def docs(self) -> tuple[DocEntity, ...]:
        """Top-level entities."""
        return tuple(self._docs)

    @property
    def minimum_access(self) -> AccessLevel:
        return self.config.minimum_access

    def add(self, entities: Iterable[DocEntity]) -> None:
        self._docs.extend(entities)

    def add_records(self, sources: Iterable[SourceRecords]) -> int:
        """Convert and add (source path, records) pairs.

        Returns:
            Number of top-level entities added
        """
        entities = self.parser.build_entities(sources)
        self._docs.extend(entities)
        return len(entities)

    def ingest_payload(self, text: str | bytes, fmt: str = "json") -> int:
        """Decode and add an indexer payload.

        A payload that cannot be decoded is logged and contributes nothing.

        Returns:
            Number of top-level entities added
        """
        try:
            entities = self.parser.parse_text(text, fmt)
        except ParseError as e:
            logger.error(f"Error decoding docs: {e}")
            return 0
        self._docs.extend(entities)
        logger.changes(f"Ingested {len(entities)} top-level entities")
        return len(entities)

    def ingest_file(self, path: Path | str) -> int:
        """Decode and add a payload file. Missing or malformed files add nothing."""
        try:
            entities = self.parser.parse_file(path)
        except ParseError as e:
            logger.error(f"Error decoding docs from {path}: {e}")
            return 0
        self._docs.extend(entities)
        logger.changes(f"Ingested {len(entities)} top-level entities from {path}")
        return len(entities)

    def clear(self) -> None:
        """Remove every entity."""
        self._docs.clear()

    def merge_extensions(self) -> None:
        """Run the internal then the external extension merge."""
        merge_config = self.config.merge
        merged = merge_internal_extensions(
            self._docs, duplicate_matches=merge_config.duplicate_internal_matches
        )
        merged = merge_external_extensions(
            merged,
            project_title=self.config.title,
            reverse_order=merge_config.reverse_external_order,
        )
        self._docs = merged

    def search(
        self,
        title: str | None = None,
        kind: Kind | None = None,
        minimum_access: AccessLevel = AccessLevel.INTERNAL,
    ) -> list[DocEntity]:
        """Search the whole forest.

        Args:
            title: Case-insensitive substring to look for in titles
            kind: Exact kind to match
            minimum_access: Lowest access level to include

        Returns:
            Matching entities in depth-first forest order
        """
        results = [doc for doc in flatten(self._docs) if doc.access >= minimum_access]

        if title is not None:
            needle = title.lower()
            results = [doc for doc in results if needle in doc.title.lower()]

        if kind is not None:
            results = [doc for doc in results if doc.kind == kind]

        return results

    def index_of(self, kind: Kind) -> list[DocEntity]:
        """Every entity of a kind, regardless of access level."""
        return self.search(kind=kind, minimum_access=AccessLevel.PRIVATE)

    @property
    def classes_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.CLASS)

    @property
    def structs_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.STRUCT)

    @property
    def enums_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.ENUM)

    @property
    def protocols_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.PROTOCOL)

    @property
    def extensions_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.EXTENSION)

    @property
    def global_functions_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.GLOBAL_FUNCTION)

    @property
    def type_aliases_index(self) -> list[DocEntity]:
        return self.index_of(EntityKind.TYPE_ALIAS)

    @property
    def top_level_index(self) -> list[DocEntity]:
        """Every globally reachable entity, grouped in fixed kind order."""
        return [doc for kind in TOP_LEVEL_KINDS for doc in self.index_of(kind)]

    @property
    def top_level_index_min_access(self) -> list[DocEntity]:
        """The top-level index restricted to the configured minimum access."""
        return [doc for doc in self.top_level_index if doc.access >= self.minimum_access]
