"""Entity record parser for docforest."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .access import ENUM_CASE_LABEL, AccessLevel, OtherKind, parse_kind
from .exceptions import ParseError, ValidationError
from .logger import get_logger
from .models import DocEntity
from .schemas import EntityRecordSchema, SourceFileSchema

logger = get_logger()

SourceRecords = tuple[str, list[EntityRecordSchema]]

YAML_SUFFIXES = {".yaml", ".yml"}


def decode_payload(text: str | bytes, fmt: str = "json") -> list[SourceRecords]:
    """Decode an indexer payload into (source path, records) pairs.

    Supported shapes:
    - {"path/File.swift": [record, ...]}
    - {"path/File.swift": {"key.substructure": [record, ...]}}
    - a list of either of the above (one mapping per indexed module)

    Raises:
        ParseError: If the text is not valid JSON/YAML or has the wrong shape
        ValidationError: If a record does not match the record schema
    """
    try:
        data: Any = yaml.safe_load(text) if fmt == "yaml" else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ParseError(f"Failed to decode entity payload: {e}") from e

    if isinstance(data, dict):
        mappings: list[Any] = [data]
    elif isinstance(data, list):
        mappings = data  # type: ignore[assignment]
    else:
        raise ParseError("Entity payload must be a mapping or a list of mappings")

    sources: list[SourceRecords] = []
    for mapping in mappings:
        if not isinstance(mapping, dict):
            raise ParseError("Each entry of the entity payload must map source paths to records")
        for path, file_data in mapping.items():  # type: ignore[union-attr]
            try:
                if isinstance(file_data, list):
                    records = [EntityRecordSchema.model_validate(r) for r in file_data]  # type: ignore[union-attr]
                else:
                    records = SourceFileSchema.model_validate(file_data or {}).substructure
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid records for '{path}': {e}") from e
            sources.append((str(path), records))
    return sources


class EntityParser:
    """Convert raw entity records into DocEntity trees.

    The parser only builds entities. Extension merging happens in the
    EntityStore once every file has been ingested.
    """

    def __init__(self, project_root: Path | str | None = None):
        self.project_root = Path(project_root) if project_root else None

    def parse_file(self, file_path: Path | str) -> list[DocEntity]:
        """Parse a JSON or YAML payload file into top-level entities."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")
        fmt = "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ParseError(f"Failed to read {file_path}: {e}") from e
        return self.parse_text(data, fmt)

    def parse_text(self, text: str | bytes, fmt: str = "json") -> list[DocEntity]:
        """Parse a JSON or YAML payload into top-level entities."""
        return self.build_entities(decode_payload(text, fmt))

    def build_entities(self, sources: Iterable[SourceRecords]) -> list[DocEntity]:
        """Convert (source path, records) pairs into top-level entities."""
        entities: list[DocEntity] = []
        for path, records in sources:
            entities.extend(self.convert_records(records, self.relative_source(path)))
        return entities

    def relative_source(self, source_file: str) -> str:
        """Make a source path relative to the project root when it lies under it."""
        if not self.project_root or not source_file:
            return source_file
        try:
            return Path(source_file).relative_to(self.project_root).as_posix()
        except ValueError:
            return source_file

    def convert_records(
        self,
        records: list[EntityRecordSchema],
        source_file: str,
        parent_title: str = "",
    ) -> list[DocEntity]:
        """Convert sibling records, recursing into nested records for children."""
        entities: list[DocEntity] = []
        for record in records:
            kind = parse_kind(record.kind)

            # Enum case markers only group their elements; hoist them into the parent
            if kind == OtherKind(ENUM_CASE_LABEL):
                entities.extend(self.convert_records(record.substructure, source_file, parent_title))
                continue

            access = AccessLevel.parse(record.accessibility)
            if not record.name or access is None:
                logger.checks(
                    f"Skipping '{record.kind}' record in {source_file}: missing name or access level"
                )
                continue

            # Qualify with the parent's full title, so a depth-3 type reads
            # Foo.Bar.Baz rather than Bar.Baz
            if isinstance(kind, OtherKind) or not parent_title:
                title = record.name
            else:
                title = f"{parent_title}.{record.name}"

            children = self.convert_records(record.substructure, source_file, title)
            entities.append(
                DocEntity(
                    title=title,
                    access=access,
                    comment=record.comment,
                    source_file=source_file,
                    kind=kind,
                    children=tuple(children),
                    attributes=frozenset(record.attributes),
                    doc_declaration=record.doc_declaration,
                    parsed_declaration=record.parsed_declaration,
                )
            )
        return entities
