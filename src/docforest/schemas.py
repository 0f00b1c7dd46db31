"""Pydantic schemas for entity record payloads."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ATTRIBUTE_PREFIX = "source.decl.attribute."


class EntityRecordSchema(BaseModel):
    """Schema for one raw entity record from the source indexer.

    Both bare keys ("kind", "name") and indexer keys ("key.kind",
    "key.name") are accepted.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: str = Field(validation_alias=AliasChoices("kind", "key.kind"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "key.name"))
    accessibility: str | None = Field(
        default=None,
        validation_alias=AliasChoices("accessibility", "access", "key.accessibility"),
    )
    comment: str | None = Field(
        default=None, validation_alias=AliasChoices("comment", "key.doc.comment")
    )
    attributes: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("attributes", "key.attributes")
    )
    doc_declaration: str | None = Field(
        default=None,
        validation_alias=AliasChoices("doc_declaration", "key.doc.declaration"),
    )
    parsed_declaration: str | None = Field(
        default=None,
        validation_alias=AliasChoices("parsed_declaration", "key.parsed_declaration"),
    )
    substructure: list[EntityRecordSchema] = Field(
        default_factory=list,
        validation_alias=AliasChoices("substructure", "nested", "key.substructure"),
    )

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_attributes(cls, v: Any) -> list[str]:
        """Reduce attribute entries to bare names.

        Entries may be plain strings or {"key.attribute": "source.decl.attribute.lazy"}.
        """
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        names: list[str] = []
        for item in v:  # type: ignore[union-attr]
            if isinstance(item, dict):
                raw = item.get("key.attribute") or item.get("name")  # type: ignore[union-attr]
            else:
                raw = item
            if raw is None:
                continue
            name = str(raw)
            if name.startswith(ATTRIBUTE_PREFIX):
                name = name[len(ATTRIBUTE_PREFIX) :]
            names.append(name)
        return names

    @field_validator("substructure", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> Any:
        """Treat a missing nested list as empty."""
        if v is None:
            return []
        return v


EntityRecordSchema.model_rebuild()


class SourceFileSchema(BaseModel):
    """Records found in a single source file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    substructure: list[EntityRecordSchema] = Field(
        default_factory=list,
        validation_alias=AliasChoices("substructure", "key.substructure"),
    )

    @field_validator("substructure", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> Any:
        """Treat a null record list as empty."""
        if v is None:
            return []
        return v
