"""Tests for access levels and entity kinds."""

import pytest

from docforest.access import (
    TOP_LEVEL_KINDS,
    AccessLevel,
    EntityKind,
    OtherKind,
    docset_type,
    kind_label,
    parse_kind,
)


class TestAccessLevel:
    """Test the AccessLevel ordering and parsing."""

    def test_total_order(self) -> None:
        """Levels are ordered private < fileprivate < internal < public < open."""
        levels = [
            AccessLevel.PRIVATE,
            AccessLevel.FILEPRIVATE,
            AccessLevel.INTERNAL,
            AccessLevel.PUBLIC,
            AccessLevel.OPEN,
        ]
        assert sorted(reversed(levels)) == levels
        assert AccessLevel.PUBLIC >= AccessLevel.INTERNAL
        assert not AccessLevel.FILEPRIVATE >= AccessLevel.INTERNAL

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("public", AccessLevel.PUBLIC),
            ("Open", AccessLevel.OPEN),
            ("fileprivate", AccessLevel.FILEPRIVATE),
            ("source.lang.swift.accessibility.private", AccessLevel.PRIVATE),
            ("source.lang.swift.accessibility.internal", AccessLevel.INTERNAL),
        ],
    )
    def test_parse_labels(self, label: str, expected: AccessLevel) -> None:
        """Bare and indexer-qualified labels are both accepted."""
        assert AccessLevel.parse(label) == expected

    @pytest.mark.parametrize("label", [None, "", "protected", "source.lang.swift.accessibility."])
    def test_parse_unknown(self, label: str | None) -> None:
        """Unknown or missing labels yield None."""
        assert AccessLevel.parse(label) is None

    def test_label(self) -> None:
        """Labels are lowercase names."""
        assert AccessLevel.FILEPRIVATE.label == "fileprivate"


class TestEntityKind:
    """Test kind parsing at the ingestion boundary."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("class", EntityKind.CLASS),
            ("struct", EntityKind.STRUCT),
            ("enum", EntityKind.ENUM),
            ("protocol", EntityKind.PROTOCOL),
            ("extension", EntityKind.EXTENSION),
            ("globalFunction", EntityKind.GLOBAL_FUNCTION),
            ("global func", EntityKind.GLOBAL_FUNCTION),
            ("typeAlias", EntityKind.TYPE_ALIAS),
            ("source.lang.swift.decl.class", EntityKind.CLASS),
            ("source.lang.swift.decl.extension", EntityKind.EXTENSION),
            ("source.lang.swift.decl.function.free", EntityKind.GLOBAL_FUNCTION),
            ("source.lang.swift.decl.typealias", EntityKind.TYPE_ALIAS),
        ],
    )
    def test_parse_closed_set(self, label: str, expected: EntityKind) -> None:
        """Known labels map to the closed kind set."""
        assert parse_kind(label) is expected

    def test_enum_case_marker(self) -> None:
        """Enum case markers become an OtherKind."""
        assert parse_kind("enum case") == OtherKind("enum case")
        assert parse_kind("source.lang.swift.decl.enumcase") == OtherKind("enum case")

    def test_unknown_labels_fall_back(self) -> None:
        """Unrecognised labels keep a readable label."""
        assert parse_kind("source.lang.swift.decl.function.method.instance") == OtherKind(
            "instance method"
        )
        assert parse_kind("source.lang.swift.decl.generic_type_param") == OtherKind(
            "generic_type_param"
        )
        assert parse_kind("macro") == OtherKind("macro")

    def test_kind_label(self) -> None:
        """Display labels come from the enum value or the OtherKind label."""
        assert kind_label(EntityKind.GLOBAL_FUNCTION) == "global func"
        assert kind_label(EntityKind.TYPE_ALIAS) == "typealias"
        assert kind_label(OtherKind("instance var")) == "instance var"

    def test_docset_type(self) -> None:
        """Lookup index types."""
        assert docset_type(EntityKind.CLASS) == "Class"
        assert docset_type(EntityKind.GLOBAL_FUNCTION) == "Function"
        assert docset_type(EntityKind.TYPE_ALIAS) == "Type"
        assert docset_type(OtherKind("instance var")) == "Instance Var"

    def test_top_level_order(self) -> None:
        """Top-level index order is fixed."""
        assert TOP_LEVEL_KINDS == (
            EntityKind.CLASS,
            EntityKind.STRUCT,
            EntityKind.ENUM,
            EntityKind.PROTOCOL,
            EntityKind.EXTENSION,
            EntityKind.GLOBAL_FUNCTION,
            EntityKind.TYPE_ALIAS,
        )
