"""Tests for the entity store: merging, search and indices."""

import json
from collections.abc import Callable
from io import StringIO
from pathlib import Path
from typing import Any

from docforest.access import AccessLevel, EntityKind, OtherKind
from docforest.config import DocsConfig, MergeConfig
from docforest.logger import setup_logger
from docforest.models import DocEntity
from docforest.parser import decode_payload
from docforest.store import (
    EntityStore,
    flatten,
    merge_external_extensions,
    merge_internal_extensions,
)

EntityFactory = Callable[..., DocEntity]
RecordFactory = Callable[..., dict[str, Any]]


class TestInternalMerge:
    """Test folding extensions into in-project types."""

    def test_extension_attached_to_matching_type(self, entity_factory: EntityFactory) -> None:
        """A matching extension leaves the top level and is attached to the type."""
        foo = entity_factory("Foo")
        extension = entity_factory("Foo", EntityKind.EXTENSION, source_file="Ext.swift")
        other = entity_factory("Bar", EntityKind.STRUCT)

        merged = merge_internal_extensions([foo, extension, other])

        assert [d.title for d in merged] == ["Foo", "Bar"]
        assert merged[0].extensions == (extension,)
        assert merged[0].extensions[0].source_file == "Ext.swift"

    def test_nested_type_matched(self, entity_factory: EntityFactory) -> None:
        """Nested types are found through the whole forest."""
        inner = entity_factory("Outer.Inner", EntityKind.STRUCT)
        outer = entity_factory("Outer", children=(inner,))
        extension = entity_factory("Outer.Inner", EntityKind.EXTENSION)

        merged = merge_internal_extensions([outer, extension])

        assert len(merged) == 1
        assert merged[0].children[0].extensions == (extension,)
        assert merged[0].extensions == ()

    def test_input_not_modified(self, entity_factory: EntityFactory) -> None:
        """The original entities keep their empty extension lists."""
        foo = entity_factory("Foo")
        extension = entity_factory("Foo", EntityKind.EXTENSION)
        docs = [foo, extension]

        merged = merge_internal_extensions(docs)

        assert docs == [foo, extension]
        assert foo.extensions == ()
        assert merged[0] is not foo

    def test_duplicate_matches(self, entity_factory: EntityFactory) -> None:
        """Same-titled types each receive the extension unless disabled."""
        first = entity_factory("Foo", source_file="A.swift")
        second = entity_factory("Foo", EntityKind.STRUCT, source_file="B.swift")
        extension = entity_factory("Foo", EntityKind.EXTENSION)

        both = merge_internal_extensions([first, second, extension])
        only_first = merge_internal_extensions(
            [first, second, extension], duplicate_matches=False
        )

        assert [len(d.extensions) for d in both] == [1, 1]
        assert [len(d.extensions) for d in only_first] == [1, 0]

    def test_non_extendable_kinds_ignored(self, entity_factory: EntityFactory) -> None:
        """Extensions never fold into functions, typealiases or other extensions."""
        function = entity_factory("foo", EntityKind.GLOBAL_FUNCTION)
        alias = entity_factory("Foo", EntityKind.TYPE_ALIAS)
        extension = entity_factory("Foo", EntityKind.EXTENSION)

        merged = merge_internal_extensions([function, alias, extension])

        assert merged == [function, alias, extension]

    def test_nested_extensions_untouched(self, entity_factory: EntityFactory) -> None:
        """Only top-level extensions take part in the merge."""
        nested = entity_factory("Foo", EntityKind.EXTENSION)
        holder = entity_factory("Holder", children=(nested,))
        foo = entity_factory("Foo")

        merged = merge_internal_extensions([holder, foo])

        assert merged == [holder, foo]
        assert merged[1].extensions == ()

    def test_logs_changes(self, entity_factory: EntityFactory) -> None:
        """Merges are reported at changes level."""
        stream = StringIO()
        setup_logger(1, stream)

        merge_internal_extensions(
            [entity_factory("Foo"), entity_factory("Foo", EntityKind.EXTENSION)]
        )

        assert "Merged 1 extension(s)" in stream.getvalue()


class TestExternalMerge:
    """Test grouping of extensions on external types."""

    def test_same_title_grouped_in_reverse_order(self, entity_factory: EntityFactory) -> None:
        """Two String extensions become one synthetic container, last first."""
        first = entity_factory("String", EntityKind.EXTENSION, source_file="A.swift")
        second = entity_factory("String", EntityKind.EXTENSION, source_file="B.swift")
        foo = entity_factory("Foo")

        merged = merge_external_extensions([first, foo, second], project_title="Shapes")

        assert [d.title for d in merged] == ["Foo", "String"]
        group = merged[1]
        assert group.synthetic
        assert group.kind is EntityKind.EXTENSION
        assert group.access is AccessLevel.OPEN
        assert group.source_file == "Shapes"
        assert group.comment == "The following are extensions on the String Type."
        assert [e.source_file for e in group.extensions] == ["B.swift", "A.swift"]

    def test_encounter_order_when_not_reversed(self, entity_factory: EntityFactory) -> None:
        """The ordering flag keeps encounter order."""
        first = entity_factory("String", EntityKind.EXTENSION, source_file="A.swift")
        second = entity_factory("String", EntityKind.EXTENSION, source_file="B.swift")

        merged = merge_external_extensions(
            [first, second], project_title="Shapes", reverse_order=False
        )

        assert [e.source_file for e in merged[0].extensions] == ["A.swift", "B.swift"]

    def test_groups_follow_first_encounter(self, entity_factory: EntityFactory) -> None:
        """One group per distinct title, in order of first appearance."""
        docs = [
            entity_factory("Int", EntityKind.EXTENSION),
            entity_factory("String", EntityKind.EXTENSION),
            entity_factory("Int", EntityKind.EXTENSION),
        ]

        merged = merge_external_extensions(docs, project_title="P")

        assert [(d.title, len(d.extensions)) for d in merged] == [("Int", 2), ("String", 1)]

    def test_idempotent(self, entity_factory: EntityFactory) -> None:
        """Merging an already merged forest changes nothing."""
        docs = [
            entity_factory("Foo"),
            entity_factory("Foo", EntityKind.EXTENSION),
            entity_factory("String", EntityKind.EXTENSION),
        ]
        once = merge_external_extensions(merge_internal_extensions(docs), project_title="P")
        twice = merge_external_extensions(merge_internal_extensions(once), project_title="P")

        assert twice == once
        assert [len(d.extensions) for d in twice] == [len(d.extensions) for d in once]

    def test_existing_group_extended(self, entity_factory: EntityFactory) -> None:
        """A later extension joins the existing container instead of creating another."""
        merged = merge_external_extensions(
            [entity_factory("String", EntityKind.EXTENSION, source_file="A.swift")],
            project_title="P",
        )
        late = entity_factory("String", EntityKind.EXTENSION, source_file="B.swift")

        remerged = merge_external_extensions([*merged, late], project_title="P")

        assert len(remerged) == 1
        assert [e.source_file for e in remerged[0].extensions] == ["A.swift", "B.swift"]


class TestEntityStore:
    """Test EntityStore ingestion and queries."""

    def _store(self, sample_payload: Path, **config: Any) -> EntityStore:
        store = EntityStore(DocsConfig(project_root=Path("/work/Shapes"), **config))
        store.ingest_file(sample_payload)
        store.merge_extensions()
        return store

    def test_merge_sample(self, sample_payload: Path) -> None:
        """Every remaining top-level extension is a synthetic container."""
        store = self._store(sample_payload)

        titles = [d.title for d in store.docs]
        assert titles == ["Shape", "Circle", "Unit", "totalArea(of:)", "Radians", "Double"]

        circle = store.docs[1]
        assert [e.title for e in circle.extensions] == ["Circle"]

        double = store.docs[-1]
        assert double.synthetic
        assert double.source_file == "Shapes"
        assert [e.children[0].title for e in double.extensions] == ["squared"]

    def test_every_extension_placed_once(self, sample_payload: Path) -> None:
        """Source extensions end up attached exactly once."""
        store = self._store(sample_payload)

        attached = [ext for doc in flatten(store.docs) for ext in doc.extensions]
        assert sorted(e.title for e in attached) == ["Circle", "Double"]
        assert all(d.synthetic for d in store.extensions_index)

    def test_search_filters(self, sample_payload: Path) -> None:
        """Search combines title, kind and access filters."""
        store = self._store(sample_payload)

        assert [d.title for d in store.search(title="circ")] == ["Circle"]
        assert [d.title for d in store.search(kind=EntityKind.STRUCT)] == ["Circle"]
        assert [d.title for d in store.search(kind=OtherKind("enum element"))] == [
            "metric",
            "imperial",
        ]
        assert "cache" not in [d.title for d in store.search()]
        assert "cache" in [d.title for d in store.search(minimum_access=AccessLevel.PRIVATE)]

    def test_search_monotonic_in_access(self, sample_payload: Path) -> None:
        """Raising the threshold never adds results."""
        store = self._store(sample_payload)
        previous: set[int] | None = None
        for level in AccessLevel:
            current = {id(d) for d in store.search(minimum_access=level)}
            if previous is not None:
                assert current <= previous
            previous = current

    def test_indices(self, sample_payload: Path) -> None:
        """Per-kind indices ignore access levels."""
        store = self._store(sample_payload)

        assert [d.title for d in store.protocols_index] == ["Shape"]
        assert [d.title for d in store.structs_index] == ["Circle"]
        assert [d.title for d in store.enums_index] == ["Unit"]
        assert store.classes_index == []
        assert [d.title for d in store.global_functions_index] == ["totalArea(of:)"]
        assert [d.title for d in store.type_aliases_index] == ["Radians"]
        assert [d.title for d in store.extensions_index] == ["Double"]

    def test_top_level_index_order(self, sample_payload: Path) -> None:
        """The top-level index is grouped by kind in fixed order."""
        store = self._store(sample_payload)

        assert [d.title for d in store.top_level_index] == [
            "Circle",
            "Unit",
            "Shape",
            "Double",
            "totalArea(of:)",
            "Radians",
        ]
        assert "Radians" not in [d.title for d in store.top_level_index_min_access]

    def test_merge_flags_from_config(self, entity_factory: EntityFactory) -> None:
        """Merge switches are read from the config."""
        config = DocsConfig(
            project_title="P", merge=MergeConfig(reverse_external_order=False)
        )
        store = EntityStore(config)
        store.add(
            [
                entity_factory("String", EntityKind.EXTENSION, source_file="A.swift"),
                entity_factory("String", EntityKind.EXTENSION, source_file="B.swift"),
            ]
        )
        store.merge_extensions()

        assert [e.source_file for e in store.docs[0].extensions] == ["A.swift", "B.swift"]

    def test_add_records(self, record_factory: RecordFactory) -> None:
        """Decoded records can be added directly."""
        store = EntityStore()
        payload = json.dumps({"A.swift": [record_factory("class", "A")]})

        assert store.add_records(decode_payload(payload)) == 1
        assert store.docs[0].title == "A"

    def test_bad_payload_adds_nothing(self) -> None:
        """Undecodable payloads are logged and contribute no entities."""
        stream = StringIO()
        setup_logger(0, stream)
        store = EntityStore()

        assert store.ingest_payload("{broken") == 0
        assert store.docs == ()
        assert "Error decoding docs" in stream.getvalue()

    def test_missing_file_adds_nothing(self, tmp_path: Path) -> None:
        """A missing payload file contributes no entities."""
        store = EntityStore()

        assert store.ingest_file(tmp_path / "nope.json") == 0
        assert store.docs == ()

    def test_undecodable_bytes_add_nothing(self, tmp_path: Path) -> None:
        """A payload file that is not valid UTF-8 is logged and skipped."""
        stream = StringIO()
        setup_logger(0, stream)
        payload = tmp_path / "bad.json"
        payload.write_bytes(
            b'{"A.swift": [{"kind": "class", "name": "\xff\xfe", "accessibility": "public"}]}'
        )
        yaml_payload = tmp_path / "bad.yaml"
        yaml_payload.write_bytes(b"A.swift:\n  - kind: class\n    name: \xff\xfe\n")
        store = EntityStore()

        assert store.ingest_file(payload) == 0
        assert store.ingest_file(yaml_payload) == 0
        assert store.docs == ()
        assert "Error decoding docs from" in stream.getvalue()

    def test_unreadable_path_adds_nothing(self, tmp_path: Path) -> None:
        """A payload path that cannot be read, such as a directory, is skipped."""
        stream = StringIO()
        setup_logger(0, stream)
        directory = tmp_path / "dir.json"
        directory.mkdir()
        store = EntityStore()

        assert store.ingest_file(directory) == 0
        assert store.docs == ()
        assert "Failed to read" in stream.getvalue()

    def test_null_file_records(self, record_factory: RecordFactory) -> None:
        """A file with a null record list does not spoil the rest of the payload."""
        store = EntityStore()
        payload = json.dumps(
            {
                "A.swift": {"key.substructure": None},
                "B.swift": {"key.substructure": [record_factory("class", "B")]},
            }
        )

        assert store.ingest_payload(payload) == 1
        assert [d.title for d in store.docs] == ["B"]

    def test_clear(self, sample_payload: Path) -> None:
        """clear() empties the store."""
        store = self._store(sample_payload)
        store.clear()

        assert store.docs == ()
        assert store.search(minimum_access=AccessLevel.PRIVATE) == []
