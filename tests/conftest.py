"""Pytest configuration and fixtures for docforest tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from docforest import context
from docforest.access import AccessLevel, EntityKind, Kind
from docforest.logger import reset_logger
from docforest.models import DocEntity

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"
SAMPLE_PAYLOAD = EXAMPLES_DIR / "sample_docs.json"


def make_entity(  # noqa: PLR0913 - mirrors DocEntity fields
    title: str,
    kind: Kind = EntityKind.CLASS,
    access: AccessLevel = AccessLevel.PUBLIC,
    children: tuple[DocEntity, ...] = (),
    *,
    comment: str | None = None,
    source_file: str = "Sources/File.swift",
    attributes: frozenset[str] = frozenset(),
    doc_declaration: str | None = None,
    parsed_declaration: str | None = None,
) -> DocEntity:
    """Build a DocEntity with sensible defaults."""
    return DocEntity(
        title=title,
        access=access,
        comment=comment,
        source_file=source_file,
        kind=kind,
        children=children,
        attributes=attributes,
        doc_declaration=doc_declaration,
        parsed_declaration=parsed_declaration,
    )


def record(
    kind: str, name: str | None = None, access: str | None = "public", **extra: Any
) -> dict[str, Any]:
    """Build a raw entity record using bare keys."""
    data: dict[str, Any] = {"kind": kind}
    if name is not None:
        data["name"] = name
    if access is not None:
        data["accessibility"] = access
    data.update(extra)
    return data


@pytest.fixture
def entity_factory() -> Callable[..., DocEntity]:
    """Factory for DocEntity objects."""
    return make_entity


@pytest.fixture
def record_factory() -> Callable[..., dict[str, Any]]:
    """Factory for raw entity records."""
    return record


@pytest.fixture
def sample_payload() -> Path:
    """Path to the example indexer payload."""
    return SAMPLE_PAYLOAD


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Reset the logger and global context around every test."""
    yield
    reset_logger()
    context.reset_context()
