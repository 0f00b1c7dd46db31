"""Access levels and entity kinds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

# Prefixes used by the source indexer for qualified labels
ACCESS_PREFIX = "source.lang.swift.accessibility."
KIND_PREFIX = "source.lang.swift.decl."

ENUM_CASE_LABEL = "enum case"


class AccessLevel(IntEnum):
    """Visibility of an entity, totally ordered from private to open."""

    PRIVATE = 0
    FILEPRIVATE = 1
    INTERNAL = 2
    PUBLIC = 3
    OPEN = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, label: str | None) -> AccessLevel | None:
        """Parse a bare or indexer-qualified access label.

        Supported formats:
        - "public"
        - "source.lang.swift.accessibility.public"

        Returns None for missing or unknown labels.
        """
        if not label:
            return None
        value = label.strip().lower()
        if value.startswith(ACCESS_PREFIX):
            value = value[len(ACCESS_PREFIX) :]
        try:
            return cls[value.upper()]
        except KeyError:
            return None


class EntityKind(Enum):
    """Closed set of documentable declaration kinds."""

    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    PROTOCOL = "protocol"
    EXTENSION = "extension"
    GLOBAL_FUNCTION = "global func"
    TYPE_ALIAS = "typealias"


@dataclass(frozen=True)
class OtherKind:
    """Kind that falls outside the closed set (methods, properties, enum cases...)."""

    label: str


Kind = EntityKind | OtherKind

# Order used for the top-level index
TOP_LEVEL_KINDS: tuple[EntityKind, ...] = (
    EntityKind.CLASS,
    EntityKind.STRUCT,
    EntityKind.ENUM,
    EntityKind.PROTOCOL,
    EntityKind.EXTENSION,
    EntityKind.GLOBAL_FUNCTION,
    EntityKind.TYPE_ALIAS,
)

# Kinds an extension can be folded into
EXTENDABLE_KINDS = frozenset(
    {EntityKind.CLASS, EntityKind.STRUCT, EntityKind.ENUM, EntityKind.PROTOCOL}
)

_KIND_ALIASES: dict[str, Kind] = {
    "class": EntityKind.CLASS,
    "struct": EntityKind.STRUCT,
    "enum": EntityKind.ENUM,
    "protocol": EntityKind.PROTOCOL,
    "extension": EntityKind.EXTENSION,
    "extension.class": EntityKind.EXTENSION,
    "extension.struct": EntityKind.EXTENSION,
    "extension.enum": EntityKind.EXTENSION,
    "extension.protocol": EntityKind.EXTENSION,
    "global func": EntityKind.GLOBAL_FUNCTION,
    "globalfunction": EntityKind.GLOBAL_FUNCTION,
    "globalfunc": EntityKind.GLOBAL_FUNCTION,
    "function.free": EntityKind.GLOBAL_FUNCTION,
    "typealias": EntityKind.TYPE_ALIAS,
    "type alias": EntityKind.TYPE_ALIAS,
    "enumcase": OtherKind(ENUM_CASE_LABEL),
    "enum case": OtherKind(ENUM_CASE_LABEL),
    "enumelement": OtherKind("enum element"),
    "var.instance": OtherKind("instance var"),
    "var.static": OtherKind("static var"),
    "var.class": OtherKind("class var"),
    "var.global": OtherKind("global var"),
    "var.local": OtherKind("local var"),
    "function.method.instance": OtherKind("instance method"),
    "function.method.static": OtherKind("static method"),
    "function.method.class": OtherKind("class method"),
    "function.constructor": OtherKind("initializer"),
    "function.destructor": OtherKind("deinitializer"),
    "function.subscript": OtherKind("subscript"),
    "function.operator": OtherKind("operator"),
    "associatedtype": OtherKind("associated type"),
}

_DOCSET_TYPES: dict[EntityKind, str] = {
    EntityKind.CLASS: "Class",
    EntityKind.STRUCT: "Struct",
    EntityKind.ENUM: "Enum",
    EntityKind.PROTOCOL: "Protocol",
    EntityKind.EXTENSION: "Extension",
    EntityKind.GLOBAL_FUNCTION: "Function",
    EntityKind.TYPE_ALIAS: "Type",
}


def parse_kind(label: str) -> Kind:
    """Parse a dynamic kind label into the closed kind set.

    Accepts bare labels ("class", "enum case") as well as indexer-qualified
    labels ("source.lang.swift.decl.function.free"). Unrecognised labels
    become an OtherKind carrying a readable version of the label.
    """
    value = label.strip()
    lowered = value.lower()
    if lowered.startswith(KIND_PREFIX):
        lowered = lowered[len(KIND_PREFIX) :]
        value = lowered.replace(".", " ")
    return _KIND_ALIASES.get(lowered, OtherKind(value))


def kind_label(kind: Kind) -> str:
    """Display label for a kind."""
    if isinstance(kind, OtherKind):
        return kind.label
    return kind.value


def docset_type(kind: Kind) -> str:
    """Type label used by the external lookup index."""
    if isinstance(kind, OtherKind):
        return kind.label.title()
    return _DOCSET_TYPES[kind]
