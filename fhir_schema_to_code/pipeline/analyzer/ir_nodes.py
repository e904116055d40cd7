"""
IR (Intermediate Representation) node definitions.

These nodes represent the resolved schema, ready for rendering. Every name
is final and every element has exactly one resolved shape. Renderers must
treat all of them as read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from ..schema_ast.nodes import NodeKind


class TypeKind(Enum):
    """Kind of resolved element type."""

    SCALAR = "scalar"  # Primitive, possibly with a coded enumeration
    NAMED_REFERENCE = "named_reference"  # A named complex type or resource
    CHOICE = "choice"  # One of several typed slots
    NESTED_RECORD = "nested_record"  # A flattened backbone group
    GENERIC_CONTAINER = "generic_container"  # A type parameter with a default


@dataclass(frozen=True)
class ResolvedName:
    """A convention-cased identifier plus its disambiguation suffix index."""

    value: str = ""
    suffix_index: int = 0  # 0 = unsuffixed, otherwise 2, 3, ...

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class TypeIdentity:
    """The identity of a resolved type.

    One instance exists per canonical name (or nested path) per run, so
    identities can be compared with ``is``.
    """

    canonical_name: str = ""  # "Patient", or the path for nested records
    resolved_name: ResolvedName = field(default_factory=ResolvedName)
    kind: NodeKind = NodeKind.COMPLEX_TYPE
    url: str = ""
    is_abstract: bool = False

    # Effective base type after version remapping
    base: TypeIdentity | None = None

    # Nested records only
    owner: TypeIdentity | None = None
    path: str = ""

    @property
    def qualified_name(self) -> str:
        """Owner-qualified name ("Patient.ContactComponent") for nested records."""
        if self.owner is not None:
            return f"{self.owner.resolved_name}.{self.resolved_name}"
        return self.resolved_name.value

    def __repr__(self) -> str:
        return f"TypeIdentity({self.canonical_name!r} -> {self.qualified_name!r})"


@dataclass(frozen=True)
class EnumMember:
    """One member of an enumeration."""

    code: str = ""
    system: str = ""
    display: str = ""
    name: ResolvedName = field(default_factory=ResolvedName)


@dataclass(eq=False)
class EnumerationRecord:
    """A deduplicated enumeration, keyed by value set canonical URL."""

    url: str = ""
    name: ResolvedName = field(default_factory=ResolvedName)

    # Resolved name of the declaring type, empty when globally shared
    declaring_scope: str = ""

    members: tuple[EnumMember, ...] = ()

    # Shared enumeration generated by another subset
    is_deferred: bool = False

    # Canonical names of the types binding to this value set
    referenced_by: tuple[str, ...] = ()

    @property
    def is_shared(self) -> bool:
        return self.declaring_scope == ""


@dataclass(frozen=True)
class ChoiceAlternative:
    """One typed slot of a choice element."""

    type_name: str = ""  # Schema type name ("Quantity")
    slot_name: ResolvedName = field(default_factory=ResolvedName)  # "valueQuantity"
    type_ref: ResolvedType | None = None


@dataclass
class ResolvedType:
    """The resolved shape of an element. Exactly one kind is active."""

    kind: TypeKind = TypeKind.SCALAR

    # SCALAR: primitive kind ("string", "code", ...)
    primitive: str = ""
    enumeration: EnumerationRecord | None = None

    # NAMED_REFERENCE / NESTED_RECORD: target identity
    identity: TypeIdentity | None = None
    target_profiles: list[str] = field(default_factory=list)

    # NESTED_RECORD: path of the owning element
    owning_path: str = ""

    # CHOICE
    alternatives: list[ChoiceAlternative] = field(default_factory=list)
    discriminator_pattern: str = ""
    is_safe_subset: bool = False

    # GENERIC_CONTAINER
    generic_alias: str = ""
    generic_default: str = ""

    # Orthogonal to kind
    is_repeated: bool = False

    @property
    def name(self) -> str:
        """Short display name of the resolved type."""
        if self.kind == TypeKind.SCALAR:
            return self.enumeration.name.value if self.enumeration else self.primitive
        if self.kind in (TypeKind.NAMED_REFERENCE, TypeKind.NESTED_RECORD) and self.identity:
            return self.identity.qualified_name
        if self.kind == TypeKind.GENERIC_CONTAINER:
            return self.generic_alias
        return "|".join(alt.type_name for alt in self.alternatives)


@dataclass
class ResolvedElement:
    """An element definition paired with its resolved field name and type."""

    path: str = ""
    field_name: ResolvedName = field(default_factory=ResolvedName)
    type_ref: ResolvedType = field(default_factory=ResolvedType)
    min_cardinality: int = 0
    max_cardinality: int | None = 1


@dataclass
class ResolvedNode:
    """A resolved schema node: its identity and its own (non-inherited) fields."""

    identity: TypeIdentity
    elements: list[ResolvedElement] = field(default_factory=list)
    nested: list[ResolvedNode] = field(default_factory=list)

    # Generic type parameter declared by this node: (alias, default)
    type_parameter: tuple[str, str] | None = None


@dataclass(frozen=True)
class ManifestEntry:
    """One top-level type in the export manifest."""

    canonical_name: str
    resolved_name: ResolvedName
    identity: TypeIdentity
    kind: NodeKind
    is_abstract: bool = False


@dataclass(frozen=True)
class ExportManifest:
    """The immutable index of every resolved top-level type."""

    entries: Mapping[str, ManifestEntry] = field(default_factory=lambda: MappingProxyType({}))
    supported_resources: tuple[str, ...] = ()

    def __getitem__(self, canonical_name: str) -> ManifestEntry:
        return self.entries[canonical_name]

    def __contains__(self, canonical_name: str) -> bool:
        return canonical_name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def of_kind(self, kind: NodeKind) -> list[ManifestEntry]:
        """Entries of one kind in canonical-name order."""
        return [entry for entry in self.entries.values() if entry.kind == kind]


@dataclass
class ResolutionResult:
    """The complete output of one run, consumed by renderers."""

    version: str = ""
    manifest: ExportManifest = field(default_factory=ExportManifest)

    # Canonical name -> resolved node, in resolution order
    nodes: dict[str, ResolvedNode] = field(default_factory=dict)

    # All enumerations, in creation order
    enumerations: list[EnumerationRecord] = field(default_factory=list)

    @property
    def shared_enumerations(self) -> list[EnumerationRecord]:
        return [record for record in self.enumerations if record.is_shared]

    def enumerations_by_scope(self) -> dict[str, list[EnumerationRecord]]:
        """Enumerations partitioned by declaring scope ("" = global)."""
        partitions: dict[str, list[EnumerationRecord]] = {}
        for record in self.enumerations:
            partitions.setdefault(record.declaring_scope, []).append(record)
        return partitions

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view of the result."""
        return {
            "version": self.version,
            "manifest": {
                name: {
                    "name": entry.resolved_name.value,
                    "kind": entry.kind.value,
                    "abstract": entry.is_abstract,
                    "base": entry.identity.base.canonical_name if entry.identity.base else None,
                }
                for name, entry in self.manifest.entries.items()
            },
            "supportedResources": list(self.manifest.supported_resources),
            "types": {name: _node_to_dict(node) for name, node in self.nodes.items()},
            "enumerations": [
                {
                    "url": record.url,
                    "name": record.name.value,
                    "scope": record.declaring_scope,
                    "deferred": record.is_deferred,
                    "members": [
                        {"system": member.system, "code": member.code, "name": member.name.value}
                        for member in record.members
                    ],
                }
                for record in self.enumerations
            ],
        }


def _node_to_dict(node: ResolvedNode) -> dict[str, Any]:
    return {
        "name": node.identity.qualified_name,
        "typeParameter": list(node.type_parameter) if node.type_parameter else None,
        "elements": [
            {
                "path": element.path,
                "name": element.field_name.value,
                "kind": element.type_ref.kind.value,
                "type": element.type_ref.name,
                "repeated": element.type_ref.is_repeated,
                "choices": [alt.slot_name.value for alt in element.type_ref.alternatives],
            }
            for element in node.elements
        ],
        "nested": [_node_to_dict(nested) for nested in node.nested],
    }
