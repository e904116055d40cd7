"""
Schema graph node definitions.

These nodes represent one version of the FHIR data model as handed over by
the ingestion step: primitive types, complex types, resources, and the value
sets their coded elements bind to. No naming or type resolution has happened
yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...utils import parent_path, unversioned_url


class NodeKind(str, Enum):
    """Kind of schema node."""

    PRIMITIVE = "primitive"
    COMPLEX_TYPE = "complex-type"
    RESOURCE = "resource"
    BACKBONE = "backbone"  # Anonymous nested element group


class BindingStrength(str, Enum):
    """Strength of a code binding."""

    REQUIRED = "required"
    EXTENSIBLE = "extensible"
    PREFERRED = "preferred"
    EXAMPLE = "example"


# FHIR release sequence, oldest first
FHIR_VERSIONS = ["R2", "R3", "R4", "R4B", "R5"]


def version_index(version: str) -> int:
    """Position of a release in the FHIR sequence (unknown releases sort last)."""
    if version in FHIR_VERSIONS:
        return FHIR_VERSIONS.index(version)
    return len(FHIR_VERSIONS)


@dataclass
class ElementTypeOption:
    """One candidate type for an element."""

    type_name: str = ""

    # Allowed target profiles (for Reference, canonical, ...)
    target_profiles: list[str] = field(default_factory=list)


@dataclass
class CodeBinding:
    """A binding of a coded element to a value set."""

    strength: BindingStrength = BindingStrength.EXAMPLE
    value_set: str = ""  # Canonical URL, possibly with a |version suffix


@dataclass
class ElementDefinition:
    """One field of a schema node."""

    path: str = ""
    min_cardinality: int = 0
    max_cardinality: int | None = 1  # None means unbounded ("*")

    type_options: list[ElementTypeOption] = field(default_factory=list)
    binding: CodeBinding | None = None

    # Declared by a base type rather than by the owner itself
    is_inherited: bool = False

    # Declaration order within the owner
    field_order: int = 0

    # "#Questionnaire.item" style pointer to another nested group
    content_reference: str | None = None

    # Explicit name for the nested group rooted at this element
    explicit_type_name: str | None = None

    @property
    def name(self) -> str:
        """Element name without its path prefix."""
        return self.path.rsplit(".", 1)[-1]

    @property
    def is_choice(self) -> bool:
        return len(self.type_options) > 1

    @property
    def is_repeated(self) -> bool:
        return self.max_cardinality is None or self.max_cardinality > 1

    @property
    def is_binding_eligible(self) -> bool:
        """Exactly one type option and it is the coded primitive."""
        return len(self.type_options) == 1 and self.type_options[0].type_name == "code"


@dataclass
class SchemaNode:
    """A named complex type or resource, or an anonymous nested group."""

    name: str = ""
    url: str = ""
    kind: NodeKind = NodeKind.COMPLEX_TYPE
    base_type: str | None = None
    is_abstract: bool = False

    # Dotted path of this node ("Patient" or "Patient.contact")
    path: str = ""

    # Ordered elements declared directly under this node, keyed by path
    elements: dict[str, ElementDefinition] = field(default_factory=dict)

    # Nested anonymous groups directly under this node, keyed by path
    nested: dict[str, SchemaNode] = field(default_factory=dict)

    # Explicit name supplied by the schema (nested groups only)
    explicit_name: str | None = None

    description: str = ""

    @property
    def root_name(self) -> str:
        """Name of the top-level type this node belongs to."""
        return self.path.split(".", 1)[0]

    def iter_nested(self):
        """Yield all nested groups depth-first, in declaration order."""
        for nested in self.nested.values():
            yield nested
            yield from nested.iter_nested()

    def iter_elements(self):
        """Yield all elements of this node and its nested groups."""
        yield from self.elements.values()
        for nested in self.nested.values():
            yield from nested.iter_elements()


@dataclass
class ConceptDef:
    """One code of an expanded value set."""

    system: str = ""
    code: str = ""
    display: str = ""


@dataclass
class ValueSetDef:
    """An (expanded) value set."""

    url: str = ""
    name: str = ""
    version: str = ""
    concepts: list[ConceptDef] = field(default_factory=list)

    @property
    def systems(self) -> list[str]:
        """Distinct code systems in concept order."""
        seen: dict[str, None] = {}
        for concept in self.concepts:
            seen.setdefault(concept.system, None)
        return list(seen)


@dataclass
class SchemaGraph:
    """One version of the schema, ready for resolution."""

    version: str = "R4"

    # Declaration-ordered maps, keyed by canonical name
    primitives: dict[str, SchemaNode] = field(default_factory=dict)
    complex_types: dict[str, SchemaNode] = field(default_factory=dict)
    resources: dict[str, SchemaNode] = field(default_factory=dict)

    # Keyed by unversioned canonical URL
    value_sets: dict[str, ValueSetDef] = field(default_factory=dict)

    def top_level_nodes(self) -> list[SchemaNode]:
        """Primitives, then complex types, then resources, in declaration order."""
        return [*self.primitives.values(), *self.complex_types.values(), *self.resources.values()]

    def find_node(self, name: str) -> SchemaNode | None:
        """Find a top-level node by canonical name."""
        for collection in (self.primitives, self.complex_types, self.resources):
            if name in collection:
                return collection[name]
        return None

    def is_primitive(self, name: str) -> bool:
        return name in self.primitives

    def find_nested(self, path: str) -> SchemaNode | None:
        """Find a nested group by its dotted path."""
        root = self.find_node(path.split(".", 1)[0])
        if root is None or "." not in path:
            return None
        node = root
        prefix = root.path
        for segment in path[len(prefix) + 1 :].split("."):
            prefix = f"{prefix}.{segment}"
            node = node.nested.get(prefix)
            if node is None:
                return None
        return node

    def find_element(self, path: str) -> ElementDefinition | None:
        """Find an element by its dotted path."""
        owner_path = parent_path(path)
        if not owner_path:
            return None
        owner = self.find_node(owner_path) if "." not in owner_path else self.find_nested(owner_path)
        if owner is None:
            return None
        return owner.elements.get(path)

    def find_value_set(self, url: str) -> ValueSetDef | None:
        """Find a value set by canonical URL (a |version suffix is ignored)."""
        return self.value_sets.get(unversioned_url(url))
