"""
Per-run resolution context.

Every cache the resolution engine mutates lives on a ResolutionContext, so
two runs in one process (e.g. two schema versions) never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable

from ...utils import unversioned_url
from ..config import GenSubset, ResolverConfig, TargetStyles
from ..schema_ast.nodes import SchemaGraph, SchemaNode
from .ir_nodes import EnumerationRecord, ResolvedName, ResolvedNode, TypeIdentity
from .tables import (
    BASE_SUBSET_COMPLEX_TYPES,
    BASE_SUBSET_RESOURCES,
    BASE_SUBSET_VALUE_SETS,
    CONFORMANCE_SUBSET_COMPLEX_TYPES,
    CONFORMANCE_SUBSET_RESOURCES,
    CONFORMANCE_SUBSET_VALUE_SETS,
    ENUM_NAME_OVERRIDES,
    EXPLICIT_SHARED_VALUE_SETS,
    VALUE_SET_EXCLUSIONS,
    LookupTable,
    url_rule,
)

# Scope holding every globally shared enumeration name
SHARED_ENUM_SCOPE = "<shared enumerations>"


@dataclass
class NameScope:
    """The names already issued within one naming scope."""

    name: str
    issued: set[str] = field(default_factory=set)

    # Caller key -> name issued for it
    by_key: dict[Hashable, ResolvedName] = field(default_factory=dict)

    def __contains__(self, value: str) -> bool:
        return value in self.issued

    def __len__(self) -> int:
        return len(self.issued)


class ResolutionContext:
    """All mutable state of one resolution run."""

    def __init__(self, graph: SchemaGraph, config: ResolverConfig):
        self.graph = graph
        self.config = config
        self.styles: TargetStyles = config.styles()
        self.version = graph.version

        # Exception tables, with the configured additions applied
        self.value_set_exclusions = VALUE_SET_EXCLUSIONS.extended(
            [url_rule(url, True, "configured exclusion") for url in config.value_set_exclusions]
        )
        self.enum_name_overrides = LookupTable(
            ENUM_NAME_OVERRIDES.name,
            [url_rule(url, name, "configured name") for url, name in config.enum_name_overrides.items()]
            + ENUM_NAME_OVERRIDES.rules,
        )
        self.explicit_shared_value_sets = {
            url for version, url in EXPLICIT_SHARED_VALUE_SETS if version == self.version
        } | {unversioned_url(url) for url in config.explicit_shared_value_sets}

        # Naming scopes, keyed by scope name
        self.scopes: dict[str, NameScope] = {}

        # Canonical name -> identity of a top-level type
        self.identities: dict[str, TypeIdentity] = {}

        # Canonical names whose identity is being built (base chain cycle detection)
        self.in_progress: set[str] = set()

        # Nested group path -> identity, and qualified name -> path
        self.nested_identities: dict[str, TypeIdentity] = {}
        self.qualified_names: dict[str, str] = {}

        # Unversioned value set URL -> root types with a required binding to it
        self.binding_owners: dict[str, list[str]] = {}

        # Unversioned value set URL -> enumeration, in creation order
        self.enumerations: dict[str, EnumerationRecord] = {}

        # Canonical name -> resolved node, in resolution order
        self.resolved_nodes: dict[str, ResolvedNode] = {}

    def scope(self, name: str) -> NameScope:
        """Get or create the naming scope with the given name."""
        if name not in self.scopes:
            self.scopes[name] = NameScope(name)
        return self.scopes[name]

    # ------------------------------------------------------------------
    # Generation subsets
    # ------------------------------------------------------------------

    def in_subset(self, node: SchemaNode) -> bool:
        """Whether a top-level node is generated by the configured subset."""
        subset = self.config.subset
        if subset == GenSubset.ALL:
            return True

        in_base = self.graph.is_primitive(node.name) or node.name in BASE_SUBSET_COMPLEX_TYPES | BASE_SUBSET_RESOURCES
        in_conformance = node.name in CONFORMANCE_SUBSET_COMPLEX_TYPES | CONFORMANCE_SUBSET_RESOURCES

        if subset == GenSubset.BASE:
            return in_base
        if subset == GenSubset.CONFORMANCE:
            return in_conformance and not in_base
        return not in_base and not in_conformance

    def owns_value_set(self, url: str) -> bool:
        """Whether a shared enumeration is generated by the configured subset."""
        subset = self.config.subset
        url = unversioned_url(url)
        if subset == GenSubset.ALL:
            return True
        if subset == GenSubset.BASE:
            return url in BASE_SUBSET_VALUE_SETS
        if subset == GenSubset.CONFORMANCE:
            return url in CONFORMANCE_SUBSET_VALUE_SETS
        return url not in BASE_SUBSET_VALUE_SETS and url not in CONFORMANCE_SUBSET_VALUE_SETS

    def is_emitted(self, node: SchemaNode) -> bool:
        """Whether a top-level node is resolved and emitted in this run."""
        return node.name not in self.config.ignore_types and self.in_subset(node)
