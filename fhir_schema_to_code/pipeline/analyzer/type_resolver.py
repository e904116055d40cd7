"""
Type resolver.

Decides what every element becomes in the output type system: a scalar,
a reference to a named type, a choice of typed slots, a nested record or a
generic container. Top-level identities are memoized by canonical name, so
two owners referencing the same type get the same identity object.
"""

from __future__ import annotations

import logging

from ...utils import strip_choice_marker, to_pascal_case
from ..errors import CyclicRecursionError, UnresolvedReferenceError
from ..schema_ast.nodes import ElementDefinition, ElementTypeOption, SchemaNode
from .backbone_flattener import BackboneFlattener
from .context import ResolutionContext
from .enum_deduplicator import EnumDeduplicator
from .ir_nodes import (
    ChoiceAlternative,
    ResolvedElement,
    ResolvedName,
    ResolvedNode,
    ResolvedType,
    TypeIdentity,
    TypeKind,
)
from .name_resolver import NameResolver
from .tables import (
    BASE_TYPE_REMAPS,
    ELEMENT_TYPE_OVERRIDES,
    GENERIC_INJECTION_POINTS,
    GENERIC_OWNERS,
    PLACEHOLDER_TYPES,
    SAFE_COMMON_SUBSET,
    SYSTEM_TYPE_PREFIX,
)

logger = logging.getLogger(__name__)


class TypeResolver:
    """Resolves element types and top-level type identities."""

    def __init__(self, context: ResolutionContext, names: NameResolver):
        """
        Initialize the resolver.

        Args:
            context: The per-run context
            names: Name resolver shared by every component of the run
        """
        self.context = context
        self.graph = context.graph
        self.names = names
        self.flattener = BackboneFlattener(context, names, self.resolve_base)
        self.enums = EnumDeduplicator(context, names)
        self._type_name_mappings = dict(context.styles.type_name_mappings)

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def identity_for(self, name: str) -> TypeIdentity:
        """
        Get the identity of a top-level type, resolving it on first use.

        Raises:
            UnresolvedReferenceError: If no type has this canonical name
            CyclicRecursionError: If the base type chain loops back to the type
        """
        identity = self.context.identities.get(name)
        if identity is not None:
            return identity

        node = self.graph.find_node(name)
        if node is None:
            raise UnresolvedReferenceError("Unknown type", entity=name)

        if name in self.context.in_progress:
            raise CyclicRecursionError("Base type chain loops back to the type", entity=name)

        self.context.in_progress.add(name)
        try:
            mapped = self._type_name_mappings.get(name, name)
            identity = TypeIdentity(
                canonical_name=name,
                resolved_name=ResolvedName(self.names.convert(mapped, self.context.styles.type_style)),
                kind=node.kind,
                url=node.url,
                is_abstract=node.is_abstract,
                base=self.resolve_base(node),
            )
        finally:
            self.context.in_progress.discard(name)

        self.context.identities[name] = identity
        return identity

    def resolve_base(self, node: SchemaNode) -> TypeIdentity | None:
        """Identity of the effective base type of a node, after version remapping."""
        if not node.base_type:
            return None

        base_name = BASE_TYPE_REMAPS.lookup((node.base_type, self.context.version), node.base_type)
        if base_name != node.base_type:
            logger.debug("Base of %s remapped: %s -> %s", node.path, node.base_type, base_name)

        if self.graph.find_node(base_name) is None:
            raise UnresolvedReferenceError("Unknown base type", entity=base_name, scope=node.path)
        return self.identity_for(base_name)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def resolve_node(self, node: SchemaNode) -> ResolvedNode:
        """Resolve a top-level type, its own elements and all its nested groups."""
        identity = self.identity_for(node.name)
        return self._resolve_group(node, identity, identity)

    def _resolve_group(self, node: SchemaNode, identity: TypeIdentity, root: TypeIdentity) -> ResolvedNode:
        resolved = ResolvedNode(identity=identity)

        hint = GENERIC_OWNERS.lookup(node.path)
        if hint is not None:
            resolved.type_parameter = (hint.alias, self.identity_for(hint.default).resolved_name.value)

        for element in sorted(node.elements.values(), key=lambda e: e.field_order):
            resolved_element = self.resolve_element(element, node, root)
            if resolved_element is not None:
                resolved.elements.append(resolved_element)

        for nested in node.nested.values():
            nested_identity = self.flattener.flatten(nested, nested.path, root)
            resolved.nested.append(self._resolve_group(nested, nested_identity, root))

        return resolved

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def resolve_element(
        self,
        element: ElementDefinition,
        owner: SchemaNode,
        root: TypeIdentity | None = None,
    ) -> ResolvedElement | None:
        """
        Resolve one element of a node.

        Args:
            element: The element to resolve
            owner: The node (top-level or nested) declaring the element
            root: Identity of the top-level type; looked up when omitted

        Returns:
            The resolved element, or None for inherited elements
        """
        if element.is_inherited:
            return None

        if root is None:
            root = self.identity_for(owner.root_name)

        field_scope = self.context.scope(f"{owner.path}#fields")
        base_name = strip_choice_marker(element.name)
        field_name = self.names.resolve(base_name, field_scope, self.context.styles.field_style, key=element.path)

        type_ref = self._resolve_type(element, owner, root)
        type_ref.is_repeated = element.is_repeated

        return ResolvedElement(
            path=element.path,
            field_name=field_name,
            type_ref=type_ref,
            min_cardinality=element.min_cardinality,
            max_cardinality=element.max_cardinality,
        )

    def _resolve_type(self, element: ElementDefinition, owner: SchemaNode, root: TypeIdentity) -> ResolvedType:
        override = ELEMENT_TYPE_OVERRIDES.lookup(element.path)
        if override is not None:
            return ResolvedType(kind=TypeKind.SCALAR, primitive=override)

        if element.content_reference:
            target = self.graph.find_nested(element.content_reference)
            if target is None:
                raise UnresolvedReferenceError(
                    "Content reference does not point to a nested group",
                    entity=element.content_reference,
                    scope=element.path,
                )
            return self._nested_record(target, element, self.identity_for(target.root_name))

        nested = owner.nested.get(element.path)
        if nested is not None:
            return self._nested_record(nested, element, root)

        options = element.type_options
        if not options:
            raise UnresolvedReferenceError("Element has no type", entity=element.path, scope=owner.path)

        if len(options) > 1:
            return self._resolve_choice(element, owner)

        option = options[0]
        hint = GENERIC_INJECTION_POINTS.lookup(element.path)
        if hint is not None and option.type_name in PLACEHOLDER_TYPES:
            return ResolvedType(
                kind=TypeKind.GENERIC_CONTAINER,
                generic_alias=hint.alias,
                generic_default=self.identity_for(hint.default).resolved_name.value,
            )

        if option.type_name == "code":
            return ResolvedType(
                kind=TypeKind.SCALAR,
                primitive="code",
                enumeration=self.enums.bind_code(element, root),
            )

        return self._resolve_option(option, element.path)

    def _nested_record(self, nested: SchemaNode, element: ElementDefinition, root: TypeIdentity) -> ResolvedType:
        return ResolvedType(
            kind=TypeKind.NESTED_RECORD,
            identity=self.flattener.flatten(nested, element.path, root),
            owning_path=element.path,
        )

    def _resolve_option(self, option: ElementTypeOption, path: str) -> ResolvedType:
        """Resolve a single type option to a scalar or a named reference."""
        type_name = option.type_name

        if type_name.startswith(SYSTEM_TYPE_PREFIX):
            return ResolvedType(kind=TypeKind.SCALAR, primitive=type_name[len(SYSTEM_TYPE_PREFIX) :].lower())

        if self.graph.is_primitive(type_name):
            return ResolvedType(kind=TypeKind.SCALAR, primitive=type_name)

        if self.graph.find_node(type_name) is None:
            raise UnresolvedReferenceError("Unknown element type", entity=type_name, scope=path)

        return ResolvedType(
            kind=TypeKind.NAMED_REFERENCE,
            identity=self.identity_for(type_name),
            target_profiles=list(option.target_profiles),
        )

    def _resolve_choice(self, element: ElementDefinition, owner: SchemaNode) -> ResolvedType:
        """Resolve a choice element: one uniquely named slot per alternative."""
        base_name = strip_choice_marker(element.name)
        field_scope = self.context.scope(f"{owner.path}#fields")
        style = self.context.styles.field_style

        alternatives = []
        for option in element.type_options:
            slot_name = self.names.resolve(
                base_name + to_pascal_case(option.type_name),
                field_scope,
                style,
                key=(element.path, option.type_name),
            )
            alternatives.append(
                ChoiceAlternative(
                    type_name=option.type_name,
                    slot_name=slot_name,
                    type_ref=self._resolve_option(option, element.path),
                )
            )

        return ResolvedType(
            kind=TypeKind.CHOICE,
            alternatives=alternatives,
            discriminator_pattern=f"{base_name}[Type]",
            is_safe_subset=all(self._is_safe(option.type_name) for option in element.type_options),
        )

    def _is_safe(self, type_name: str) -> bool:
        return (
            type_name.startswith(SYSTEM_TYPE_PREFIX)
            or self.graph.is_primitive(type_name)
            or type_name in SAFE_COMMON_SUBSET
        )
