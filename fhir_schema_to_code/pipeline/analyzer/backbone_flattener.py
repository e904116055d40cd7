"""
Backbone flattener.

Promotes anonymous nested element groups ("backbone" elements) to named
types. The name of a group is derived from its field name, prefixed by the
short names of the nested groups above it and qualified by the owning
top-level type:

    Patient.contact                  -> Patient.ContactComponent
    Claim.item.detail                -> Claim.ItemDetailComponent
    Claim.item.detail.subDetail      -> Claim.ItemDetailSubDetailComponent
"""

from __future__ import annotations

import logging
from typing import Callable

from ...utils import parent_path, strip_choice_marker, to_pascal_case
from ..errors import AmbiguousNameError, UnresolvedReferenceError
from ..schema_ast.nodes import NodeKind, SchemaNode
from .context import ResolutionContext
from .ir_nodes import ResolvedName, TypeIdentity
from .name_resolver import NameResolver
from .tables import BACKBONE_CAPITALIZATION_REPAIRS, EXPLICIT_NAME_REPAIRS

logger = logging.getLogger(__name__)


class BackboneFlattener:
    """Synthesizes stable names for nested element groups."""

    def __init__(
        self,
        context: ResolutionContext,
        names: NameResolver,
        base_resolver: Callable[[SchemaNode], TypeIdentity | None],
    ):
        """
        Initialize the flattener.

        Args:
            context: The per-run context
            names: Name resolver used for reserved word escaping
            base_resolver: Returns the effective base identity of a node
        """
        self.context = context
        self.names = names
        self.base_resolver = base_resolver

    def flatten(self, nested: SchemaNode, owning_path: str, owner: TypeIdentity) -> TypeIdentity:
        """
        Get the identity of a nested group, synthesizing its name on first use.

        Args:
            nested: The nested group
            owning_path: Path of the element that holds the group
            owner: Identity of the top-level type the group belongs to

        Returns:
            The memoized identity of the group

        Raises:
            AmbiguousNameError: If another group already has the same qualified name
        """
        if nested.path in self.context.nested_identities:
            return self.context.nested_identities[nested.path]

        short_name = self._short_name(nested, owner)
        identity = TypeIdentity(
            canonical_name=nested.path,
            resolved_name=ResolvedName(short_name),
            kind=NodeKind.BACKBONE,
            owner=owner,
            path=nested.path,
        )

        qualified = identity.qualified_name
        existing = self.context.qualified_names.get(qualified)
        if existing is not None and existing != nested.path:
            raise AmbiguousNameError(
                f"Nested groups {existing} and {nested.path} both flatten to {qualified}",
                entity=nested.path,
                scope=owner.canonical_name,
            )

        self.context.qualified_names[qualified] = nested.path
        self.context.nested_identities[nested.path] = identity
        identity.base = self.base_resolver(nested)

        logger.debug("Flattened %s (held by %s) -> %s", nested.path, owning_path, qualified)
        return identity

    def flatten_all(self, node: SchemaNode, owner: TypeIdentity) -> list[TypeIdentity]:
        """Flatten every nested group of a top-level node, depth-first."""
        return [self.flatten(nested, nested.path, owner) for nested in node.iter_nested()]

    def _short_name(self, nested: SchemaNode, owner: TypeIdentity) -> str:
        """Short (unqualified) name of a nested group, including the suffix."""
        suffix = self.context.config.component_suffix

        if nested.explicit_name:
            name = EXPLICIT_NAME_REPAIRS.lookup(nested.explicit_name, nested.explicit_name)
        else:
            repair = BACKBONE_CAPITALIZATION_REPAIRS.lookup(nested.path)
            if repair is not None:
                name = repair(nested.path[len(nested.root_name) :])
            else:
                name = self._parent_prefix(nested, owner) + to_pascal_case(strip_choice_marker(nested.name))

        if not name.endswith(suffix):
            name += suffix
        return self.names.escape(name, self.context.styles.type_style)

    def _parent_prefix(self, nested: SchemaNode, owner: TypeIdentity) -> str:
        """Short name of the enclosing nested group, without its suffix."""
        enclosing_path = parent_path(nested.path)
        if "." not in enclosing_path:
            return ""

        enclosing = self.context.graph.find_nested(enclosing_path)
        if enclosing is None:
            raise UnresolvedReferenceError("Enclosing group not found", entity=nested.path, scope=owner.canonical_name)

        prefix = self.flatten(enclosing, enclosing.path, owner).resolved_name.value
        suffix = self.context.config.component_suffix
        if suffix and prefix.endswith(suffix):
            prefix = prefix[: -len(suffix)]
        return prefix
