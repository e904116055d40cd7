"""
Value set / enumeration deduplicator.

Decides whether a required code binding becomes an enumeration, and where
that enumeration is declared. A value set bound by two or more top-level
types is shared (declared once, globally); a value set bound by a single
type is declared inside that type.
"""

from __future__ import annotations

import logging

from ...utils import strip_choice_marker, to_pascal_case, unversioned_url
from ..errors import AmbiguousNameError
from ..schema_ast.nodes import BindingStrength, ElementDefinition, SchemaGraph, ValueSetDef
from .context import SHARED_ENUM_SCOPE, ResolutionContext
from .ir_nodes import EnumerationRecord, EnumMember, TypeIdentity
from .name_resolver import NameResolver
from .tables import (
    CODED_ELEMENT_OVERRIDES,
    MEMBER_NAME_SOURCES,
    VALUE_SET_BEHAVIOR_OVERRIDES,
    MemberNameQuery,
    MemberNameSource,
    ValueSetBehavior,
)

logger = logging.getLogger(__name__)


class EnumDeduplicator:
    """Creates enumeration records, at most one per value set URL."""

    def __init__(self, context: ResolutionContext, names: NameResolver):
        self.context = context
        self.names = names

    def index_bindings(self, graph: SchemaGraph) -> None:
        """
        Record which top-level types bind to each value set.

        Must run before the first bind_code call so that sharing decisions do
        not depend on resolution order.
        """
        owners = self.context.binding_owners
        for node in graph.top_level_nodes():
            for element in node.iter_elements():
                if element.is_inherited or not self._is_required_code(element):
                    continue
                url = unversioned_url(element.binding.value_set)
                bound = owners.setdefault(url, [])
                if node.name not in bound:
                    bound.append(node.name)

        logger.debug("Indexed required bindings to %d value sets", len(owners))

    def bind_code(self, element: ElementDefinition, owner: TypeIdentity) -> EnumerationRecord | None:
        """
        Get the enumeration for a coded element.

        Args:
            element: A binding-eligible element
            owner: Identity of the top-level type declaring the element

        Returns:
            The enumeration record, or None when the element stays a plain code
        """
        value_set = self._eligible_value_set(element)
        if value_set is None:
            return None

        url = unversioned_url(value_set.url)
        record = self.context.enumerations.get(url)
        if record is not None:
            return record

        record = self._create_record(url, value_set, element, owner)
        self.context.enumerations[url] = record
        logger.debug(
            "Enumeration %s for %s (%s, %d members)",
            record.name,
            url,
            "shared" if record.is_shared else f"local to {record.declaring_scope}",
            len(record.members),
        )
        return record

    def _is_required_code(self, element: ElementDefinition) -> bool:
        return (
            element.is_binding_eligible
            and element.binding is not None
            and element.binding.strength == BindingStrength.REQUIRED
        )

    def _behavior(self, url: str) -> ValueSetBehavior:
        return VALUE_SET_BEHAVIOR_OVERRIDES.lookup(url, ValueSetBehavior())

    def _eligible_value_set(self, element: ElementDefinition) -> ValueSetDef | None:
        """The bound value set if the element can become an enumeration."""
        if not self._is_required_code(element):
            return None

        url = unversioned_url(element.binding.value_set)
        reason = None
        value_set = self.context.graph.find_value_set(url)
        if CODED_ELEMENT_OVERRIDES.matches((element.path, self.context.version)):
            reason = "coded element override"
        elif self.context.value_set_exclusions.matches(url):
            reason = "excluded value set"
        elif not self._behavior(url).allow_in_classes:
            reason = "value set not allowed in classes"
        elif value_set is None:
            reason = "value set not found"
        elif not value_set.concepts:
            reason = "value set has no concepts"

        if reason is not None:
            logger.debug("%s stays a plain code: %s (%s)", element.path, reason, url)
            return None
        return value_set

    def _create_record(
        self,
        url: str,
        value_set: ValueSetDef,
        element: ElementDefinition,
        owner: TypeIdentity,
    ) -> EnumerationRecord:
        owners = self.context.binding_owners.get(url, [owner.canonical_name])
        shared = self._behavior(url).allow_shared and (
            len(owners) >= 2 or url in self.context.explicit_shared_value_sets
        )

        raw_name = self.context.enum_name_overrides.lookup(url)
        if raw_name is None:
            raw_name = value_set.name.replace(" ", "").replace("_", "")

        style = self.context.styles.enum_style
        if shared:
            scope = SHARED_ENUM_SCOPE
            declaring_scope = ""
        else:
            scope = f"{owner.canonical_name}#enums"
            declaring_scope = owner.resolved_name.value

        name = self.names.resolve(raw_name, scope, style, key=url)

        if not shared and name.value == to_pascal_case(strip_choice_marker(element.name)):
            raise AmbiguousNameError(
                f"Enumeration {name.value} has the same name as the element using it; add a name override",
                entity=url,
                scope=declaring_scope,
            )

        return EnumerationRecord(
            url=url,
            name=name,
            declaring_scope=declaring_scope,
            members=self._name_members(url, value_set),
            is_deferred=shared and not self.context.owns_value_set(url),
            referenced_by=tuple(owners),
        )

    def _name_members(self, url: str, value_set: ValueSetDef) -> tuple[EnumMember, ...]:
        """Name every distinct concept in the enumeration's own scope."""
        scope = self.context.scope(f"{url}#members")
        style = self.context.styles.member_style
        max_length = self.context.config.max_display_length

        members = []
        seen = set()
        for concept in value_set.concepts:
            key = (concept.system, concept.code)
            if key in seen:
                continue
            seen.add(key)

            source = MEMBER_NAME_SOURCES.lookup(MemberNameQuery(concept, max_length), MemberNameSource.DISPLAY)
            text = concept.code if source == MemberNameSource.CODE else concept.display
            members.append(
                EnumMember(
                    code=concept.code,
                    system=concept.system,
                    display=concept.display,
                    name=self.names.resolve(text, scope, style, key=key),
                )
            )
        return tuple(members)
