"""
Schema graph parser.

Phase 1 of the pipeline: turn the JSON form of an ingested schema into a
SchemaGraph without resolving any names or types.

The accepted shape is::

    {
      "version": "R4",
      "primitives": [{"name": "boolean", "url": "...", "base": "Element"}],
      "complexTypes": [<structure>],
      "resources": [<structure>],
      "valueSets": [{"url": "...", "name": "...", "concepts": [
          {"system": "...", "code": "...", "display": "..."}]}]
    }

where a structure is ``{"name", "url", "base", "abstract", "elements": [...]}``
and each element is ``{"path", "min", "max", "types", "binding", "inherited",
"contentReference", "explicitName"}``. Nested groups are inferred from the
element paths: every element that has children becomes a nested node.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import UnresolvedReferenceError
from ...utils import parent_path, unversioned_url
from .nodes import (
    BindingStrength,
    CodeBinding,
    ConceptDef,
    ElementDefinition,
    ElementTypeOption,
    NodeKind,
    SchemaGraph,
    SchemaNode,
    ValueSetDef,
)

logger = logging.getLogger(__name__)


class SchemaParser:
    """Parses the JSON form of a schema into a SchemaGraph."""

    # Section name -> node kind
    SECTIONS = {
        "primitives": NodeKind.PRIMITIVE,
        "complexTypes": NodeKind.COMPLEX_TYPE,
        "resources": NodeKind.RESOURCE,
    }

    def parse(self, schema: dict[str, Any]) -> SchemaGraph:
        """
        Parse a schema dictionary into a graph.

        Args:
            schema: The schema dictionary

        Returns:
            SchemaGraph with every structure and value set
        """
        graph = SchemaGraph(version=schema.get("version", "R4"))

        targets = {
            NodeKind.PRIMITIVE: graph.primitives,
            NodeKind.COMPLEX_TYPE: graph.complex_types,
            NodeKind.RESOURCE: graph.resources,
        }

        for section, kind in self.SECTIONS.items():
            for structure in schema.get(section, []):
                node = self._parse_structure(structure, kind)
                targets[kind][node.name] = node

        for vs_schema in schema.get("valueSets", []):
            value_set = self._parse_value_set(vs_schema)
            graph.value_sets[unversioned_url(value_set.url)] = value_set

        logger.debug(
            "Parsed %s schema: %d primitives, %d complex types, %d resources, %d value sets",
            graph.version,
            len(graph.primitives),
            len(graph.complex_types),
            len(graph.resources),
            len(graph.value_sets),
        )

        return graph

    def _parse_structure(self, structure: dict[str, Any], kind: NodeKind) -> SchemaNode:
        """Parse one top-level structure and its nested groups."""
        name = structure["name"]
        node = SchemaNode(
            name=name,
            url=structure.get("url", ""),
            kind=kind,
            base_type=structure.get("base"),
            is_abstract=structure.get("abstract", False),
            path=name,
            description=structure.get("description", ""),
        )

        elements = [
            self._parse_element(raw, order)
            for order, raw in enumerate(structure.get("elements", []))
            if raw["path"] != name
        ]

        # Paths that have at least one child element become nested groups
        group_paths = {parent_path(element.path) for element in elements}

        nodes_by_path: dict[str, SchemaNode] = {name: node}
        for element in elements:
            owner_path = parent_path(element.path)
            owner = nodes_by_path.get(owner_path)
            if owner is None:
                raise UnresolvedReferenceError("Element declared before its parent", entity=element.path, scope=name)

            owner.elements[element.path] = element

            if element.path in group_paths:
                nested = SchemaNode(
                    name=element.name,
                    kind=NodeKind.BACKBONE,
                    base_type=element.type_options[0].type_name if element.type_options else "BackboneElement",
                    path=element.path,
                    explicit_name=element.explicit_type_name,
                )
                owner.nested[element.path] = nested
                nodes_by_path[element.path] = nested

        return node

    def _parse_element(self, raw: dict[str, Any], order: int) -> ElementDefinition:
        """Parse one element definition."""
        element = ElementDefinition(
            path=raw["path"],
            min_cardinality=int(raw.get("min", 0)),
            max_cardinality=self._parse_max(raw.get("max", "1")),
            type_options=[self._parse_type_option(t) for t in raw.get("types", [])],
            is_inherited=raw.get("inherited", False),
            field_order=order,
            explicit_type_name=raw.get("explicitName"),
        )

        content_reference = raw.get("contentReference")
        if content_reference:
            element.content_reference = content_reference.lstrip("#")

        binding = raw.get("binding")
        if binding and binding.get("valueSet"):
            element.binding = CodeBinding(
                strength=BindingStrength(binding.get("strength", "example")),
                value_set=binding["valueSet"],
            )

        return element

    def _parse_type_option(self, raw: Any) -> ElementTypeOption:
        """Parse a type option, given either as a bare code or as an object."""
        if isinstance(raw, str):
            return ElementTypeOption(type_name=raw)
        return ElementTypeOption(
            type_name=raw["code"],
            target_profiles=list(raw.get("targetProfiles", [])),
        )

    def _parse_max(self, value: Any) -> int | None:
        """Parse a max cardinality ("*" is unbounded)."""
        if value is None or value == "*":
            return None
        return int(value)

    def _parse_value_set(self, raw: dict[str, Any]) -> ValueSetDef:
        """Parse an expanded value set."""
        return ValueSetDef(
            url=raw["url"],
            name=raw.get("name") or raw.get("id", ""),
            version=raw.get("version", ""),
            concepts=[
                ConceptDef(
                    system=concept.get("system", ""),
                    code=concept["code"],
                    display=concept.get("display", ""),
                )
                for concept in raw.get("concepts", [])
            ],
        )
