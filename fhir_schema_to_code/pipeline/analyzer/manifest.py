"""
Export manifest builder.

Aggregates the resolved top-level types into the immutable index that every
renderer consumes.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable

from ..errors import DuplicateManifestNameError
from ..schema_ast.nodes import NodeKind
from .ir_nodes import ExportManifest, ManifestEntry, ResolvedNode

logger = logging.getLogger(__name__)

MANIFEST_KINDS = (NodeKind.PRIMITIVE, NodeKind.COMPLEX_TYPE, NodeKind.RESOURCE)


class ManifestBuilder:
    """Builds the export manifest from resolved nodes."""

    def build(self, resolved_nodes: Iterable[ResolvedNode]) -> ExportManifest:
        """
        Build the manifest.

        Args:
            resolved_nodes: The resolved top-level nodes of the run

        Returns:
            The manifest, with entries and supported resources in canonical-name order

        Raises:
            DuplicateManifestNameError: If two canonical names share a resolved name
        """
        identities = {
            node.identity.canonical_name: node.identity
            for node in resolved_nodes
            if node.identity.kind in MANIFEST_KINDS
        }

        entries: dict[str, ManifestEntry] = {}
        owners: dict[str, str] = {}  # resolved name -> canonical name
        for canonical_name in sorted(identities):
            identity = identities[canonical_name]
            resolved = identity.resolved_name.value

            if resolved in owners:
                raise DuplicateManifestNameError(
                    f"{owners[resolved]} and {canonical_name} both resolve to {resolved}",
                    entity=canonical_name,
                    scope="manifest",
                )
            owners[resolved] = canonical_name

            entries[canonical_name] = ManifestEntry(
                canonical_name=canonical_name,
                resolved_name=identity.resolved_name,
                identity=identity,
                kind=identity.kind,
                is_abstract=identity.is_abstract,
            )

        supported = tuple(
            name for name, entry in entries.items() if entry.kind == NodeKind.RESOURCE and not entry.is_abstract
        )

        logger.info("Manifest built: %d types, %d supported resources", len(entries), len(supported))
        return ExportManifest(entries=MappingProxyType(entries), supported_resources=supported)
