"""
Analyzer module.

Contains name resolution, backbone flattening, enumeration deduplication,
type resolution and manifest building.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .context import ResolutionContext
from .ir_nodes import (
    ChoiceAlternative,
    EnumerationRecord,
    EnumMember,
    ExportManifest,
    ManifestEntry,
    ResolutionResult,
    ResolvedElement,
    ResolvedName,
    ResolvedNode,
    ResolvedType,
    TypeIdentity,
    TypeKind,
)
from .manifest import ManifestBuilder
from .name_resolver import NameResolver
from .type_resolver import TypeResolver

__all__ = [
    "ChoiceAlternative",
    "EnumerationRecord",
    "EnumMember",
    "ExportManifest",
    "ManifestBuilder",
    "ManifestEntry",
    "NameResolver",
    "ResolutionContext",
    "ResolutionResult",
    "ResolvedElement",
    "ResolvedName",
    "ResolvedNode",
    "ResolvedType",
    "SchemaAnalyzer",
    "TypeIdentity",
    "TypeKind",
    "TypeResolver",
]
