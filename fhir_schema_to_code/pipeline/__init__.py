"""
Pipeline - schema graph to resolved type system.

This module provides the multi-phase architecture of the generator:

1. Phase 1 (Parser): Parse the schema dictionary into a SchemaGraph
2. Phase 2 (Analyzer): Resolve names, nested groups, enumerations and types
3. Phase 3 (Manifest): Index the resolved top-level types
4. Phase 4 (Backend): Render the resolution result
"""

from __future__ import annotations

from .config import GenSubset, NamingConvention, NamingStyle, ResolverConfig
from .errors import (
    AmbiguousNameError,
    CyclicRecursionError,
    DuplicateManifestNameError,
    ResolutionError,
    UnresolvedReferenceError,
)
from .generator import PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "ResolverConfig",
    "GenSubset",
    "NamingConvention",
    "NamingStyle",
    "ResolutionError",
    "AmbiguousNameError",
    "UnresolvedReferenceError",
    "CyclicRecursionError",
    "DuplicateManifestNameError",
]
