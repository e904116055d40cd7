"""FHIR Schema to Code Generator

A Python package that resolves a FHIR schema graph into a target type
system: stable names for every type, field, nested group and enumeration,
ready for language renderers.
"""

__version__ = "0.1.0"
__author__ = "François Lagunas"

from .pipeline import (
    AmbiguousNameError,
    CyclicRecursionError,
    DuplicateManifestNameError,
    GenSubset,
    PipelineGenerator,
    ResolutionError,
    ResolverConfig,
    UnresolvedReferenceError,
)

__all__ = [
    "PipelineGenerator",
    "ResolverConfig",
    "GenSubset",
    "ResolutionError",
    "AmbiguousNameError",
    "UnresolvedReferenceError",
    "CyclicRecursionError",
    "DuplicateManifestNameError",
]
