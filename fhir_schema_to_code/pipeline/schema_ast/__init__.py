"""
Schema graph module.

Contains the schema node definitions and the parser for the JSON form of an
ingested schema.
"""

from __future__ import annotations

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
from .parser import SchemaParser

__all__ = [
    "BindingStrength",
    "CodeBinding",
    "ConceptDef",
    "ElementDefinition",
    "ElementTypeOption",
    "NodeKind",
    "SchemaGraph",
    "SchemaNode",
    "ValueSetDef",
    "SchemaParser",
]
