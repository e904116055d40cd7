"""
Base class for rendering backends.

A backend consumes a ResolutionResult read-only and turns it into text.
Backends never rename anything: every identifier they print comes from the
resolution result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import ResolutionResult, ResolvedElement, ResolvedNode, ResolvedType
from ..config import ResolverConfig


class CodeBackend(ABC):
    """Abstract base class for rendering backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: ResolverConfig):
        """
        Initialize the backend.

        Args:
            config: Resolution configuration of the run being rendered
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["cardinality"] = self._format_cardinality

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def generate(self, result: ResolutionResult, header: str = "") -> str:
        """
        Render a resolution result.

        Args:
            result: The resolution result
            header: Optional generation comment placed at the top

        Returns:
            Rendered text
        """

    @abstractmethod
    def translate_type(self, type_ref: ResolvedType) -> str:
        """
        Translate a resolved type to its target spelling.

        Args:
            type_ref: The resolved type

        Returns:
            Target type string
        """

    def _format_cardinality(self, element: ResolvedElement) -> str:
        """Format the cardinality of an element as "min..max"."""
        upper = "*" if element.max_cardinality is None else str(element.max_cardinality)
        return f"{element.min_cardinality}..{upper}"

    def _prepare_node_context(self, node: ResolvedNode) -> dict[str, Any]:
        """
        Prepare the template context for a resolved node and its nested groups.

        Args:
            node: The resolved node

        Returns:
            Dictionary of template variables
        """
        identity = node.identity
        return {
            "CLASS_NAME": identity.qualified_name,
            "CANONICAL_NAME": identity.canonical_name,
            "KIND": identity.kind.value,
            "ABSTRACT": identity.is_abstract,
            "EXTENDS": identity.base.qualified_name if identity.base else "",
            "TYPE_PARAMETER": node.type_parameter,
            "properties": [
                {
                    "name": element.field_name.value,
                    "element": element,
                    "type": self.translate_type(element.type_ref),
                    "kind": element.type_ref.kind.value,
                    "choices": [
                        (alt.slot_name.value, self.translate_type(alt.type_ref)) for alt in element.type_ref.alternatives
                    ],
                }
                for element in node.elements
            ],
            "nested": [self._prepare_node_context(nested) for nested in node.nested],
        }
