"""
Pipeline generator.

Runs the phases in order: parse the schema dictionary, resolve it, render
the result. Nothing is rendered unless resolution completed.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .analyzer import ResolutionResult, SchemaAnalyzer
from .backends import CodeBackend, InfoBackend
from .config import ResolverConfig
from .schema_ast import SchemaGraph, SchemaParser

logger = logging.getLogger(__name__)

BACKENDS: dict[str, type[CodeBackend]] = {
    "info": InfoBackend,
}


class PipelineGenerator:
    """Parses, resolves and renders one schema."""

    def __init__(self, name: str, schema: dict[str, Any] | SchemaGraph, config: ResolverConfig | None = None):
        """
        Initialize the generator.

        Args:
            name: Name of the run, used in log messages
            schema: Schema dictionary, or an already parsed graph
            config: Resolution options
        """
        self.name = name
        self.schema = schema
        self.config = config or ResolverConfig()
        self.result: ResolutionResult | None = None

    def resolve(self) -> ResolutionResult:
        """Parse (if needed) and resolve the schema."""
        graph = self.schema if isinstance(self.schema, SchemaGraph) else SchemaParser().parse(self.schema)
        logger.info("Resolving %s (%s, language %s)", self.name, graph.version, self.config.language)
        self.result = SchemaAnalyzer(self.config).analyze(graph)
        return self.result

    def generate(self, output_format: str = "info", header: str = "") -> str:
        """
        Resolve the schema and render the result.

        Args:
            output_format: "json" for the raw resolution result, or a backend name
            header: Generation comment passed to the backend

        Returns:
            The rendered text
        """
        result = self.resolve()
        if output_format == "json":
            return json.dumps(result.to_dict(), indent=2) + "\n"

        if output_format not in BACKENDS:
            raise ValueError(f"Output format '{output_format}' is not supported")
        return BACKENDS[output_format](self.config).generate(result, header=header)
