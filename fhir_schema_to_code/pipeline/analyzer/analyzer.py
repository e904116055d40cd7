"""
Schema analyzer that resolves a schema graph.

Phase 2 of the pipeline: resolve names, nested groups, enumerations and
element types, then build the export manifest.
"""

from __future__ import annotations

import logging

from ..config import ResolverConfig
from ..errors import CyclicRecursionError
from ..schema_ast.nodes import SchemaGraph
from .context import ResolutionContext
from .ir_nodes import ResolutionResult, ResolvedNode, TypeKind
from .manifest import ManifestBuilder
from .name_resolver import NameResolver
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Analyzes a schema graph and builds the resolution result."""

    def __init__(self, config: ResolverConfig | None = None):
        """
        Initialize the analyzer.

        Args:
            config: Resolution options; defaults are used when omitted
        """
        self.config = config or ResolverConfig()

        # Set during analysis, kept for inspection
        self.context: ResolutionContext | None = None
        self.type_resolver: TypeResolver | None = None

    def analyze(self, graph: SchemaGraph) -> ResolutionResult:
        """
        Resolve every emitted type of the graph.

        Each call starts from a fresh context, so the same analyzer can be
        used for several graphs.

        Args:
            graph: The schema graph

        Returns:
            The resolution result
        """
        context = ResolutionContext(graph, self.config)
        names = NameResolver(context)
        resolver = TypeResolver(context, names)
        self.context = context
        self.type_resolver = resolver

        resolver.enums.index_bindings(graph)

        # Declaration order makes first-resolution-wins deterministic
        for node in graph.top_level_nodes():
            if not context.is_emitted(node):
                continue
            context.resolved_nodes[node.name] = resolver.resolve_node(node)

        self._check_containment_cycles(context.resolved_nodes.values())

        manifest = ManifestBuilder().build(context.resolved_nodes.values())

        logger.info(
            "Resolved %s (%s): %d types, %d enumerations (%d shared)",
            graph.version,
            self.config.subset.value,
            len(context.resolved_nodes),
            len(context.enumerations),
            sum(1 for record in context.enumerations.values() if record.is_shared),
        )

        return ResolutionResult(
            version=graph.version,
            manifest=manifest,
            nodes=dict(context.resolved_nodes),
            enumerations=list(context.enumerations.values()),
        )

    def _check_containment_cycles(self, nodes) -> None:
        """
        Reject types that must contain themselves.

        Only required, single-valued references and nested records count as
        containment: optional or repeated fields and generic containers can
        always be left empty.

        Raises:
            CyclicRecursionError: If such a containment chain loops
        """
        edges: dict[str, list[str]] = {}

        def collect(node: ResolvedNode) -> None:
            targets = edges.setdefault(node.identity.canonical_name, [])
            for element in node.elements:
                type_ref = element.type_ref
                if element.min_cardinality < 1 or type_ref.is_repeated:
                    continue
                if type_ref.kind in (TypeKind.NAMED_REFERENCE, TypeKind.NESTED_RECORD) and type_ref.identity:
                    targets.append(type_ref.identity.canonical_name)
            for nested in node.nested:
                collect(nested)

        for node in nodes:
            collect(node)

        done: set[str] = set()
        for start in edges:
            if start in done:
                continue
            # Iterative depth-first search keeping the current chain
            chain = [start]
            on_chain = {start}
            stack = [iter(edges.get(start, []))]
            while stack:
                target = next(stack[-1], None)
                if target is None:
                    stack.pop()
                    finished = chain.pop()
                    on_chain.discard(finished)
                    done.add(finished)
                    continue
                if target in on_chain:
                    cycle = chain[chain.index(target) :] + [target]
                    raise CyclicRecursionError(
                        "Required single-valued fields form a cycle: " + " -> ".join(cycle),
                        entity=target,
                    )
                if target in done:
                    continue
                chain.append(target)
                on_chain.add(target)
                stack.append(iter(edges.get(target, [])))
