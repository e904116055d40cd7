"""
Info backend.

Renders a plain text listing of a resolution result: every type with its
fields and their resolved shapes, followed by the enumerations. Useful for
reviewing naming decisions and diffing them between runs.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import ResolutionResult, ResolvedType, TypeKind
from ..schema_ast.nodes import NodeKind
from .base import CodeBackend


class InfoBackend(CodeBackend):
    """Plain text listing backend."""

    TEMPLATE_LANG = "info"
    FILE_EXTENSION = "txt"

    def generate(self, result: ResolutionResult, header: str = "") -> str:
        manifest = result.manifest
        parts = [
            self.prefix_template.render(
                HEADER=header if self.config.add_generation_comment else "",
                VERSION=result.version,
                SUBSET=self.config.subset.value,
                counts={
                    "primitives": len(manifest.of_kind(NodeKind.PRIMITIVE)),
                    "complex types": len(manifest.of_kind(NodeKind.COMPLEX_TYPE)),
                    "resources": len(manifest.of_kind(NodeKind.RESOURCE)),
                    "enumerations": len(result.enumerations),
                },
            )
        ]

        # Types in manifest order
        for canonical_name in manifest.entries:
            node = result.nodes[canonical_name]
            parts.append(self.class_template.render(node=self._prepare_node_context(node)))

        for scope, records in result.enumerations_by_scope().items():
            parts.append(self.enum_template.render(SCOPE=scope, enumerations=records))

        parts.append(self.suffix_template.render(SUPPORTED_RESOURCES=manifest.supported_resources))
        return "".join(parts)

    def translate_type(self, type_ref: ResolvedType | None) -> str:
        if type_ref is None:
            return ""

        if type_ref.kind == TypeKind.SCALAR:
            text = type_ref.primitive
            if type_ref.enumeration is not None:
                text = f"{text}<{type_ref.enumeration.name}>"
        elif type_ref.kind == TypeKind.NAMED_REFERENCE:
            text = type_ref.identity.qualified_name
            if type_ref.target_profiles:
                targets = ", ".join(profile.rsplit("/", 1)[-1] for profile in type_ref.target_profiles)
                text = f"{text}({targets})"
        elif type_ref.kind == TypeKind.NESTED_RECORD:
            text = type_ref.identity.qualified_name
        elif type_ref.kind == TypeKind.GENERIC_CONTAINER:
            text = f"{type_ref.generic_alias} = {type_ref.generic_default}"
        else:
            text = "|".join(self.translate_type(alt.type_ref) for alt in type_ref.alternatives)

        if type_ref.is_repeated:
            text = f"{text}[]"
        return text
