#!/usr/bin/env python3

import pytest

from fhir_schema_to_code.pipeline.analyzer import SchemaAnalyzer
from fhir_schema_to_code.pipeline.config import ResolverConfig
from fhir_schema_to_code.pipeline.errors import DuplicateManifestNameError
from fhir_schema_to_code.pipeline.schema_ast import NodeKind

from .schema_builders import build_graph, element, structure


class TestManifest:
    """The export manifest built at the end of a run"""

    def setup_method(self):
        graph = build_graph(
            resources=[
                structure("Patient", element("Patient.contact", "BackboneElement"), element("Patient.contact.name", "string")),
                structure("Account"),
            ]
        )
        self.result = SchemaAnalyzer(ResolverConfig()).analyze(graph)
        self.manifest = self.result.manifest

    def test_entries_in_canonical_name_order(self):
        names = list(self.manifest.entries)
        assert names == sorted(names)
        assert "Patient" in self.manifest
        assert "Patient.contact" not in self.manifest
        assert len(self.manifest) == 7 + 5 + 4

    def test_entries_reference_the_resolved_identities(self):
        entry = self.manifest["Patient"]
        assert entry.identity is self.result.nodes["Patient"].identity
        assert entry.resolved_name.value == "Patient"
        assert entry.kind == NodeKind.RESOURCE

        assert self.manifest["dateTime"].resolved_name.value == "DateTime"
        assert self.manifest["dateTime"].kind == NodeKind.PRIMITIVE

    def test_abstract_types_are_indexed_but_not_supported(self):
        assert self.manifest["DomainResource"].is_abstract
        assert self.manifest.supported_resources == ("Account", "Patient")
        assert [e.canonical_name for e in self.manifest.of_kind(NodeKind.RESOURCE)] == [
            "Account",
            "DomainResource",
            "Patient",
            "Resource",
        ]

    def test_manifest_is_read_only(self):
        with pytest.raises(TypeError):
            self.manifest.entries["Other"] = self.manifest["Patient"]
        with pytest.raises(AttributeError):
            self.manifest.supported_resources = ()


class TestManifestCollisions:
    def test_two_types_with_the_same_resolved_name(self):
        graph = build_graph(resources=[structure("Foo_Bar"), structure("FooBar")])

        with pytest.raises(DuplicateManifestNameError) as excinfo:
            SchemaAnalyzer(ResolverConfig()).analyze(graph)
        assert "FooBar" in str(excinfo.value)
        assert excinfo.value.scope == "manifest"

    def test_collision_through_reserved_word_escaping(self):
        graph = build_graph(resources=[structure("Class"), structure("ClassType")])

        with pytest.raises(DuplicateManifestNameError):
            SchemaAnalyzer(ResolverConfig(language="cs", extra_reserved_words=["Class"])).analyze(graph)

        # Without the escaping the names stay distinct
        SchemaAnalyzer(ResolverConfig(language="cs")).analyze(graph)


if __name__ == "__main__":
    pytest.main([__file__])
