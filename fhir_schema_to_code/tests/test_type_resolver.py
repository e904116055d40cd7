#!/usr/bin/env python3

import pytest

from fhir_schema_to_code.pipeline.analyzer.context import ResolutionContext
from fhir_schema_to_code.pipeline.analyzer.ir_nodes import TypeKind
from fhir_schema_to_code.pipeline.analyzer.name_resolver import NameResolver
from fhir_schema_to_code.pipeline.analyzer.type_resolver import TypeResolver
from fhir_schema_to_code.pipeline.config import ResolverConfig
from fhir_schema_to_code.pipeline.errors import CyclicRecursionError, UnresolvedReferenceError

from .schema_builders import build_graph, element, structure

BACKBONE = "BackboneElement"


def make_resolver(resources=(), complex_types=(), version="R4", **config) -> TypeResolver:
    graph = build_graph(resources=resources, complex_types=complex_types, version=version)
    context = ResolutionContext(graph, ResolverConfig(**config))
    return TypeResolver(context, NameResolver(context))


def resolve(resolver: TypeResolver, path: str):
    element = resolver.graph.find_element(path)
    owner_path = path.rsplit(".", 1)[0]
    owner = resolver.graph.find_node(owner_path) if "." not in owner_path else resolver.graph.find_nested(owner_path)
    return resolver.resolve_element(element, owner)


class TestSingleOption:
    def test_primitive(self):
        resolver = make_resolver([structure("Patient", element("Patient.active", "boolean"))])
        resolved = resolve(resolver, "Patient.active")

        assert resolved.field_name.value == "active"
        assert resolved.type_ref.kind == TypeKind.SCALAR
        assert resolved.type_ref.primitive == "boolean"
        assert not resolved.type_ref.is_repeated

    def test_unbound_code_is_plain_scalar(self):
        resolver = make_resolver([structure("Patient", element("Patient.language", "code"))])
        type_ref = resolve(resolver, "Patient.language").type_ref

        assert type_ref.kind == TypeKind.SCALAR
        assert type_ref.primitive == "code"
        assert type_ref.enumeration is None

    def test_system_type(self):
        resolver = make_resolver([structure("Patient", element("Patient.raw", "http://hl7.org/fhirpath/System.String"))])
        assert resolve(resolver, "Patient.raw").type_ref.primitive == "string"

    def test_named_reference_with_profiles(self):
        profiles = ["http://hl7.org/fhir/StructureDefinition/Patient"]
        resolver = make_resolver(
            [structure("Encounter", element("Encounter.subject", {"code": "Reference", "targetProfiles": profiles}, max="*"))]
        )
        type_ref = resolve(resolver, "Encounter.subject").type_ref

        assert type_ref.kind == TypeKind.NAMED_REFERENCE
        assert type_ref.identity is resolver.identity_for("Reference")
        assert type_ref.target_profiles == profiles
        assert type_ref.is_repeated

    def test_references_are_memoized(self):
        resolver = make_resolver(
            [
                structure("Patient", element("Patient.maritalStatus", "CodeableConcept")),
                structure("Observation", element("Observation.code", "CodeableConcept", min=1)),
            ]
        )
        first = resolve(resolver, "Patient.maritalStatus").type_ref.identity
        second = resolve(resolver, "Observation.code").type_ref.identity

        assert first is second
        assert first.canonical_name == "CodeableConcept"

    def test_nested_record(self):
        resolver = make_resolver(
            [structure("Patient", element("Patient.contact", BACKBONE, max="*"), element("Patient.contact.name", "string"))]
        )
        type_ref = resolve(resolver, "Patient.contact").type_ref

        assert type_ref.kind == TypeKind.NESTED_RECORD
        assert type_ref.identity.qualified_name == "Patient.ContactComponent"
        assert type_ref.owning_path == "Patient.contact"
        assert type_ref.is_repeated

    def test_content_reference(self):
        resolver = make_resolver(
            [
                structure(
                    "Questionnaire",
                    element("Questionnaire.item", BACKBONE, max="*"),
                    element("Questionnaire.item.linkId", "string", min=1),
                    element("Questionnaire.item.item", max="*", contentReference="#Questionnaire.item"),
                )
            ]
        )
        group = resolve(resolver, "Questionnaire.item").type_ref
        recursive = resolve(resolver, "Questionnaire.item.item").type_ref

        assert recursive.kind == TypeKind.NESTED_RECORD
        assert recursive.identity is group.identity
        assert recursive.owning_path == "Questionnaire.item.item"

    def test_dangling_content_reference(self):
        resolver = make_resolver([structure("Thing", element("Thing.part", contentReference="#Thing.missing"))])
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            resolve(resolver, "Thing.part")
        assert excinfo.value.entity == "Thing.missing"

    def test_generic_container(self):
        resolver = make_resolver(
            [
                structure(
                    "Bundle",
                    element("Bundle.entry", BACKBONE, max="*"),
                    element("Bundle.entry.resource", "Resource"),
                    base="Resource",
                )
            ]
        )
        type_ref = resolve(resolver, "Bundle.entry.resource").type_ref

        assert type_ref.kind == TypeKind.GENERIC_CONTAINER
        assert type_ref.generic_alias == "BundleContentType"
        assert type_ref.generic_default == "Resource"

        node = resolver.resolve_node(resolver.graph.find_node("Bundle"))
        assert node.type_parameter == ("BundleContentType", "Resource")
        assert node.nested[0].type_parameter == ("BundleContentType", "Resource")

    def test_placeholder_outside_injection_points_is_a_reference(self):
        resolver = make_resolver([structure("Parameters", element("Parameters.resource", "Resource"), base="Resource")])
        type_ref = resolve(resolver, "Parameters.resource").type_ref

        assert type_ref.kind == TypeKind.NAMED_REFERENCE
        assert type_ref.identity.canonical_name == "Resource"

    def test_path_override(self):
        resolver = make_resolver(complex_types=[structure("Meta", element("Meta.profile", "canonical", max="*"), base="Element")])
        type_ref = resolve(resolver, "Meta.profile").type_ref

        assert type_ref.kind == TypeKind.SCALAR
        assert type_ref.primitive == "uri"
        assert type_ref.is_repeated

    def test_unknown_type(self):
        resolver = make_resolver([structure("Patient", element("Patient.photo", "Attachment"))])
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            resolve(resolver, "Patient.photo")
        assert excinfo.value.entity == "Attachment"
        assert excinfo.value.scope == "Patient.photo"

    def test_inherited_elements_are_skipped(self):
        resolver = make_resolver([structure("Patient", element("Patient.id", "string", inherited=True))])
        assert resolve(resolver, "Patient.id") is None


class TestChoice:
    def test_one_slot_per_alternative(self):
        resolver = make_resolver(
            [structure("Observation", element("Observation.value[x]", "Quantity", "CodeableConcept", "string"))]
        )
        resolved = resolve(resolver, "Observation.value[x]")
        type_ref = resolved.type_ref

        assert resolved.field_name.value == "value"
        assert type_ref.kind == TypeKind.CHOICE
        assert len(type_ref.alternatives) == 3
        assert [alt.slot_name.value for alt in type_ref.alternatives] == [
            "valueQuantity",
            "valueCodeableConcept",
            "valueString",
        ]
        assert [alt.type_ref.kind for alt in type_ref.alternatives] == [
            TypeKind.NAMED_REFERENCE,
            TypeKind.NAMED_REFERENCE,
            TypeKind.SCALAR,
        ]
        assert type_ref.discriminator_pattern == "value[Type]"
        assert type_ref.is_safe_subset

    def test_slots_avoid_existing_fields(self):
        resolver = make_resolver(
            [
                structure(
                    "Observation",
                    element("Observation.valueString", "string"),
                    element("Observation.value[x]", "string", "boolean"),
                )
            ]
        )
        resolve(resolver, "Observation.valueString")
        slots = [alt.slot_name.value for alt in resolve(resolver, "Observation.value[x]").type_ref.alternatives]

        assert slots == ["valueString_2", "valueBoolean"]
        assert len(set(slots)) == 2

    def test_resource_alternative_is_not_safe(self):
        resolver = make_resolver(
            [
                structure("Patient"),
                structure("Consent", element("Consent.source[x]", "Reference", "Patient")),
            ]
        )
        assert not resolve(resolver, "Consent.source[x]").type_ref.is_safe_subset

    def test_field_names_use_target_style(self):
        resolver = make_resolver(
            [structure("Observation", element("Observation.effective[x]", "dateTime", "string"))], language="python"
        )
        resolved = resolve(resolver, "Observation.effective[x]")

        assert resolved.field_name.value == "effective"
        assert [alt.slot_name.value for alt in resolved.type_ref.alternatives] == ["effective_date_time", "effective_string"]


class TestBaseTypes:
    def test_base_chain(self):
        resolver = make_resolver([structure("Patient")])
        patient = resolver.identity_for("Patient")

        assert patient.base is resolver.identity_for("DomainResource")
        assert patient.base.base is resolver.identity_for("Resource")
        assert patient.base.base.base is None

    def test_version_remap(self):
        resolver = make_resolver(
            resources=[structure("Library", base="MetadataResource")],
            complex_types=[structure("Money", base="DataType")],
        )
        assert resolver.identity_for("Library").base.canonical_name == "DomainResource"
        assert resolver.identity_for("Money").base.canonical_name == "Element"

    def test_remap_does_not_apply_to_later_versions(self):
        resolver = make_resolver(
            complex_types=[structure("DataType", base="Element", abstract=True), structure("Money", base="DataType")],
            version="R5",
        )
        assert resolver.identity_for("Money").base.canonical_name == "DataType"

    def test_unknown_base(self):
        resolver = make_resolver(complex_types=[structure("Money", base="Currency")])
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            resolver.identity_for("Money")
        assert excinfo.value.entity == "Currency"

    def test_base_cycle(self):
        resolver = make_resolver(complex_types=[structure("Alpha", base="Beta"), structure("Beta", base="Alpha")])
        with pytest.raises(CyclicRecursionError):
            resolver.identity_for("Alpha")

    def test_type_name_mappings(self):
        resolver = make_resolver(language="cs")
        assert resolver.identity_for("Reference").resolved_name.value == "ResourceReference"
        assert resolver.identity_for("string").resolved_name.value == "FhirString"


if __name__ == "__main__":
    pytest.main([__file__])
