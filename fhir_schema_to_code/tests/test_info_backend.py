#!/usr/bin/env python3

from unittest import TestCase

import pytest

from fhir_schema_to_code.pipeline import PipelineGenerator, ResolverConfig
from fhir_schema_to_code.pipeline.errors import UnresolvedReferenceError

from .schema_builders import build_schema, element, load_test_schema, structure


class TestInfoBackend(TestCase):
    """Plain text rendering of a resolution result"""

    @classmethod
    def setUpClass(cls):
        generator = PipelineGenerator("mini_r4", load_test_schema(), ResolverConfig())
        cls.output = generator.generate("info", header="Generated by a test")

    def assert_contains(self, *expected):
        for text in expected:
            self.assertIn(text, self.output, f"Expected '{text}' not found in rendered output")

    def test_header_and_counts(self):
        self.assertTrue(self.output.startswith("Generated by a test\nVersion: R4\nSubset: all\n"))
        self.assert_contains("Primitives: 6\n", "Complex types: 10\n", "Resources: 8\n", "Enumerations: 6\n")

    def test_types_and_fields(self):
        self.assert_contains(
            "- Patient: DomainResource\n",
            "  - active[0..1]: boolean\n",
            "  - gender[0..1]: code<AdministrativeGender>\n",
            "  - maritalStatus[0..1]: code\n",
            "  - deceased[0..1]: boolean|dateTime\n",
            "    . deceasedBoolean: boolean\n",
            "    . deceasedDateTime: dateTime\n",
            "  - contact[0..*]: Patient.ContactComponent[]\n",
            "  - Patient.ContactComponent: BackboneElement\n",
            "    - relationship[0..*]: CodeableConcept[]\n",
            "    - other[1..1]: Reference(Patient, Person)\n",
            "- Resource: - (abstract)\n",
        )

    def test_generic_bundle(self):
        self.assert_contains(
            "- Bundle<BundleContentType = Resource>: Resource\n",
            "  - Bundle.EntryComponent<BundleContentType = Resource>: BackboneElement\n",
            "    - resource[0..1]: BundleContentType = Resource\n",
        )

    def test_enumerations(self):
        self.assert_contains(
            "Enumerations (shared): 1\n",
            "- AdministrativeGender: http://hl7.org/fhir/ValueSet/administrative-gender\n",
            "  - #male: Male\n",
            "Enumerations (Quantity): 1\n",
            "  - #<=: LessOrEqual\n",
        )

    def test_supported_resources(self):
        self.assertTrue(self.output.endswith("Supported resources: 6\n- Bundle\n- Citation\n- Observation\n- Patient\n- Person\n- Questionnaire\n"))

    def test_no_header_when_disabled(self):
        generator = PipelineGenerator("mini_r4", load_test_schema(), ResolverConfig(add_generation_comment=False))
        output = generator.generate("info", header="Generated by a test")
        self.assertTrue(output.startswith("Version: R4\n"))


class TestPipelineGenerator:
    def test_json_output(self):
        output = PipelineGenerator("mini_r4", load_test_schema()).generate("json")
        assert '"supportedResources"' in output
        assert output.endswith("\n")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            PipelineGenerator("mini_r4", load_test_schema()).generate("xml")

    def test_failed_resolution_renders_nothing(self):
        schema = build_schema(resources=[structure("Patient", element("Patient.photo", "Attachment"))])
        generator = PipelineGenerator("broken", schema)

        with pytest.raises(UnresolvedReferenceError):
            generator.generate("info")
        assert generator.result is None


if __name__ == "__main__":
    pytest.main([__file__])
