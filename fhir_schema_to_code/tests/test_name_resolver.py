#!/usr/bin/env python3

import pytest

from fhir_schema_to_code.pipeline.analyzer.context import ResolutionContext
from fhir_schema_to_code.pipeline.analyzer.name_resolver import NameResolver
from fhir_schema_to_code.pipeline.config import (
    TARGET_STYLES,
    NamingConvention,
    NamingStyle,
    ResolverConfig,
)
from fhir_schema_to_code.pipeline.errors import AmbiguousNameError

from .schema_builders import build_graph

PASCAL = NamingStyle(NamingConvention.PASCAL_CASE)


def make_resolver(**config) -> NameResolver:
    return NameResolver(ResolutionContext(build_graph(), ResolverConfig(**config)))


class TestCollisionSuffixing:
    """Names issued within one scope stay unique"""

    def test_three_colliding_names(self):
        resolver = make_resolver()
        names = [resolver.resolve(raw, "scope", PASCAL, key=raw) for raw in ("status", "Status", "STATUS")]

        assert [n.value for n in names] == ["Status", "Status_2", "Status_3"]
        assert [n.suffix_index for n in names] == [0, 2, 3]

    def test_smallest_unused_suffix(self):
        resolver = make_resolver()
        scope = resolver.context.scope("scope")
        resolver.issue("Status_2", scope)

        assert resolver.resolve("status", scope, PASCAL).value == "Status"
        assert resolver.resolve("status", scope, PASCAL).value == "Status_3"

    def test_scopes_are_independent(self):
        resolver = make_resolver()
        first = resolver.resolve("status", "Patient#fields", PASCAL)
        second = resolver.resolve("status", "Observation#fields", PASCAL)

        assert first.value == second.value == "Status"

    def test_same_key_returns_same_name(self):
        resolver = make_resolver()
        first = resolver.resolve("status", "scope", PASCAL, key="Patient.status")
        again = resolver.resolve("status", "scope", PASCAL, key="Patient.status")

        assert again is first
        assert len(resolver.context.scope("scope")) == 1

    def test_exhausted_suffix_search_is_fatal(self):
        resolver = make_resolver(max_suffix_attempts=2)
        for _ in range(3):
            resolver.resolve("status", "scope", PASCAL)

        with pytest.raises(AmbiguousNameError) as excinfo:
            resolver.resolve("status", "scope", PASCAL)
        assert excinfo.value.entity == "Status"
        assert excinfo.value.scope == "scope"

    def test_runs_do_not_share_scopes(self):
        graph = build_graph()
        first = NameResolver(ResolutionContext(graph, ResolverConfig()))
        second = NameResolver(ResolutionContext(graph, ResolverConfig()))

        first.resolve("status", "scope", PASCAL)
        assert second.resolve("status", "scope", PASCAL).value == "Status"


class TestConversion:
    """Convention transforms and reserved words"""

    @pytest.mark.parametrize(
        "convention, expected",
        [
            (NamingConvention.PASCAL_CASE, "EnteredInError"),
            (NamingConvention.CAMEL_CASE, "enteredInError"),
            (NamingConvention.UPPER_SNAKE_CASE, "ENTERED_IN_ERROR"),
            (NamingConvention.SNAKE_CASE, "entered_in_error"),
            (NamingConvention.LOWER_CASE, "enteredinerror"),
        ],
    )
    def test_conventions(self, convention, expected):
        assert make_resolver().convert("entered-in-error", NamingStyle(convention)) == expected

    def test_symbol_literals(self):
        resolver = make_resolver()
        assert resolver.convert("<=", PASCAL) == "LessOrEqual"
        assert resolver.convert(">", PASCAL) == "GreaterThan"

    def test_leading_digit(self):
        resolver = make_resolver()
        assert resolver.convert("3 months", PASCAL) == "N3Months"
        assert resolver.convert("3 months", NamingStyle(NamingConvention.CAMEL_CASE)) == "n3Months"

    def test_unnameable_text(self):
        with pytest.raises(AmbiguousNameError):
            make_resolver().convert("~~", PASCAL)

    def test_reserved_words_use_the_consuming_style(self):
        config = ResolverConfig(language="cs", extra_reserved_words=["Class"])
        resolver = NameResolver(ResolutionContext(build_graph(), config))
        styles = config.styles()

        assert resolver.convert("class", styles.type_style) == "ClassType"
        assert resolver.convert("class", styles.field_style) == "@Class"
        assert resolver.convert("status", styles.field_style) == "Status"

        python = TARGET_STYLES["python"]
        assert resolver.convert("import", python.field_style) == "import_"
        assert resolver.convert("none", python.member_style) == "NONE"

    def test_csharp_keywords_are_case_sensitive(self):
        resolver = make_resolver(language="cs")
        styles = TARGET_STYLES["cs"]

        assert [resolver.convert(raw, styles.member_style) for raw in ("In", "Fixed")] == ["In", "Fixed"]
        assert resolver.convert("Base", styles.type_style) == "Base"
        assert resolver.convert("class", styles.field_style) == "Class"
        assert styles.field_style.is_reserved("class")
        assert styles.field_style.escape("class") == "@class"

    def test_extra_reserved_words(self):
        config = ResolverConfig(language="typescript", extra_reserved_words=["Patient"])
        resolver = NameResolver(ResolutionContext(build_graph(), config))

        assert resolver.convert("patient", config.styles().type_style) == "Patient_"

    def test_unknown_language(self):
        with pytest.raises(ValueError):
            ResolverConfig(language="cobol").styles()
        with pytest.raises(ValueError):
            ResolverConfig.from_dict({"language": "cobol"})
        assert ResolverConfig.from_dict({"language": "cs"}).language == "cs"


if __name__ == "__main__":
    pytest.main([__file__])
