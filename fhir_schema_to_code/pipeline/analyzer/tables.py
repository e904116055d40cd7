"""
Exception tables used during resolution.

Every irregularity of the schema that needs special handling lives here as an
ordered lookup table of (predicate, action) rules. The first matching rule
wins. Keeping them as data makes the exception surface easy to audit and to
test on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Iterator, TypeVar

from ...utils import capitalize_path_segments, unversioned_url
from ..schema_ast.nodes import ConceptDef, version_index

K = TypeVar("K")


@dataclass(frozen=True)
class Rule(Generic[K]):
    """One entry of a lookup table."""

    description: str
    predicate: Callable[[K], bool]
    action: Any


class LookupTable(Generic[K]):
    """An ordered list of rules; lookup returns the action of the first match."""

    def __init__(self, name: str, rules: list[Rule[K]]):
        self.name = name
        self.rules = list(rules)

    def lookup(self, key: K, default: Any = None) -> Any:
        for rule in self.rules:
            if rule.predicate(key):
                return rule.action
        return default

    def matches(self, key: K) -> bool:
        return any(rule.predicate(key) for rule in self.rules)

    def extended(self, rules: list[Rule[K]]) -> LookupTable[K]:
        """Copy of this table with extra rules appended (lowest priority)."""
        return LookupTable(self.name, self.rules + list(rules))

    def __iter__(self) -> Iterator[Rule[K]]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def _equals(expected: str) -> Callable[[str], bool]:
    return lambda value: value == expected


def _url_is(expected: str) -> Callable[[str], bool]:
    return lambda url: unversioned_url(url) == expected


def url_rule(url: str, action: Any, description: str = "") -> Rule[str]:
    """A rule that matches one canonical URL, ignoring a |version suffix."""
    return Rule(description or url, _url_is(url), action)


# ---------------------------------------------------------------------------
# Value sets
# ---------------------------------------------------------------------------

# Value sets whose codes are not usable as identifiers, or are unbounded
VALUE_SET_EXCLUSIONS: LookupTable[str] = LookupTable(
    "value set exclusions",
    [
        url_rule("http://hl7.org/fhir/ValueSet/ucum-units", True, "UCUM units are an open grammar"),
        url_rule("http://hl7.org/fhir/ValueSet/all-languages", True, "all of BCP-47"),
        url_rule("http://hl7.org/fhir/ValueSet/mimetypes", True, "MIME types are unbounded"),
        url_rule("http://hl7.org/fhir/ValueSet/mimetype", True, "MIME types are unbounded"),
        url_rule("http://www.rfc-editor.org/bcp/bcp13.txt", True, "MIME types are unbounded"),
    ],
)


@dataclass(frozen=True)
class ValueSetBehavior:
    """Special handling for one value set."""

    allow_shared: bool = True
    allow_in_classes: bool = True


VALUE_SET_BEHAVIOR_OVERRIDES: LookupTable[str] = LookupTable(
    "value set behavior overrides",
    [
        url_rule("http://hl7.org/fhir/ValueSet/consent-data-meaning", ValueSetBehavior(True, True)),
        url_rule("http://hl7.org/fhir/ValueSet/consent-provision-type", ValueSetBehavior(True, True)),
        url_rule("http://hl7.org/fhir/ValueSet/encounter-status", ValueSetBehavior(True, True)),
        url_rule("http://hl7.org/fhir/ValueSet/list-mode", ValueSetBehavior(True, True)),
        url_rule("http://hl7.org/fhir/ValueSet/color-codes", ValueSetBehavior(False, False)),
    ],
)

# (version, url) pairs shared even with a single referencing type
EXPLICIT_SHARED_VALUE_SETS: frozenset[tuple[str, str]] = frozenset(
    {
        ("R4", "http://hl7.org/fhir/ValueSet/messageheader-response-request"),
        ("R4", "http://hl7.org/fhir/ValueSet/concept-map-equivalence"),
        ("R4B", "http://hl7.org/fhir/ValueSet/messageheader-response-request"),
        ("R4B", "http://hl7.org/fhir/ValueSet/concept-map-equivalence"),
        ("R5", "http://hl7.org/fhir/ValueSet/constraint-severity"),
    }
)

# Value set names that clash with element or type names
ENUM_NAME_OVERRIDES: LookupTable[str] = LookupTable(
    "enumeration name overrides",
    [
        url_rule("http://hl7.org/fhir/ValueSet/characteristic-combination", "CharacteristicCombinationCode"),
        url_rule("http://hl7.org/fhir/ValueSet/claim-use", "ClaimUseCode"),
        url_rule("http://hl7.org/fhir/ValueSet/content-type", "ContentTypeCode"),
        url_rule("http://hl7.org/fhir/ValueSet/exposure-state", "ExposureStateCode"),
        url_rule("http://hl7.org/fhir/ValueSet/verificationresult-status", "StatusCode"),
        url_rule("http://terminology.hl7.org/ValueSet/v3-Confidentiality", "ConfidentialityCode"),
        url_rule("http://hl7.org/fhir/ValueSet/variable-type", "VariableTypeCode"),
        url_rule("http://hl7.org/fhir/ValueSet/group-measure", "GroupMeasureCode"),
        url_rule("http://hl7.org/fhir/ValueSet/coverage-kind", "CoverageKindCode"),
        url_rule("http://hl7.org/fhir/ValueSet/fhir-types", "FHIRAllTypes"),
    ],
)

# (element path, version) pairs that stay plain codes despite a required binding
CODED_ELEMENT_OVERRIDES: LookupTable[tuple[str, str]] = LookupTable(
    "coded element overrides",
    [
        Rule(
            "resource type list is open-ended from R4 on",
            lambda key: key[0] == "CapabilityStatement.rest.resource.type" and version_index(key[1]) >= version_index("R4"),
            True,
        ),
    ],
)


class MemberNameSource(Enum):
    """Which concept text an enumeration member name is derived from."""

    DISPLAY = "display"
    CODE = "code"


@dataclass(frozen=True)
class MemberNameQuery:
    """Input of the member name source table."""

    concept: ConceptDef
    max_display_length: int


def _is_symbol_only(text: str) -> bool:
    return not any(ch.isalnum() for ch in text)


# Code systems whose display texts make poor identifiers
_CODE_NAMED_SYSTEMS = (
    "urn:ietf:bcp:13",
    "urn:ietf:bcp:47",
    "http://unitsofmeasure.org",
    "http://hl7.org/fhir/fhir-types",
    "http://hl7.org/fhir/resource-types",
    "http://hl7.org/fhir/data-types",
    "http://hl7.org/fhir/search-comparator",
    "http://hl7.org/fhir/quantity-comparator",
)

MEMBER_NAME_SOURCES: LookupTable[MemberNameQuery] = LookupTable(
    "member name sources",
    [
        *[
            Rule(f"codes of {system}", (lambda s: lambda q: q.concept.system == s)(system), MemberNameSource.CODE)
            for system in _CODE_NAMED_SYSTEMS
        ],
        Rule("missing display", lambda q: not q.concept.display.strip(), MemberNameSource.CODE),
        Rule("display too long", lambda q: len(q.concept.display) > q.max_display_length, MemberNameSource.CODE),
        Rule("symbol-only display", lambda q: _is_symbol_only(q.concept.display), MemberNameSource.CODE),
        Rule("non-ASCII display", lambda q: not q.concept.display.isascii(), MemberNameSource.CODE),
    ],
)

# Code literals that carry no letters
SYMBOL_LITERALS: LookupTable[str] = LookupTable(
    "symbol literals",
    [
        Rule("=", _equals("="), "Equal"),
        Rule("!=", _equals("!="), "NotEqual"),
        Rule("<", _equals("<"), "LessThan"),
        Rule("<=", _equals("<="), "LessOrEqual"),
        Rule(">=", _equals(">="), "GreaterOrEqual"),
        Rule(">", _equals(">"), "GreaterThan"),
        Rule("*", _equals("*"), "Asterisk"),
    ],
)

# ---------------------------------------------------------------------------
# Backbone naming
# ---------------------------------------------------------------------------

# Legacy entries whose raw path segments are stored in inconsistent case
BACKBONE_CAPITALIZATION_REPAIRS: LookupTable[str] = LookupTable(
    "backbone capitalization repairs",
    [
        Rule(f"{prefix}*", (lambda p: lambda path: path.startswith(p))(prefix), capitalize_path_segments)
        for prefix in ("Citation.", "Statistic.", "DeviceDefinition.")
    ],
)

# Explicit names published in a malformed shape
EXPLICIT_NAME_REPAIRS: LookupTable[str] = LookupTable(
    "explicit name repairs",
    [
        Rule("duplicated explicit name", _equals("AttributeEstimateAttributeEstimate"), "AttributeEstimate"),
        Rule("generator-prefixed explicit name", _equals("ContributorshipSummary"), "CitedArtifactContributorshipSummary"),
    ],
)

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenericHint:
    """A generic injection point: a type parameter alias and its default binding."""

    alias: str
    default: str  # Canonical name of the default binding


# Polymorphic placeholders that may become generic containers
PLACEHOLDER_TYPES = frozenset({"Resource"})

# Node paths that declare the type parameter
GENERIC_OWNERS: LookupTable[str] = LookupTable(
    "generic owners",
    [
        Rule("Bundle", _equals("Bundle"), GenericHint("BundleContentType", "Resource")),
        Rule("Bundle.entry", _equals("Bundle.entry"), GenericHint("BundleContentType", "Resource")),
    ],
)

# Element paths where a placeholder type becomes the type parameter
GENERIC_INJECTION_POINTS: LookupTable[str] = LookupTable(
    "generic injection points",
    [
        Rule("Bundle.entry.resource", _equals("Bundle.entry.resource"), GenericHint("BundleContentType", "Resource")),
    ],
)

# (raw base name, version) -> effective base name
BASE_TYPE_REMAPS: LookupTable[tuple[str, str]] = LookupTable(
    "base type remaps",
    [
        Rule("CanonicalResource is an interface", lambda key: key[0] == "CanonicalResource", "DomainResource"),
        Rule("MetadataResource is an interface", lambda key: key[0] == "MetadataResource", "DomainResource"),
        Rule(
            "DataType is introduced in R5",
            lambda key: key[0] == "DataType" and version_index(key[1]) < version_index("R5"),
            "Element",
        ),
        Rule(
            "PrimitiveType is introduced in R5",
            lambda key: key[0] == "PrimitiveType" and version_index(key[1]) < version_index("R5"),
            "Element",
        ),
        Rule(
            "BackboneType is introduced in R5",
            lambda key: key[0] == "BackboneType" and version_index(key[1]) < version_index("R5"),
            "BackboneElement",
        ),
    ],
)

# Element paths whose declared type is replaced by a fixed primitive
ELEMENT_TYPE_OVERRIDES: LookupTable[str] = LookupTable(
    "element type overrides",
    [
        Rule("Meta.profile is shared across versions", _equals("Meta.profile"), "uri"),
        Rule("Element.id uses a system string", _equals("Element.id"), "string"),
        Rule("Extension.url uses a system string", _equals("Extension.url"), "string"),
    ],
)

# Prefix of the system (FHIRPath) types used by a few elements
SYSTEM_TYPE_PREFIX = "http://hl7.org/fhirpath/System."

# ---------------------------------------------------------------------------
# Generation subsets
# ---------------------------------------------------------------------------

BASE_SUBSET_COMPLEX_TYPES = frozenset(
    {
        "Attachment",
        "BackboneElement",
        "BackboneType",
        "Base",
        "CodeableConcept",
        "Coding",
        "ContactPoint",
        "ContactDetail",
        "DataType",
        "Element",
        "Extension",
        "Identifier",
        "Meta",
        "Narrative",
        "Period",
        "PrimitiveType",
        "Quantity",
        "Range",
        "Reference",
        "Signature",
        "UsageContext",
        "CodeableReference",
    }
)

CONFORMANCE_SUBSET_COMPLEX_TYPES = frozenset({"ElementDefinition", "RelatedArtifact"})

BASE_SUBSET_RESOURCES = frozenset({"Binary", "Bundle", "DomainResource", "OperationOutcome", "Parameters", "Resource"})

CONFORMANCE_SUBSET_RESOURCES = frozenset({"CapabilityStatement", "CodeSystem", "ElementDefinition", "StructureDefinition", "ValueSet"})

BASE_SUBSET_VALUE_SETS = frozenset(
    {
        "http://hl7.org/fhir/ValueSet/publication-status",
        "http://hl7.org/fhir/ValueSet/FHIR-version",
        "http://hl7.org/fhir/ValueSet/filter-operator",
    }
)

CONFORMANCE_SUBSET_VALUE_SETS = frozenset(
    {
        "http://hl7.org/fhir/ValueSet/capability-statement-kind",
        "http://hl7.org/fhir/ValueSet/binding-strength",
        "http://hl7.org/fhir/ValueSet/search-param-type",
        "http://hl7.org/fhir/ValueSet/restful-capability-mode",
        "http://hl7.org/fhir/ValueSet/type-restful-interaction",
        "http://hl7.org/fhir/ValueSet/system-restful-interaction",
        "http://hl7.org/fhir/ValueSet/constraint-severity",
        "http://hl7.org/fhir/ValueSet/codesystem-content-mode",
    }
)

# Types every target can represent; a choice limited to these (plus primitives)
# is usable on a restricted generation surface
SAFE_COMMON_SUBSET = BASE_SUBSET_COMPLEX_TYPES
