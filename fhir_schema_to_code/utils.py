"""
Utility functions for the FHIR schema to code generator.
"""

import re

# Regex pattern to split text into words, handling camelCase and acronym boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")

# Anything that cannot take part in an identifier
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, punctuation) to spaces."""
    return _NON_IDENTIFIER.sub(" ", text)


def split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries.

    Examples:
        "valueCodeableConcept" -> ["value", "Codeable", "Concept"]
        "HTTPVerb" -> ["HTTP", "Verb"]
        "v3-ActCode" -> ["v", "3", "Act", "Code"]
    """
    return _WORD_PATTERN.findall(_normalize_separators(text))


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, kebab-case or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "ABC" -> "Abc"
        "Full" -> "Full"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    return _capitalize_and_join(split_into_words(text))


def to_camel_case(text: str) -> str:
    """Convert text to camelCase ("entry_request" -> "entryRequest")."""
    words = split_into_words(text)
    if not words:
        return ""
    return words[0].lower() + _capitalize_and_join(words[1:])


def to_upper_snake_case(text: str) -> str:
    """Convert text to UPPER_SNAKE_CASE ("entered-in-error" -> "ENTERED_IN_ERROR")."""
    return "_".join(word.upper() for word in split_into_words(text))


def to_snake_case(text: str) -> str:
    """Convert text to snake_case ("valueQuantity" -> "value_quantity")."""
    return "_".join(word.lower() for word in split_into_words(text))


def to_lower_case(text: str) -> str:
    """Convert text to a single lowercase word ("CodeSystem" -> "codesystem")."""
    return "".join(word.lower() for word in split_into_words(text))


def capitalize_path_segments(path: str) -> str:
    """Upper-case the first character of every dotted segment and drop the dots.

    Unlike to_pascal_case, the rest of each segment keeps its raw casing:
        ".citedArtifact.relatesTo" -> "CitedArtifactRelatesTo"
        "statistic.sampleSize" -> "StatisticSampleSize"
    """
    return "".join(segment[:1].upper() + segment[1:] for segment in path.split(".") if segment)


def strip_choice_marker(name: str) -> str:
    """Remove the trailing "[x]" marker from a choice element name."""
    if name.endswith("[x]"):
        return name[:-3]
    return name


def parent_path(path: str) -> str:
    """Return the dotted path without its last segment ("" for a root path)."""
    if "." not in path:
        return ""
    return path.rsplit(".", 1)[0]


def unversioned_url(url: str) -> str:
    """Drop a "|version" suffix from a canonical URL."""
    return url.split("|", 1)[0]
