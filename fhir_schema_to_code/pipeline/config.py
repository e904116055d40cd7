"""
Configuration for the resolution pipeline.

Holds the per-run options and the naming style presets of every target the
renderers support. Naming styles are data only; the name resolver itself is
convention-agnostic.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from enum import Enum


class GenSubset(str, Enum):
    """Part of the schema resolved in one generation run."""

    ALL = "all"
    BASE = "base"  # Shared cross-version core
    CONFORMANCE = "conformance"  # Conformance resources and their data types
    SATELLITE = "satellite"  # Everything else (version specific)


class NamingConvention(str, Enum):
    """Word-boundary recasing applied to raw schema identifiers."""

    PASCAL_CASE = "pascal"
    CAMEL_CASE = "camel"
    UPPER_SNAKE_CASE = "upper_snake"
    SNAKE_CASE = "snake"
    LOWER_CASE = "lower"


# C# reserved keywords that need escaping
CS_RESERVED_KEYWORDS = frozenset(
    {
        "abstract",
        "as",
        "base",
        "bool",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "checked",
        "class",
        "const",
        "continue",
        "decimal",
        "default",
        "delegate",
        "do",
        "double",
        "else",
        "enum",
        "event",
        "explicit",
        "extern",
        "false",
        "finally",
        "fixed",
        "float",
        "for",
        "foreach",
        "goto",
        "if",
        "implicit",
        "in",
        "int",
        "interface",
        "internal",
        "is",
        "lock",
        "long",
        "namespace",
        "new",
        "null",
        "object",
        "operator",
        "out",
        "override",
        "params",
        "private",
        "protected",
        "public",
        "readonly",
        "ref",
        "return",
        "sbyte",
        "sealed",
        "short",
        "sizeof",
        "stackalloc",
        "static",
        "string",
        "struct",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "uint",
        "ulong",
        "unchecked",
        "unsafe",
        "ushort",
        "using",
        "virtual",
        "void",
        "volatile",
        "while",
    }
)

TS_RESERVED_WORDS = frozenset({"const", "enum", "export", "interface"})

PYTHON_RESERVED_WORDS = frozenset(keyword.kwlist) | frozenset(keyword.softkwlist)


@dataclass(frozen=True)
class NamingStyle:
    """A naming convention plus the reserved words of the consuming target.

    Attributes:
        convention: Recasing applied to raw names
        reserved_words: Identifiers the target cannot use as-is
        escape_prefix: Prepended to a name that collides with a reserved word
        escape_suffix: Appended to a name that collides with a reserved word
    """

    convention: NamingConvention = NamingConvention.PASCAL_CASE
    reserved_words: frozenset[str] = frozenset()
    escape_prefix: str = ""
    escape_suffix: str = "_"

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words

    def escape(self, name: str) -> str:
        return f"{self.escape_prefix}{name}{self.escape_suffix}"

    def with_reserved_words(self, extra: list[str]) -> NamingStyle:
        """Copy of this style with additional reserved words."""
        if not extra:
            return self
        return NamingStyle(
            convention=self.convention,
            reserved_words=self.reserved_words | frozenset(extra),
            escape_prefix=self.escape_prefix,
            escape_suffix=self.escape_suffix,
        )


@dataclass(frozen=True)
class TargetStyles:
    """Naming styles for each role an identifier can play in one target."""

    type_style: NamingStyle
    field_style: NamingStyle
    enum_style: NamingStyle
    member_style: NamingStyle

    # Schema type name -> target type name (applied before the type style)
    type_name_mappings: tuple[tuple[str, str], ...] = ()


TARGET_STYLES: dict[str, TargetStyles] = {
    "cs": TargetStyles(
        type_style=NamingStyle(NamingConvention.PASCAL_CASE, CS_RESERVED_KEYWORDS, escape_suffix="Type"),
        field_style=NamingStyle(NamingConvention.PASCAL_CASE, CS_RESERVED_KEYWORDS, escape_prefix="@", escape_suffix=""),
        enum_style=NamingStyle(NamingConvention.PASCAL_CASE, CS_RESERVED_KEYWORDS, escape_suffix="Type"),
        member_style=NamingStyle(NamingConvention.PASCAL_CASE, CS_RESERVED_KEYWORDS, escape_prefix="@", escape_suffix=""),
        type_name_mappings=(
            ("boolean", "FhirBoolean"),
            ("dateTime", "FhirDateTime"),
            ("decimal", "FhirDecimal"),
            ("Reference", "ResourceReference"),
            ("string", "FhirString"),
            ("uri", "FhirUri"),
            ("url", "FhirUrl"),
            ("xhtml", "XHtml"),
        ),
    ),
    "typescript": TargetStyles(
        type_style=NamingStyle(NamingConvention.PASCAL_CASE, TS_RESERVED_WORDS),
        field_style=NamingStyle(NamingConvention.CAMEL_CASE, TS_RESERVED_WORDS),
        enum_style=NamingStyle(NamingConvention.PASCAL_CASE, TS_RESERVED_WORDS),
        member_style=NamingStyle(NamingConvention.PASCAL_CASE, TS_RESERVED_WORDS),
    ),
    "python": TargetStyles(
        type_style=NamingStyle(NamingConvention.PASCAL_CASE, PYTHON_RESERVED_WORDS),
        field_style=NamingStyle(NamingConvention.SNAKE_CASE, PYTHON_RESERVED_WORDS),
        enum_style=NamingStyle(NamingConvention.PASCAL_CASE, PYTHON_RESERVED_WORDS),
        member_style=NamingStyle(NamingConvention.UPPER_SNAKE_CASE, PYTHON_RESERVED_WORDS),
    ),
    "info": TargetStyles(
        type_style=NamingStyle(NamingConvention.PASCAL_CASE),
        field_style=NamingStyle(NamingConvention.CAMEL_CASE),
        enum_style=NamingStyle(NamingConvention.PASCAL_CASE),
        member_style=NamingStyle(NamingConvention.PASCAL_CASE),
    ),
}


@dataclass
class ResolverConfig:
    """Configuration options for one resolution run."""

    # Target whose naming styles are applied ("cs", "typescript", "python", "info")
    language: str = "info"

    # Part of the schema resolved in this run
    subset: GenSubset = GenSubset.ALL

    # Top-level types to leave out of the run (still resolvable as references)
    ignore_types: list[str] = field(default_factory=list)

    # Additional value set URLs that never become enumerations
    value_set_exclusions: list[str] = field(default_factory=list)

    # Value set URL -> enumeration name
    enum_name_overrides: dict[str, str] = field(default_factory=dict)

    # Value set URLs shared even when only one type references them
    explicit_shared_value_sets: list[str] = field(default_factory=list)

    # Extra reserved words added to every naming style of the target
    extra_reserved_words: list[str] = field(default_factory=list)

    # Suffix appended to synthesized nested record names
    component_suffix: str = "Component"

    # Bound on the collision suffix search
    max_suffix_attempts: int = 1000

    # Display texts longer than this fall back to the code for member names
    max_display_length: int = 64

    # Add generation comment at top of rendered output
    add_generation_comment: bool = True

    def styles(self) -> TargetStyles:
        """Naming styles for the configured target, with extra reserved words applied."""
        if self.language not in TARGET_STYLES:
            raise ValueError(f"Language '{self.language}' is not supported")
        base = TARGET_STYLES[self.language]
        extra = self.extra_reserved_words
        return TargetStyles(
            type_style=base.type_style.with_reserved_words(extra),
            field_style=base.field_style.with_reserved_words(extra),
            enum_style=base.enum_style.with_reserved_words(extra),
            member_style=base.member_style.with_reserved_words(extra),
            type_name_mappings=base.type_name_mappings,
        )

    @staticmethod
    def from_dict(d: dict) -> ResolverConfig:
        """Create a config from a dictionary."""
        config = ResolverConfig()
        for k, v in d.items():
            if k == "language" and v not in TARGET_STYLES:
                raise ValueError(f"Language '{v}' is not supported")
            if k == "subset" and isinstance(v, str):
                config.subset = GenSubset(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "language": self.language,
            "subset": self.subset.value,
            "ignore_types": self.ignore_types,
            "value_set_exclusions": self.value_set_exclusions,
            "enum_name_overrides": self.enum_name_overrides,
            "explicit_shared_value_sets": self.explicit_shared_value_sets,
            "extra_reserved_words": self.extra_reserved_words,
            "component_suffix": self.component_suffix,
            "max_suffix_attempts": self.max_suffix_attempts,
            "max_display_length": self.max_display_length,
            "add_generation_comment": self.add_generation_comment,
        }
