"""
Name resolver for case conversion, reserved words and naming collisions.

Converts raw schema identifiers to the naming convention of a target and
keeps the names issued within each scope unique. The resolver knows nothing
about any particular target: conventions and reserved words come in through
a NamingStyle.
"""

from __future__ import annotations

import logging
from typing import Callable, Hashable

from ...utils import (
    to_camel_case,
    to_lower_case,
    to_pascal_case,
    to_snake_case,
    to_upper_snake_case,
)
from ..config import NamingConvention, NamingStyle
from ..errors import AmbiguousNameError
from .context import NameScope, ResolutionContext
from .ir_nodes import ResolvedName
from .tables import SYMBOL_LITERALS

logger = logging.getLogger(__name__)

CONVERTERS: dict[NamingConvention, Callable[[str], str]] = {
    NamingConvention.PASCAL_CASE: to_pascal_case,
    NamingConvention.CAMEL_CASE: to_camel_case,
    NamingConvention.UPPER_SNAKE_CASE: to_upper_snake_case,
    NamingConvention.SNAKE_CASE: to_snake_case,
    NamingConvention.LOWER_CASE: to_lower_case,
}

# Conventions whose identifiers start with a lower-case letter
_LOWER_CONVENTIONS = (NamingConvention.CAMEL_CASE, NamingConvention.SNAKE_CASE, NamingConvention.LOWER_CASE)


class NameResolver:
    """Resolves identifiers and handles collisions within naming scopes."""

    def __init__(self, context: ResolutionContext):
        """
        Initialize the resolver.

        Args:
            context: The per-run context holding the naming scopes
        """
        self.context = context
        self.max_attempts = context.config.max_suffix_attempts

    def convert(self, raw_name: str, style: NamingStyle) -> str:
        """
        Apply a naming style to a raw name, without any scope bookkeeping.

        Args:
            raw_name: Raw schema identifier ("entered-in-error", "valueQuantity")
            style: Convention and reserved words of the consuming target

        Returns:
            The converted identifier

        Raises:
            AmbiguousNameError: If no identifier can be formed from the raw name
        """
        text = SYMBOL_LITERALS.lookup(raw_name.strip(), raw_name)
        name = CONVERTERS[style.convention](text)
        if not name:
            raise AmbiguousNameError("Name has no identifier characters", entity=raw_name)

        if name[0].isdigit():
            name = ("n" if style.convention in _LOWER_CONVENTIONS else "N") + name

        return self.escape(name, style)

    def escape(self, name: str, style: NamingStyle) -> str:
        """Escape an already converted name if it is reserved in the target."""
        if style.is_reserved(name):
            return style.escape(name)
        return name

    def resolve(
        self,
        raw_name: str,
        scope: str | NameScope,
        style: NamingStyle,
        key: Hashable | None = None,
    ) -> ResolvedName:
        """
        Resolve a raw name within a scope.

        The first occurrence of a name keeps it unsuffixed; each later
        collision gets the smallest unused suffix starting at 2.

        Args:
            raw_name: Raw schema identifier
            scope: Scope name or scope object
            style: Naming style to apply
            key: Identity of the named entity; resolving the same key twice in a
                scope returns the name issued the first time

        Returns:
            The resolved name

        Raises:
            AmbiguousNameError: If the suffix search is exhausted
        """
        if isinstance(scope, str):
            scope = self.context.scope(scope)

        if key is not None and key in scope.by_key:
            return scope.by_key[key]

        return self.issue(self.convert(raw_name, style), scope, key)

    def issue(self, name: str, scope: NameScope, key: Hashable | None = None) -> ResolvedName:
        """Issue an already converted name in a scope, suffixing it on collision."""
        resolved = None
        if name not in scope:
            resolved = ResolvedName(name, 0)
        else:
            for index in range(2, self.max_attempts + 2):
                candidate = f"{name}_{index}"
                if candidate not in scope:
                    resolved = ResolvedName(candidate, index)
                    break

        if resolved is None:
            raise AmbiguousNameError(
                f"No free name after {self.max_attempts} suffix attempts",
                entity=name,
                scope=scope.name,
            )

        if resolved.suffix_index:
            logger.debug("Name collision in %s: %s -> %s", scope.name, name, resolved.value)

        scope.issued.add(resolved.value)
        if key is not None:
            scope.by_key[key] = resolved
        return resolved
