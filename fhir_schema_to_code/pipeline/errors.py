"""
Errors raised by the resolution engine.

Every error here is fatal for the current generation run: there is no
meaningful partial output, so callers must not consume any result once one
of these has been raised.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for fatal resolution failures.

    Attributes:
        entity: The schema entity (path, type name or URL) that triggered the error
        scope: The naming scope or owner in which the error was detected
    """

    def __init__(self, message: str, entity: str = "", scope: str = ""):
        self.entity = entity
        self.scope = scope
        details = []
        if entity:
            details.append(f"entity: {entity}")
        if scope:
            details.append(f"scope: {scope}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class AmbiguousNameError(ResolutionError):
    """Two distinct entities cannot be given distinct identifiers within a scope."""

    pass


class UnresolvedReferenceError(ResolutionError):
    """A type option or base type does not name any known schema node."""

    pass


class CyclicRecursionError(ResolutionError):
    """A structural chain recurses without a generic or optional breakpoint."""

    pass


class DuplicateManifestNameError(ResolutionError):
    """Two canonical schema names collide on the same resolved manifest name."""

    pass
