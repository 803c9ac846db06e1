"""
Error types for token resolution, inheritance, and source loading.
"""

from __future__ import annotations

from collections.abc import Iterable


class TokenError(Exception):
    """Base exception for all tokensmith errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SourceNotFoundError(TokenError):
    """
    Raised when an operation names a token source that is not registered.

    Examples:
    - resolve() of an unknown id
    - create_extension() with an unknown parent
    - a source whose ``extends`` points at a missing parent
    """

    def __init__(self, source_id: str, message: str | None = None):
        self.source_id = source_id
        super().__init__(message or f"Token source not found: {source_id}")


class ReferenceNotFoundError(TokenError):
    """
    Raised when a ``$ref`` or inline ``{path}`` cannot be traversed.

    Also raised when the path lands on a category instead of a token.
    """

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Token reference not found: {path}")


class UnknownComputeFunctionError(TokenError):
    """Raised when a ``$compute`` name is not in the compute function table."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown compute function: {name}")


class ComputeError(TokenError):
    """
    Raised when a compute function cannot evaluate its arguments.

    Examples:
    - scale("auto", 2): no numeric magnitude
    - clamp("4px"): wrong argument count
    """

    pass


class CircularInheritanceError(TokenError):
    """Raised when an ``extends`` chain loops or exceeds the depth bound."""

    def __init__(self, source_id: str, chain: Iterable[str] = ()):
        self.source_id = source_id
        self.chain = list(chain)
        message = f"Circular inheritance detected for source: {source_id}"
        if self.chain:
            message += f" ({' -> '.join(self.chain[:8])}{' -> ...' if len(self.chain) > 8 else ''})"
        super().__init__(message)


class UnresolvedTokenError(TokenError):
    """
    Raised when tokens remain unresolved after the fixed-point budget.

    Only raised under the ``error`` unresolved policy; the default policy
    logs and drops them instead.
    """

    def __init__(self, tokens: Iterable[str], source_id: str | None = None):
        self.tokens = sorted(tokens)
        self.source_id = source_id
        where = f" in source {source_id}" if source_id else ""
        super().__init__(f"Unresolved tokens{where}: {', '.join(self.tokens)}")


class ConfigError(TokenError):
    """Raised when tokensmith.toml cannot be read or holds invalid values."""

    pass


class SourceFileError(TokenError):
    """Raised when a token-source file cannot be loaded or saved."""

    pass


class ReservedCategoryError(TokenError):
    """Raised when a token category name collides with a Theme field (id, name, description)."""

    def __init__(self, source_id: str, categories: Iterable[str]):
        self.source_id = source_id
        self.categories = sorted(categories)
        super().__init__(
            f"Token source {source_id} uses reserved category name(s): "
            f"{', '.join(self.categories)}"
        )
