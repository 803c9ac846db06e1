"""
Token IR package.

Re-exports the token value, source and theme models.
"""

from .tokens import (
    RESERVED_CATEGORIES,
    STANDARD_CATEGORIES,
    ComputeFunction,
    ResolvedTokens,
    Theme,
    TokenComputed,
    TokenDefinition,
    TokenReference,
    TokenSource,
    TokenValue,
    compute,
    parse_compute_function,
    ref,
    theme_to_token_source,
)

__all__ = [
    "RESERVED_CATEGORIES",
    "STANDARD_CATEGORIES",
    "ComputeFunction",
    "ResolvedTokens",
    "Theme",
    "TokenComputed",
    "TokenDefinition",
    "TokenReference",
    "TokenSource",
    "TokenValue",
    "compute",
    "parse_compute_function",
    "ref",
    "theme_to_token_source",
]
