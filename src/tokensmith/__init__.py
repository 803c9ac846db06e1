"""
tokensmith - design token resolution with theme inheritance.

Lets one token source extend another, override individual tokens, reference
tokens by path and compute derived values, then resolves everything to
concrete strings.
"""

from __future__ import annotations

from ._version import get_version
from .core.config import ResolverConfig, UnresolvedPolicy
from .core.errors import (
    CircularInheritanceError,
    ComputeError,
    ConfigError,
    ReferenceNotFoundError,
    ReservedCategoryError,
    SourceFileError,
    SourceNotFoundError,
    TokenError,
    UnknownComputeFunctionError,
    UnresolvedTokenError,
)
from .core.ir import (
    ComputeFunction,
    Theme,
    TokenComputed,
    TokenReference,
    TokenSource,
    compute,
    ref,
    theme_to_token_source,
)
from .core.registry import SourceRegistry
from .core.resolver import ResolutionCache, TokenResolver

__version__ = get_version()

__all__ = [
    "__version__",
    # Engine
    "TokenResolver",
    "SourceRegistry",
    "ResolutionCache",
    "ResolverConfig",
    "UnresolvedPolicy",
    # Models
    "ComputeFunction",
    "Theme",
    "TokenComputed",
    "TokenReference",
    "TokenSource",
    "compute",
    "ref",
    "theme_to_token_source",
    # Errors
    "TokenError",
    "SourceNotFoundError",
    "ReferenceNotFoundError",
    "UnknownComputeFunctionError",
    "ComputeError",
    "CircularInheritanceError",
    "UnresolvedTokenError",
    "ConfigError",
    "SourceFileError",
    "ReservedCategoryError",
]
