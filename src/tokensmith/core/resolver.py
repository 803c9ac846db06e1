"""
Token resolver with inheritance.

Resolves a registered TokenSource by:
1. Resolving its parent chain (root first, memoized per source)
2. Flattening the parent's resolved tokens back into plain definitions
3. Merging the source's own tokens over them, per category and per key
4. Reducing references and computed values with a bounded fixed-point loop

Parents only pass down resolved strings. A child can override the result
of a parent's computed token but cannot re-parameterize its formula.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .compute import format_number
from .config import ResolverConfig, UnresolvedPolicy
from .errors import (
    ReferenceNotFoundError,
    ReservedCategoryError,
    SourceNotFoundError,
    UnresolvedTokenError,
)
from .expressions import contains_reference, is_literal, referenced_paths, resolve_value
from .ir.tokens import (
    RESERVED_CATEGORIES,
    STANDARD_CATEGORIES,
    ResolvedTokens,
    Theme,
    TokenDefinition,
    TokenSource,
    TokenValue,
)
from .registry import SourceRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# Merging
# =============================================================================


def merge_definitions(base: Mapping[str, Any], override: Mapping[str, Any]) -> TokenDefinition:
    """Merge two definitions; ``override`` wins per category and key."""
    merged: TokenDefinition = {category: dict(tokens) for category, tokens in base.items()}
    for category, tokens in override.items():
        if isinstance(tokens, Mapping):
            merged.setdefault(category, {}).update(tokens)
    return merged


def flatten_resolved(resolved: ResolvedTokens) -> TokenDefinition:
    """Turn resolved tokens back into a definition of plain string leaves."""
    return {category: dict(tokens) for category, tokens in resolved.items()}


def defines_token(definition: Mapping[str, Mapping[str, Any]], path: str) -> bool:
    """True if ``path`` names a ``category.key`` token in ``definition``."""
    parts = path.split(".")
    return len(parts) == 2 and parts[1] in definition.get(parts[0], {})


# =============================================================================
# Fixed-point reduction
# =============================================================================


def resolve_all_tokens(
    tokens: Mapping[str, Mapping[str, TokenValue]],
    *,
    max_passes: int = 10,
    on_unresolved: UnresolvedPolicy = UnresolvedPolicy.DROP,
    source_id: str | None = None,
) -> ResolvedTokens:
    """
    Reduce a merged definition to concrete strings.

    Literals are copied first. Then up to ``max_passes`` passes try every
    remaining token against the tokens resolved so far, which handles chained
    references in any declaration order.

    Args:
        tokens: Merged definition (category -> key -> TokenValue).
        max_passes: Upper bound on resolution passes.
        on_unresolved: Policy for tokens still unresolved after the last pass.
        source_id: Source being resolved, for log and error messages.

    Returns:
        Category -> key -> string. The standard categories are always present.

    Raises:
        ReferenceNotFoundError: If a token references a path that is not
            defined anywhere in ``tokens``.
        UnknownComputeFunctionError: If a computed token names an unknown function.
        ComputeError: If a compute function rejects its arguments.
        UnresolvedTokenError: Under the ``error`` policy, if tokens remain
            unresolved (reference cycles, or chains deeper than the budget).
    """
    resolved: ResolvedTokens = {category: {} for category in STANDARD_CATEGORIES}
    pending: dict[tuple[str, str], TokenValue] = {}

    for category, category_tokens in tokens.items():
        resolved.setdefault(category, {})
        for key, value in category_tokens.items():
            if is_literal(value):
                resolved[category][key] = (
                    value if isinstance(value, str) else format_number(value)
                )
            else:
                pending[(category, key)] = value

    failures: dict[tuple[str, str], ReferenceNotFoundError] = {}
    passes = 0
    changed = True
    while pending and changed and passes < max_passes:
        changed = False
        passes += 1
        for (category, key), value in list(pending.items()):
            try:
                result = resolve_value(value, resolved)
            except ReferenceNotFoundError as e:
                failures[(category, key)] = e
                continue
            if contains_reference(result):
                continue
            resolved[category][key] = result
            del pending[(category, key)]
            failures.pop((category, key), None)
            changed = True

    logger.debug(
        f"Resolved {source_id or 'definition'} in {passes} pass(es), {len(pending)} unresolved"
    )

    if not pending:
        return resolved

    # A path defined nowhere can never resolve, whatever else the token waits on.
    for (category, key), value in pending.items():
        error = failures.get((category, key))
        if error is not None and not defines_token(tokens, error.path):
            raise error
        for path in referenced_paths(value):
            if not defines_token(tokens, path):
                raise ReferenceNotFoundError(path)

    unresolved = [f"{category}.{key}" for category, key in pending]
    if on_unresolved == UnresolvedPolicy.ERROR:
        raise UnresolvedTokenError(unresolved, source_id)

    where = f" in source {source_id}" if source_id else ""
    logger.warning(
        f"Dropping {len(unresolved)} unresolved token(s){where}: {', '.join(sorted(unresolved))}"
    )
    return resolved


# =============================================================================
# Cache
# =============================================================================


class ResolutionCache:
    """Per-source memo of resolved tokens."""

    def __init__(self) -> None:
        self._entries: dict[str, ResolvedTokens] = {}

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, source_id: str) -> ResolvedTokens | None:
        return self._entries.get(source_id)

    def set(self, source_id: str, resolved: ResolvedTokens) -> None:
        self._entries[source_id] = resolved

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, source_id: str, registry: SourceRegistry) -> list[str]:
        """Drop ``source_id`` and every registered descendant.

        Returns:
            Ids visited, in invalidation order.
        """
        visited: list[str] = []
        stack = [source_id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.append(current)
            self._entries.pop(current, None)
            stack.extend(reversed(registry.children_of(current)))
        logger.debug(f"Invalidated cache for {', '.join(visited)}")
        return visited


# =============================================================================
# Resolver
# =============================================================================


class TokenResolver:
    """
    Registry, cache and resolution engine for one set of token sources.

    Instances are independent; nothing is shared between resolvers.

    Example:
        resolver = TokenResolver()
        resolver.register(TokenSource(id="base", name="Base", tokens={...}))
        resolver.create_extension("base", "brand-a", "Brand A", {"colors": {...}})
        theme = resolver.resolve_to_theme("brand-a")
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self.config = config or ResolverConfig()
        self._registry = SourceRegistry(self.config.max_inheritance_depth)
        self._cache = ResolutionCache()

    @property
    def registry(self) -> SourceRegistry:
        return self._registry

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    # -- registration ------------------------------------------------------

    def register(self, source: TokenSource) -> None:
        """Register or replace a source and invalidate dependent cache entries."""
        self._registry.register(source)
        self.invalidate_cache(source.id)

    def register_all(self, sources: Iterable[TokenSource]) -> None:
        for source in sources:
            self.register(source)

    def unregister(self, source_id: str) -> None:
        """Remove a source and invalidate it and its descendants."""
        self._registry.unregister(source_id)
        self.invalidate_cache(source_id)

    def invalidate_cache(self, source_id: str) -> None:
        self._cache.invalidate(source_id, self._registry)

    def get_source(self, source_id: str) -> TokenSource | None:
        return self._registry.get_source(source_id)

    def get_all_sources(self) -> list[TokenSource]:
        return self._registry.get_all_sources()

    def get_inheritance_chain(self, source_id: str) -> list[str]:
        return self._registry.get_inheritance_chain(source_id)

    def inherits_from(self, source_id: str, ancestor_id: str) -> bool:
        return self._registry.inherits_from(source_id, ancestor_id)

    def create_extension(
        self,
        parent_id: str,
        new_id: str,
        name: str,
        overrides: Mapping[str, Mapping[str, TokenValue]],
    ) -> TokenSource:
        """Register a new source that extends ``parent_id``.

        Raises:
            SourceNotFoundError: If the parent is not registered.
        """
        if parent_id not in self._registry:
            raise SourceNotFoundError(parent_id, f"Parent source not found: {parent_id}")

        source = TokenSource(
            id=new_id,
            name=name,
            extends=parent_id,
            tokens={category: dict(tokens) for category, tokens in overrides.items()},
        )
        self.register(source)
        return source

    # -- resolution --------------------------------------------------------

    def resolve_value(self, value: TokenValue, context: Mapping[str, Any]) -> str:
        return resolve_value(value, context)

    def resolve(self, source_id: str) -> ResolvedTokens:
        """
        Resolve a source and everything it inherits to concrete strings.

        Returns:
            Category -> key -> string; a copy the caller may modify.

        Raises:
            SourceNotFoundError: If the source or an ancestor is not registered.
            CircularInheritanceError: If the ``extends`` chain loops or is too deep.
            ReferenceNotFoundError: If a token references an undefined path.
            UnknownComputeFunctionError: If a computed token names an unknown function.
            UnresolvedTokenError: Under the ``error`` policy, for unresolvable tokens.
        """
        return copy.deepcopy(self._resolve_cached(source_id))

    def _resolve_cached(self, source_id: str) -> ResolvedTokens:
        cached = self._cache.get(source_id)
        if cached is not None:
            logger.debug(f"Cache hit for {source_id}")
            return cached

        if source_id not in self._registry:
            raise SourceNotFoundError(source_id)

        chain = self._registry.get_inheritance_chain(source_id)
        resolved: ResolvedTokens = {}
        for ancestor_id in reversed(chain):
            resolved = self._resolve_one(ancestor_id, resolved)
        return resolved

    def _resolve_one(self, source_id: str, parent_resolved: ResolvedTokens) -> ResolvedTokens:
        cached = self._cache.get(source_id)
        if cached is not None:
            return cached

        source = self._registry.get_source(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)

        merged = merge_definitions(flatten_resolved(parent_resolved), source.tokens)
        resolved = resolve_all_tokens(
            merged,
            max_passes=self.config.max_passes,
            on_unresolved=self.config.on_unresolved,
            source_id=source_id,
        )
        self._cache.set(source_id, resolved)
        return resolved

    def resolve_to_theme(self, source_id: str) -> Theme:
        """Resolve a source into a flat Theme for exporters and mappers.

        Raises:
            SourceNotFoundError: If the source is not registered.
            ReservedCategoryError: If a resolved category is named like a
                Theme field (``id``, ``name``, ``description``).
        """
        source = self._registry.get_source(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)

        resolved = self.resolve(source_id)
        reserved = RESERVED_CATEGORIES.intersection(resolved)
        if reserved:
            raise ReservedCategoryError(source_id, reserved)
        return Theme.model_validate({**resolved, "id": source.id, "name": source.name})
