"""
Token source validation.

Checks a set of token sources for problems that would make resolution fail,
or silently lose tokens, before any consumer asks for a resolved theme.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from .config import ResolverConfig, UnresolvedPolicy
from .errors import TokenError, UnknownComputeFunctionError, UnresolvedTokenError
from .ir.tokens import RESERVED_CATEGORIES, TokenComputed, TokenSource, parse_compute_function
from .resolver import TokenResolver


class SourceValidationResult:
    """Result of token source validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def __repr__(self) -> str:
        return f"SourceValidationResult(errors={len(self.errors)}, warnings={len(self.warnings)})"


def _check_compute_functions(source: TokenSource, result: SourceValidationResult) -> bool:
    ok = True
    for category, tokens in source.tokens.items():
        for key, value in tokens.items():
            if not isinstance(value, TokenComputed):
                continue
            try:
                parse_compute_function(value.fn)
            except UnknownComputeFunctionError as e:
                result.add_error(f"{source.id}: {category}.{key}: {e.message}")
                ok = False
    return ok


def _check_reserved_categories(source: TokenSource, result: SourceValidationResult) -> None:
    reserved = RESERVED_CATEGORIES.intersection(source.tokens)
    if reserved:
        result.add_error(
            f"{source.id}: reserved category name(s) cannot be exported as a theme: "
            f"{', '.join(sorted(reserved))}"
        )


def _resolves(
    resolver: TokenResolver,
    source_id: str,
    broken: set[str],
    outcomes: dict[str, bool],
    result: SourceValidationResult,
) -> bool:
    """Resolve one source once, reporting any failure against that source."""
    if source_id in broken or source_id not in resolver.registry:
        return False
    if source_id in outcomes:
        return outcomes[source_id]

    try:
        resolver.resolve(source_id)
        outcomes[source_id] = True
    except UnresolvedTokenError as e:
        result.add_warning(
            f"{source_id}: tokens cannot be resolved and would be dropped: {', '.join(e.tokens)}"
        )
        outcomes[source_id] = False
    except TokenError as e:
        result.add_error(f"{source_id}: {e.message}")
        outcomes[source_id] = False
    return outcomes[source_id]


def validate_sources(
    sources: Iterable[TokenSource],
    config: ResolverConfig | None = None,
) -> SourceValidationResult:
    """Validate token sources as they would be registered together.

    Each problem is reported once, against the source that causes it; a
    descendant of a failing source is not reported again.

    Args:
        sources: Sources to check. Later duplicates replace earlier ones.
        config: Resolver bounds to validate against.

    Returns:
        SourceValidationResult with errors and warnings.
    """
    result = SourceValidationResult()
    config = config or ResolverConfig()
    strict = TokenResolver(dataclasses.replace(config, on_unresolved=UnresolvedPolicy.ERROR))

    seen: set[str] = set()
    for source in sources:
        if source.id in seen:
            result.add_warning(f"{source.id}: duplicate source id, the last definition wins")
        seen.add(source.id)
        strict.register(source)

    broken: set[str] = set()
    for source in strict.get_all_sources():
        _check_reserved_categories(source, result)

        if source.extends and source.extends not in strict.registry:
            result.add_error(f"{source.id}: extends unknown source '{source.extends}'")
            broken.add(source.id)
            continue

        try:
            strict.get_inheritance_chain(source.id)
        except TokenError as e:
            result.add_error(f"{source.id}: {e.message}")
            broken.add(source.id)
            continue

        if not _check_compute_functions(source, result):
            broken.add(source.id)

    # Root first, so a failure is attributed to the ancestor that owns it.
    outcomes: dict[str, bool] = {}
    for source in strict.get_all_sources():
        if source.id in broken:
            continue
        for ancestor_id in reversed(strict.get_inheritance_chain(source.id)):
            if not _resolves(strict, ancestor_id, broken, outcomes, result):
                break

    return result
